"""Revision tokens that let clients poll for changes instead of subscribing."""

from backend.errors import ValidationFailure


def touch_list(todo_list):
    """
    Bump a list's revision; call on any change to the list or its nodes.

    The owner's list scope is bumped too, since list summaries carry the
    node breakdown.
    """
    todo_list.revision = (todo_list.revision or 0) + 1
    if todo_list.owner is not None:
        touch_user_lists(todo_list.owner)
    return todo_list.revision


def touch_user_lists(user):
    """Bump the revision of the user's list scope (create, rename, reorder, delete)."""
    user.lists_revision = (user.lists_revision or 0) + 1
    return user.lists_revision


def parse_since(raw):
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationFailure('since must be an integer revision')


def unchanged(current_revision, since):
    return since is not None and since == current_revision


def not_modified_payload(revision):
    return {'changed': False, 'revision': revision}
