"""Ownership checks run before every mutation."""

from flask import current_app

from backend.errors import AccessDenied, NotAuthenticated, NotFound
from models import db, Node, TaskList


def require_user(user):
    if user is None:
        raise NotAuthenticated()
    return user


def _user_id(user):
    return getattr(user, 'id', user)


def authorize_list(user, list_id):
    """Return the list when `user` owns it; NotFound / AccessDenied otherwise."""
    user_id = _user_id(require_user(user))
    todo_list = db.session.get(TaskList, list_id) if list_id else None
    if todo_list is None:
        raise NotFound('List not found')
    if todo_list.user_id != user_id:
        current_app.logger.warning("User %s denied access to list %s", user_id, list_id)
        raise AccessDenied('List not found or access denied')
    return todo_list


def authorize_node(user, node_id):
    """Return (node, list) when the node's list is owned by `user`."""
    user_id = _user_id(require_user(user))
    node = db.session.get(Node, node_id) if node_id else None
    if node is None:
        raise NotFound('Node not found')
    todo_list = db.session.get(TaskList, node.list_id)
    if todo_list is None or todo_list.user_id != user_id:
        current_app.logger.warning("User %s denied access to node %s", user_id, node_id)
        raise AccessDenied('Access denied')
    return node, todo_list


def authorize_lists(user, list_ids):
    """Authorize every id before anything is written; returns id -> list."""
    return {list_id: authorize_list(user, list_id) for list_id in list_ids}


def authorize_nodes(user, node_ids, list_id=None):
    """
    Authorize every node id. With `list_id`, nodes from another list are
    rejected as well so one reorder never spans two lists.
    """
    found = {}
    for node_id in node_ids:
        node, todo_list = authorize_node(user, node_id)
        if list_id is not None and todo_list.id != list_id:
            raise AccessDenied('Node does not belong to this list')
        found[node_id] = node
    return found
