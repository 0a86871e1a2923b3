"""Parent/child hierarchy of nodes within a list."""

from backend import ordering
from backend.errors import NotFound, ValidationFailure
from backend.task_state import NodeState, state_rank
from models import db, Node
from services.validation_service import parse_due_date


def _field(node, name):
    if isinstance(node, dict):
        return node.get(name)
    return getattr(node, name, None)


def composite_sort_key(node):
    """State rank, then due date (missing last), then text, case-insensitive first."""
    due = parse_due_date(_field(node, 'due_date'))
    text = _field(node, 'text') or ''
    return (
        state_rank(_field(node, 'state')),
        due is None,
        due.toordinal() if due else 0,
        text.casefold(),
        text,
        str(_field(node, 'id') or ''),
    )


def sort_nodes(nodes):
    return sorted(nodes, key=composite_sort_key)


def build_tree(flat_nodes):
    """
    Group a flat node collection into sorted root nodes with nested `children`.

    Input items are dicts (as produced by Node.to_dict) or Node instances; the
    output is always dicts and the input is left untouched. A node whose parent
    is not in the input is rendered as a root.
    """
    by_id = {}
    ordered_ids = []
    for node in flat_nodes:
        data = dict(node) if isinstance(node, dict) else node.to_dict()
        data['children'] = []
        if data['id'] not in by_id:
            ordered_ids.append(data['id'])
        by_id[data['id']] = data

    roots = []
    for node_id in ordered_ids:
        data = by_id[node_id]
        parent_id = data.get('parent_id')
        if parent_id and parent_id != node_id and parent_id in by_id:
            by_id[parent_id]['children'].append(data)
        else:
            roots.append(data)

    for data in by_id.values():
        data['children'].sort(key=composite_sort_key)
    roots.sort(key=composite_sort_key)

    # A parent cycle has no root to hang from; surface its members as roots.
    reachable = set()
    stack = list(roots)
    while stack:
        data = stack.pop()
        reachable.add(data['id'])
        stack.extend(data['children'])
    if len(reachable) < len(by_id):
        for node_id in ordered_ids:
            if node_id not in reachable:
                data = by_id[node_id]
                parent = by_id.get(data.get('parent_id'))
                if parent is not None:
                    parent['children'] = [child for child in parent['children'] if child is not data]
                roots.append(data)
                stack = [data]
                while stack:
                    current = stack.pop()
                    reachable.add(current['id'])
                    stack.extend(current['children'])
        roots.sort(key=composite_sort_key)
    return roots


def iter_tree(roots):
    """Depth-first walk over a built tree."""
    for data in roots:
        yield data
        yield from iter_tree(data['children'])


def ancestor_ids(parent_id, parent_of):
    """Ids reached by following `parent_of` upwards from `parent_id` (inclusive)."""
    seen = []
    current = parent_id
    while current is not None and current not in seen:
        seen.append(current)
        current = parent_of.get(current)
    return seen


def validate_parent(node_id, list_id, parent):
    """
    Reject a parent from another list or one that would close a cycle.

    `node_id` is None for a node that does not exist yet (no cycle possible).
    """
    if parent is None:
        return
    if parent.list_id != list_id:
        raise ValidationFailure('Parent node belongs to a different list')
    if node_id is None:
        return
    if parent.id == node_id:
        raise ValidationFailure('A node cannot be its own parent')
    parent_of = dict(
        db.session.query(Node.id, Node.parent_id).filter(Node.list_id == list_id).all()
    )
    if node_id in ancestor_ids(parent.id, parent_of):
        raise ValidationFailure('Moving a node under its own descendant would create a cycle')


def load_parent(parent_id, list_id):
    if parent_id is None:
        return None
    parent = db.session.get(Node, parent_id)
    if parent is None:
        raise NotFound('Parent node not found')
    validate_parent(None, list_id, parent)
    return parent


def add_child(todo_list, parent_id=None, text='', state=NodeState.RED, due_date=None):
    """Append a node to the end of the (list, parent) sibling scope."""
    parent = load_parent(parent_id, todo_list.id)
    return ordering.append(
        Node,
        {'list_id': todo_list.id, 'parent_id': parent.id if parent else None},
        text=text,
        state=NodeState(state).value,
        due_date=due_date,
    )


def move_node(node, parent_id):
    """Re-parent a node (None promotes it to the root) and append it to the new scope."""
    if parent_id == node.parent_id:
        return node
    parent = None
    if parent_id is not None:
        parent = db.session.get(Node, parent_id)
        if parent is None:
            raise NotFound('Parent node not found')
        validate_parent(node.id, node.list_id, parent)

    old_parent_id = node.parent_id
    node.order_index = ordering.next_order(Node, list_id=node.list_id, parent_id=parent_id)
    node.parent_id = parent.id if parent else None
    db.session.flush()
    ordering.reindex(ordering.scope_items(Node, list_id=node.list_id, parent_id=old_parent_id))
    return node


def delete_node(node):
    """
    Delete one node. Children are not deleted: they are promoted to the root
    scope after the existing roots, then the old sibling scope is compacted.
    """
    list_id = node.list_id
    old_parent_id = node.parent_id
    children = ordering.scope_items(Node, list_id=list_id, parent_id=node.id)
    start = ordering.next_order(Node, list_id=list_id, parent_id=None)
    for offset, child in enumerate(children):
        child.parent_id = None
        child.order_index = start + offset
    db.session.delete(node)
    db.session.flush()
    ordering.reindex(ordering.scope_items(Node, list_id=list_id, parent_id=old_parent_id))
    return [child.id for child in children]
