"""Node route handlers: creation, edits, state changes, nesting and ordering."""

from backend import access, node_tree, ordering, read_model
from backend.errors import ValidationFailure
from backend.task_state import advance, parse_state, state_breakdown
from services.validation_service import (
    clean_id_list,
    normalize_due_date,
    normalize_text,
    optional_id,
    parse_steps,
)


def list_tree(list_id):
    """Nodes of one list as a sorted tree, with the per-state breakdown."""
    import app as a

    Node = a.Node
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    todo_list = access.authorize_list(get_current_user(), list_id)
    since = read_model.parse_since(request.args.get('since'))
    if read_model.unchanged(todo_list.revision, since):
        return jsonify(read_model.not_modified_payload(todo_list.revision))

    nodes = Node.query.filter_by(list_id=todo_list.id).order_by(Node.order_index.asc()).all()
    return jsonify({
        'changed': True,
        'revision': todo_list.revision,
        'list': {'id': todo_list.id, 'name': todo_list.name, 'order': todo_list.order_index},
        'nodes': node_tree.build_tree(nodes),
        'breakdown': state_breakdown(nodes),
    })


def create_node(list_id):
    """Create a node at the root or under `parent_id`; defaults to an empty red node."""
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    todo_list = access.authorize_list(get_current_user(), list_id)
    data = request.get_json(silent=True) or {}
    new_node = node_tree.add_child(
        todo_list,
        parent_id=optional_id(data.get('parent_id')),
        text=normalize_text(data.get('text')),
        state=parse_state(data.get('state')),
        due_date=normalize_due_date(data.get('due_date')),
    )
    read_model.touch_list(todo_list)
    db.session.commit()
    a.app.logger.info("Created node %s in list %s", new_node.id, todo_list.id)
    return jsonify(new_node.to_dict()), 201


def reorder_nodes(list_id):
    """
    Manual drag-and-drop order for one sibling scope of a list.

    `parent_id` names the scope (null for the top level); every id must sit in it.
    """
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = get_current_user()
    todo_list = access.authorize_list(user, list_id)
    data = request.get_json(silent=True) or {}
    ids = clean_id_list(data.get('ids'))
    parent_id = optional_id(data.get('parent_id'))

    node_map = access.authorize_nodes(user, ids, list_id=todo_list.id)
    outside = [node_id for node_id, node in node_map.items() if node.parent_id != parent_id]
    if outside:
        raise ValidationFailure('Nodes outside the sibling scope: %s' % ', '.join(outside))
    updated = ordering.reorder(node_map, ids)
    read_model.touch_list(todo_list)
    db.session.commit()
    return jsonify({'updated': updated})


def handle_node(node_id):
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    node, todo_list = access.authorize_node(get_current_user(), node_id)

    if request.method == 'DELETE':
        promoted = node_tree.delete_node(node)
        read_model.touch_list(todo_list)
        db.session.commit()
        a.app.logger.info("Deleted node %s from list %s (%s children promoted)", node_id, todo_list.id, len(promoted))
        return '', 204

    data = request.get_json(silent=True) or {}
    if 'text' in data:
        node.text = normalize_text(data.get('text'))
    if 'due_date' in data:
        node.due_date = normalize_due_date(data.get('due_date'))
    read_model.touch_list(todo_list)
    db.session.commit()
    return jsonify(node.to_dict())


def advance_node(node_id):
    """Step the node's state: 1 for the primary action, 2 for the secondary one."""
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    node, todo_list = access.authorize_node(get_current_user(), node_id)
    data = request.get_json(silent=True) or {}
    steps = parse_steps(data.get('steps'))
    node.state = advance(node.state, steps).value
    read_model.touch_list(todo_list)
    db.session.commit()
    return jsonify(node.to_dict())


def move_node(node_id):
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    node, todo_list = access.authorize_node(get_current_user(), node_id)
    data = request.get_json(silent=True) or {}
    if 'parent_id' not in data:
        raise ValidationFailure('parent_id is required (null moves the node to the top level)')
    node_tree.move_node(node, optional_id(data.get('parent_id')))
    read_model.touch_list(todo_list)
    db.session.commit()
    return jsonify(node.to_dict())
