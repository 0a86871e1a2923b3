"""List-centric routes extracted from app.py for readability."""

from backend import access, ordering, read_model
from services.validation_service import clean_id_list, normalize_name


def handle_lists():
    import app as a

    TaskList = a.TaskList
    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = access.require_user(get_current_user())

    if request.method == 'POST':
        data = request.get_json(silent=True) or {}
        name = normalize_name(data.get('name'))
        new_list = ordering.append(TaskList, {'user_id': user.id}, name=name)
        read_model.touch_user_lists(user)
        db.session.commit()
        a.app.logger.info("User %s created list %s", user.id, new_list.id)
        return jsonify(new_list.to_dict()), 201

    since = read_model.parse_since(request.args.get('since'))
    if read_model.unchanged(user.lists_revision, since):
        return jsonify(read_model.not_modified_payload(user.lists_revision))
    lists = TaskList.query.filter_by(user_id=user.id).order_by(
        TaskList.order_index.asc(), TaskList.created_at.asc()
    ).all()
    return jsonify({
        'changed': True,
        'revision': user.lists_revision,
        'lists': [l.to_dict() for l in lists],
    })


def reorder_lists():
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = access.require_user(get_current_user())
    data = request.get_json(silent=True) or {}
    ids = clean_id_list(data.get('ids'))

    # Every id is checked before the first write
    list_map = access.authorize_lists(user, ids)
    updated = ordering.reorder(list_map, ids)
    read_model.touch_user_lists(user)
    db.session.commit()
    return jsonify({'updated': updated})


def handle_list(list_id):
    import app as a

    Node = a.Node
    TaskList = a.TaskList
    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = get_current_user()
    todo_list = access.authorize_list(user, list_id)

    if request.method == 'DELETE':
        nodes = Node.query.filter_by(list_id=todo_list.id).all()
        removed = len(nodes)
        # Children reference their parents; clear those links before the cascade
        for node in nodes:
            node.parent_id = None
        db.session.flush()
        db.session.delete(todo_list)
        db.session.flush()
        ordering.reindex(ordering.scope_items(TaskList, user_id=user.id))
        read_model.touch_user_lists(user)
        db.session.commit()
        a.app.logger.info("User %s deleted list %s with %s nodes", user.id, list_id, removed)
        return '', 204

    if request.method == 'PUT':
        data = request.get_json(silent=True) or {}
        if 'name' in data:
            todo_list.name = normalize_name(data.get('name'))
        read_model.touch_list(todo_list)
        db.session.commit()
        return jsonify(todo_list.to_dict())

    return jsonify(todo_list.to_dict())
