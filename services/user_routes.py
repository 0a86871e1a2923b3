"""User/session routes extracted from app.py for readability."""

from backend import access, ordering, read_model
from backend.task_state import NodeState

DEFAULT_LIST_NAME = 'My List'
DEFAULT_NODE_TEXTS = ('Item 1', 'Item 2', 'Item 3')


def create_user():
    import app as a

    User = a.User
    db = a.db
    jsonify = a.jsonify
    request = a.request
    session = a.session

    data = request.get_json(silent=True) or {}
    username = str(data.get('username') or '').strip()

    if not username:
        return jsonify({'error': 'Username is required'}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=username)
    db.session.add(user)
    db.session.commit()

    # Automatically set as current user
    session['user_id'] = user.id
    session.permanent = True

    return jsonify({'success': True, 'user_id': user.id, 'username': user.username}), 201


def set_user(user_id):
    import app as a

    User = a.User
    db = a.db
    jsonify = a.jsonify
    session = a.session

    user = db.get_or_404(User, user_id)
    session['user_id'] = user.id
    session.permanent = True  # Make session persistent across browser restarts
    return jsonify({'success': True, 'username': user.username, 'user_id': user.id})


def logout_user():
    import app as a

    session = a.session
    session.pop('user_id', None)
    return a.jsonify({'success': True})


def current_user_info():
    import app as a

    jsonify = a.jsonify
    url_for = a.url_for

    user = a.get_current_user()
    if user:
        # The bare id is the query string: /calendar?<user_id>
        feed_url = url_for('calendar_feed', _external=True) + '?' + user.id
        return jsonify({'user_id': user.id, 'username': user.username, 'calendar_url': feed_url})
    return jsonify({'user_id': None, 'username': None, 'calendar_url': None})


def initialize_user_lists():
    """First sign-in bootstrap: a default list with three red items, only when the user has none."""
    import app as a

    Node = a.Node
    TaskList = a.TaskList
    db = a.db
    jsonify = a.jsonify

    user = access.require_user(a.get_current_user())
    existing = TaskList.query.filter_by(user_id=user.id).order_by(TaskList.order_index.asc()).first()
    if existing:
        return jsonify({'list_id': existing.id, 'created': False})

    todo_list = ordering.append(TaskList, {'user_id': user.id}, name=DEFAULT_LIST_NAME)
    for text in DEFAULT_NODE_TEXTS:
        ordering.append(
            Node,
            {'list_id': todo_list.id, 'parent_id': None},
            text=text,
            state=NodeState.RED.value,
        )
    read_model.touch_user_lists(user)
    db.session.commit()
    a.app.logger.info("Initialized default list %s for user %s", todo_list.id, user.id)
    return jsonify({'list_id': todo_list.id, 'created': True}), 201
