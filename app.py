import os

from dotenv import load_dotenv
from flask import Flask, request, jsonify, session, url_for
from werkzeug.exceptions import HTTPException

load_dotenv()

from models import db, User, TaskList, Node
from services import calendar_feed_routes, list_routes, node_routes, user_routes

app = Flask(__name__)
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///dotlist.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['PERMANENT_SESSION_LIFETIME'] = 365 * 24 * 60 * 60  # 1 year in seconds
app.config['API_SHARED_KEY'] = os.environ.get('API_SHARED_KEY')  # Optional shared key for API callers
app.config['CALENDAR_PRODID'] = os.environ.get('CALENDAR_PRODID', '-//dotlist-lite//EN')
app.config['CALENDAR_NAME'] = os.environ.get('CALENDAR_NAME', 'Dotlite Lite Tasks')

db.init_app(app)


def get_current_user():
    """Resolve the current user from a shared API key + user id header, else fall back to session."""
    # Header-based auth for service callers
    api_key = request.headers.get('X-API-Key')
    api_user_id = (request.headers.get('X-User-Id') or '').strip()
    shared_key = app.config.get('API_SHARED_KEY')
    if shared_key and api_key and api_user_id and api_key == shared_key:
        user = db.session.get(User, api_user_id)
        if user:
            return user

    # Session-based auth for browser users
    user_id = session.get('user_id')
    if user_id:
        return db.session.get(User, user_id)
    return None


with app.app_context():
    db.create_all()


@app.errorhandler(HTTPException)
def handle_http_error(exc):
    """Roll back whatever the failed request staged and answer with JSON for API callers."""
    db.session.rollback()
    if request.path.startswith('/api/'):
        return jsonify({'error': exc.description}), exc.code
    return exc


@app.errorhandler(Exception)
def handle_unexpected_error(exc):
    db.session.rollback()
    app.logger.error("Unhandled error on %s %s: %s", request.method, request.path, exc)
    return jsonify({'error': 'Internal server error'}), 500


# Health / calendar feed (unauthenticated)
@app.route('/ping')
def ping():
    return calendar_feed_routes.ping()

@app.route('/calendar')
def calendar_feed():
    return calendar_feed_routes.calendar_feed()

# User Selection Routes
@app.route('/api/create-user', methods=['POST'])
def create_user():
    return user_routes.create_user()

@app.route('/api/set-user/<user_id>', methods=['POST'])
def set_user(user_id):
    return user_routes.set_user(user_id)

@app.route('/api/logout', methods=['POST'])
def logout_user():
    return user_routes.logout_user()

@app.route('/api/current-user')
def current_user_info():
    return user_routes.current_user_info()

@app.route('/api/initialize', methods=['POST'])
def initialize_user_lists():
    return user_routes.initialize_user_lists()

# Lists
@app.route('/api/lists', methods=['GET', 'POST'])
def handle_lists():
    return list_routes.handle_lists()

@app.route('/api/lists/reorder', methods=['POST'])
def reorder_lists():
    return list_routes.reorder_lists()

@app.route('/api/lists/<list_id>', methods=['GET', 'PUT', 'DELETE'])
def handle_list(list_id):
    return list_routes.handle_list(list_id)

# Nodes
@app.route('/api/lists/<list_id>/tree', methods=['GET'])
def list_tree(list_id):
    return node_routes.list_tree(list_id)

@app.route('/api/lists/<list_id>/nodes', methods=['POST'])
def create_node(list_id):
    return node_routes.create_node(list_id)

@app.route('/api/lists/<list_id>/reorder', methods=['POST'])
def reorder_nodes(list_id):
    return node_routes.reorder_nodes(list_id)

@app.route('/api/nodes/<node_id>', methods=['PUT', 'DELETE'])
def handle_node(node_id):
    return node_routes.handle_node(node_id)

@app.route('/api/nodes/<node_id>/advance', methods=['POST'])
def advance_node(node_id):
    return node_routes.advance_node(node_id)

@app.route('/api/nodes/<node_id>/move', methods=['POST'])
def move_node(node_id):
    return node_routes.move_node(node_id)


if __name__ == '__main__':
    app.run(host='0.0.0.0', debug=True)
