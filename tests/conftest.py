import os

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('SECRET_KEY', 'test-secret')

import pytest

import app as app_module
from models import db


@pytest.fixture
def app():
    flask_app = app_module.app
    flask_app.config['TESTING'] = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def other_client(app):
    return app.test_client()


def sign_up(client, username):
    resp = client.post('/api/create-user', json={'username': username})
    assert resp.status_code == 201
    return resp.get_json()['user_id']


@pytest.fixture
def user_id(client):
    return sign_up(client, 'alice')


@pytest.fixture
def other_user_id(other_client):
    return sign_up(other_client, 'bob')
