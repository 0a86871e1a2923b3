import uuid
from datetime import datetime

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy

from backend.task_state import NodeState, state_breakdown

db = SQLAlchemy()


def _new_id():
    return uuid.uuid4().hex


class User(UserMixin, db.Model):
    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    username = db.Column(db.String(80), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    # Polling token for the user's list scope, bumped by any list or node change
    lists_revision = db.Column(db.Integer, nullable=False, default=0)

    lists = db.relationship('TaskList', backref='owner', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class TaskList(db.Model):
    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    name = db.Column(db.String(200), nullable=False, default='')
    user_id = db.Column(db.String(32), db.ForeignKey('user.id'), nullable=False, index=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    revision = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    nodes = db.relationship(
        'Node',
        backref='list',
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Node.order_index"
    )

    def get_breakdown(self):
        return state_breakdown(self.nodes)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'user_id': self.user_id,
            'order': self.order_index,
            'revision': self.revision,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'breakdown': self.get_breakdown(),
        }


class Node(db.Model):
    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    list_id = db.Column(db.String(32), db.ForeignKey('task_list.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False, default='')
    state = db.Column(db.String(10), nullable=False, default=NodeState.RED.value)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    due_date = db.Column(db.String(40), nullable=True)  # stored as supplied, e.g. '2024-03-15'
    parent_id = db.Column(db.String(32), db.ForeignKey('node.id'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'list_id': self.list_id,
            'text': self.text,
            'state': self.state,
            'order': self.order_index,
            'due_date': self.due_date,
            'parent_id': self.parent_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
