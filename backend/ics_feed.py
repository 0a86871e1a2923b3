"""ICS (RFC 5545) feed of a user's due-dated tasks.

One all-day, transparent VEVENT per node with a parseable due date. The feed is
rebuilt from scratch on every request; nothing is cached.
"""

from datetime import datetime, timedelta

import pytz
from flask import current_app
from icalendar import Calendar, Event

from models import Node, TaskList
from services.validation_service import parse_due_date

DEFAULT_PRODID = '-//dotlist-lite//EN'
DEFAULT_NAME = 'Dotlite Lite Tasks'


def split_text(text):
    """First line is the summary, the remaining lines are the description."""
    lines = (text or '').split('\n')
    return lines[0].rstrip('\r'), '\n'.join(lines[1:])


def build_event(node, stamp):
    """
    VEVENT for one node, or None when the node has no usable due date.

    `node` may be a Node or its dict form.
    """
    if isinstance(node, dict):
        node_id, text, due_raw = node.get('id'), node.get('text'), node.get('due_date')
    else:
        node_id, text, due_raw = node.id, node.text, node.due_date
    if not due_raw:
        return None
    start = parse_due_date(due_raw)
    if start is None:
        return None
    summary, description = split_text(text)

    event = Event()
    event.add('uid', str(node_id))
    event.add('dtstamp', stamp.astimezone(pytz.UTC))
    # date values render as VALUE=DATE; DTEND is exclusive
    event.add('dtstart', start)
    event.add('dtend', start + timedelta(days=1))
    event.add('summary', summary)
    if description:
        event.add('description', description)
    event.add('transp', 'TRANSPARENT')
    return event


def render_calendar(events, prodid=DEFAULT_PRODID, name=DEFAULT_NAME):
    calendar = Calendar()
    calendar.add('version', '2.0')
    calendar.add('prodid', prodid)
    calendar.add('name', name)
    for event in events:
        calendar.add_component(event)
    return calendar.to_ical().decode('utf-8')


def collect_due_nodes(user_id):
    """All of the user's nodes that carry a due date, lists and nodes in manual order."""
    if not user_id:
        return []
    lists = TaskList.query.filter_by(user_id=user_id).order_by(TaskList.order_index.asc()).all()
    nodes = []
    for todo_list in lists:
        nodes.extend(
            Node.query.filter(Node.list_id == todo_list.id, Node.due_date.isnot(None))
            .order_by(Node.order_index.asc())
            .all()
        )
    return [node for node in nodes if node.due_date]


def generate_feed(user_id, now=None):
    """Full ICS document for `user_id`; an unknown id gives an empty calendar."""
    stamp = now or datetime.now(pytz.UTC)
    events = []
    for node in collect_due_nodes(user_id):
        event = build_event(node, stamp)
        if event is None:
            current_app.logger.warning("Skipping node %s in calendar feed: unparseable due date %r", node.id, node.due_date)
            continue
        events.append(event)
    config = current_app.config
    return render_calendar(
        events,
        prodid=config.get('CALENDAR_PRODID') or DEFAULT_PRODID,
        name=config.get('CALENDAR_NAME') or DEFAULT_NAME,
    )
