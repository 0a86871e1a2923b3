from datetime import datetime

import pytz

from backend.ics_feed import (
    build_event,
    generate_feed,
    render_calendar,
    split_text,
)
from models import db, Node, TaskList, User

STAMP = datetime(2024, 3, 1, 12, 30, 0, tzinfo=pytz.UTC)


def test_split_text_first_line_is_summary():
    assert split_text('Pay rent\nCall landlord first') == ('Pay rent', 'Call landlord first')
    assert split_text('Just a title') == ('Just a title', '')
    assert split_text('a\nb\nc') == ('a', 'b\nc')


def test_text_values_are_escaped():
    event = build_event({'id': 'n1', 'text': 'Title\na;b,c\\d\ne', 'due_date': '2024-03-15'}, STAMP)
    calendar = render_calendar([event])
    assert r'DESCRIPTION:a\;b\,c\\d\ne' + '\r\n' in calendar


def test_long_lines_are_folded_within_75_octets():
    event = build_event({'id': 'n1', 'text': 'x' * 200, 'due_date': '2024-03-15'}, STAMP)
    calendar = render_calendar([event])
    lines = calendar.split('\r\n')
    assert all(len(line.encode('utf-8')) <= 75 for line in lines)
    start = next(i for i, line in enumerate(lines) if line.startswith('SUMMARY:'))
    assert lines[start + 1].startswith(' ')
    unfolded = calendar.replace('\r\n ', '')
    assert 'SUMMARY:' + 'x' * 200 + '\r\n' in unfolded


def test_build_event_for_dated_node():
    node = {'id': 'n1', 'text': 'Pay rent\nCall landlord first', 'due_date': '2024-03-15'}
    event = build_event(node, STAMP)
    calendar = render_calendar([event])
    assert 'SUMMARY:Pay rent\r\n' in calendar
    assert 'DESCRIPTION:Call landlord first\r\n' in calendar
    assert 'DTSTART;VALUE=DATE:20240315\r\n' in calendar
    assert 'DTEND;VALUE=DATE:20240316\r\n' in calendar
    assert 'UID:n1\r\n' in calendar
    assert 'DTSTAMP:20240301T123000Z\r\n' in calendar
    assert 'TRANSP:TRANSPARENT\r\n' in calendar


def test_build_event_skips_missing_and_unparseable_dates():
    assert build_event({'id': 'a', 'text': 'x', 'due_date': None}, STAMP) is None
    assert build_event({'id': 'b', 'text': 'x', 'due_date': 'tomorrow-ish'}, STAMP) is None


def test_event_without_description_omits_the_property():
    event = build_event({'id': 'a', 'text': 'Title only', 'due_date': '2024-12-31'}, STAMP)
    calendar = render_calendar([event])
    assert 'DESCRIPTION' not in calendar
    assert 'DTEND;VALUE=DATE:20250101\r\n' in calendar


def test_calendar_envelope():
    calendar = render_calendar([], prodid='-//test//EN', name='Test Tasks')
    assert calendar == (
        'BEGIN:VCALENDAR\r\n'
        'VERSION:2.0\r\n'
        'PRODID:-//test//EN\r\n'
        'NAME:Test Tasks\r\n'
        'END:VCALENDAR\r\n'
    )


def _seed(owner_name='carol'):
    user = User(username=owner_name)
    db.session.add(user)
    db.session.flush()
    todo_list = TaskList(name='Home', user_id=user.id, order_index=0)
    db.session.add(todo_list)
    db.session.flush()
    return user, todo_list


def test_generate_feed_includes_only_valid_dated_nodes(app):
    user, todo_list = _seed()
    db.session.add_all([
        Node(list_id=todo_list.id, text='Pay rent\nCall landlord first', due_date='2024-03-15', order_index=0),
        Node(list_id=todo_list.id, text='No date', order_index=1),
        Node(list_id=todo_list.id, text='Broken', due_date='not a date', order_index=2),
    ])
    db.session.commit()

    calendar = generate_feed(user.id, now=STAMP)
    assert calendar.count('BEGIN:VEVENT') == 1
    assert 'SUMMARY:Pay rent' in calendar
    assert 'No date' not in calendar
    assert 'Broken' not in calendar
    assert 'PRODID:-//dotlist-lite//EN' in calendar


def test_generate_feed_ignores_other_users_nodes(app):
    user, _ = _seed('dave')
    _, other_list = _seed('erin')
    db.session.add(Node(list_id=other_list.id, text='Not mine', due_date='2024-05-01'))
    db.session.commit()

    assert 'BEGIN:VEVENT' not in generate_feed(user.id, now=STAMP)


def test_generate_feed_for_unknown_user_is_empty(app):
    calendar = generate_feed('does-not-exist', now=STAMP)
    assert calendar.startswith('BEGIN:VCALENDAR\r\n')
    assert calendar.endswith('END:VCALENDAR\r\n')
    assert 'BEGIN:VEVENT' not in calendar
