from services.calendar_feed_routes import feed_user_id


def test_ping(client):
    resp = client.get('/ping')
    assert resp.status_code == 200
    assert resp.data == b'pong'
    assert resp.headers['Content-Type'].startswith('text/plain')


def test_feed_user_id_is_the_bare_query_string():
    assert feed_user_id('http://localhost/calendar?abc123') == 'abc123'
    assert feed_user_id('http://localhost/calendar') == ''
    assert feed_user_id('http://localhost/calendar?abc?extra') == 'abc'


def test_calendar_feed_for_user(client, user_id):
    list_id = client.post('/api/lists', json={'name': 'Home'}).get_json()['id']
    client.post(f'/api/lists/{list_id}/nodes', json={'text': 'Pay rent\nCall landlord first', 'due_date': '2024-03-15'})
    client.post(f'/api/lists/{list_id}/nodes', json={'text': 'Someday'})
    client.post(f'/api/lists/{list_id}/nodes', json={'text': 'Typo', 'due_date': '2024-13-45'})
    client.post('/api/logout')

    resp = client.get(f'/calendar?{user_id}')
    assert resp.status_code == 200
    assert resp.headers['Content-Type'] == 'text; charset=utf-8'
    assert resp.headers['Content-Disposition'] == f'attachment; filename="tasks-{user_id}.ics"'

    body = resp.get_data(as_text=True)
    assert body.startswith('BEGIN:VCALENDAR\r\nVERSION:2.0\r\n')
    assert body.count('BEGIN:VEVENT') == 1
    assert 'SUMMARY:Pay rent\r\n' in body
    assert 'DESCRIPTION:Call landlord first\r\n' in body
    assert 'DTSTART;VALUE=DATE:20240315\r\n' in body
    assert 'DTEND;VALUE=DATE:20240316\r\n' in body
    assert 'Someday' not in body
    assert 'Typo' not in body


def test_calendar_feed_for_unknown_or_missing_user_is_empty(client):
    for url in ('/calendar?nobody', '/calendar'):
        resp = client.get(url)
        assert resp.status_code == 200
        body = resp.get_data(as_text=True)
        assert 'BEGIN:VCALENDAR' in body
        assert 'BEGIN:VEVENT' not in body
