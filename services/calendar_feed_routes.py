"""Unauthenticated endpoints: health check and the ICS task feed."""

from backend.ics_feed import generate_feed


def ping():
    import app as a

    return a.app.response_class('pong', status=200, headers={'Content-Type': 'text/plain'})


def feed_user_id(url):
    """The user id is passed as a bare query string: everything after the first '?'."""
    parts = (url or '').split('?')
    if len(parts) < 2:
        return ''
    return parts[1]


def calendar_feed():
    """
    Calendar of the user's due-dated tasks. Knowing the opaque user id is the
    only credential; an unknown id gets an empty calendar, not an error.
    """
    import app as a

    request = a.request

    user_id = feed_user_id(request.url)
    body = generate_feed(user_id)
    a.app.logger.info("Generated calendar feed for %s", user_id or '<missing id>')
    return a.app.response_class(
        body,
        status=200,
        headers={
            'Content-Type': 'text; charset=utf-8',
            'Content-Disposition': f'attachment; filename="tasks-{user_id}.ics"',
        },
    )
