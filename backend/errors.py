"""Failure taxonomy shared by the route handlers and the core engines.

Each failure is a werkzeug HTTP exception so a handler can simply raise it;
the app-level error handler renders `{'error': description}` and rolls back
the session, which keeps every mutation all-or-nothing.
"""

from werkzeug.exceptions import BadRequest, Forbidden, NotFound as _HTTPNotFound, Unauthorized


class NotAuthenticated(Unauthorized):
    description = 'Not authenticated'


class NotFound(_HTTPNotFound):
    description = 'Not found'


class AccessDenied(Forbidden):
    description = 'Access denied'


class ValidationFailure(BadRequest):
    description = 'Invalid request'
