"""Authentication and authorization decorators.

This module contains decorators for protecting routes and checking user roles.
Both resolve the session token through ``SessionStore.require``, so an
anonymous or expired session raises ``Unauthenticated`` and the application
error handler sends the browser to the login page.
"""
import logging
from functools import wraps
from typing import Callable

from library_app.errors import AuthorizationError
from library_app.utils.context import require_identity

logger = logging.getLogger(__name__)


def login_required(f: Callable) -> Callable:
    """Decorator to require user login for a route.

    Example:
        @main_bp.route('/')
        @login_required
        def index():
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        require_identity()
        return f(*args, **kwargs)
    return decorated_function


def role_required(*roles: str) -> Callable:
    """Decorator to require specific user roles for a route.

    Args:
        *roles: Role names allowed to call the view (e.g., 'admin').

    Raises:
        Unauthenticated: no live session.
        AuthorizationError: the logged-in user holds none of ``roles``.

    Example:
        @admin_bp.route('/admin')
        @login_required
        @role_required('admin')
        def dashboard():
            ...
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            identity = require_identity()
            try:
                identity.require_role(*roles)
            except AuthorizationError:
                logger.warning('%s (%s) denied access to %s',
                               identity.username, identity.role, f.__name__)
                raise
            return f(*args, **kwargs)
        return decorated_function
    return decorator
