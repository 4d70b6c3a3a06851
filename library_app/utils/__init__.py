"""Utilities package for the library circulation system.

This package contains the route decorators and the helpers that build
request-scoped models from the application configuration.
"""
from library_app.utils.context import get_circulation, get_session_store, require_identity
from library_app.utils.decorators import login_required, role_required

__all__ = [
    'get_circulation',
    'get_session_store',
    'login_required',
    'require_identity',
    'role_required',
]
