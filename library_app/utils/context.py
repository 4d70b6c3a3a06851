"""Per-request wiring of models to the application configuration."""
from flask import current_app, g, session

from library_app.models.circulation import Circulation
from library_app.models.database import get_db
from library_app.models.session import SessionContext, SessionStore


def get_session_store() -> SessionStore:
    return SessionStore(get_db(), lifetime=current_app.config['SESSION_LIFETIME'])


def require_identity() -> SessionContext:
    """Live session behind the request cookie.

    Raises:
        Unauthenticated: no session token, or the session has expired.
    """
    identity = get_session_store().require(session.get('sid'))
    g.identity = identity
    return identity


def get_circulation() -> Circulation:
    return Circulation(
        get_db(),
        loan_period_days=current_app.config['LOAN_PERIOD_DAYS'],
        fine_per_day=current_app.config['FINE_PER_DAY'],
    )
