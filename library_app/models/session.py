"""Server-side login sessions.

The browser only ever holds an opaque token (inside Flask's signed cookie).
User id, username, role and the absolute expiry live in the ``sessions``
table, so a session can be revoked or expire independently of the cookie.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from library_app.errors import AuthorizationError, Unauthenticated
from library_app.models.database import Database

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def utcnow() -> datetime:
    """Naive UTC now, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


@dataclass(frozen=True)
class SessionContext:
    """Identity attached to a live session."""

    token: str
    user_id: int
    username: str
    role: str
    expires_at: datetime

    def is_admin(self) -> bool:
        return self.role == 'admin'

    def require_role(self, *roles: str) -> None:
        """Raise AuthorizationError unless the session holds one of ``roles``."""
        if self.role not in roles:
            wanted = '/'.join(role.capitalize() for role in roles)
            raise AuthorizationError(f'Forbidden: {wanted} access required')


class SessionStore:
    """Creates, resolves and revokes sessions.

    Args:
        db: Persistence adapter holding the ``sessions`` table.
        lifetime: Absolute session lifetime, counted from creation.
        clock: Returns the current naive UTC time; injectable for tests.
    """

    def __init__(self, db: Database, lifetime: timedelta = timedelta(hours=1),
                 clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.lifetime = lifetime
        self.clock = clock

    def create(self, user) -> SessionContext:
        """Open a session for an authenticated user."""
        now = self.clock()
        context = SessionContext(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            username=user.username,
            role=user.role,
            expires_at=now + self.lifetime,
        )
        self.db.execute('''
            INSERT INTO sessions (token, user_id, username, role, created_at, expires_at)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (context.token, context.user_id, context.username, context.role,
              now.strftime(TIMESTAMP_FORMAT),
              context.expires_at.strftime(TIMESTAMP_FORMAT)))
        logger.info('Session opened for %s (expires %s)', user.username, context.expires_at)
        return context

    def get(self, token: Optional[str]) -> Optional[SessionContext]:
        """Resolve a token, or None if it is unknown or expired."""
        if not token:
            return None
        row = self.db.query_one('SELECT * FROM sessions WHERE token = ?', (token,))
        if row is None:
            return None

        expires_at = datetime.strptime(row['expires_at'], TIMESTAMP_FORMAT)
        if self.clock() >= expires_at:
            self.destroy(token)
            logger.info('Session for %s expired', row['username'])
            return None

        return SessionContext(
            token=row['token'],
            user_id=row['user_id'],
            username=row['username'],
            role=row['role'],
            expires_at=expires_at,
        )

    def require(self, token: Optional[str]) -> SessionContext:
        context = self.get(token)
        if context is None:
            raise Unauthenticated()
        return context

    def destroy(self, token: Optional[str]) -> None:
        """Revoke a session. Unknown tokens are ignored."""
        if token:
            self.db.execute('DELETE FROM sessions WHERE token = ?', (token,))

    def purge_expired(self) -> int:
        """Delete every expired session and return how many were removed."""
        result = self.db.execute(
            'DELETE FROM sessions WHERE expires_at <= ?',
            (self.clock().strftime(TIMESTAMP_FORMAT),)
        )
        return result.affected_rows
