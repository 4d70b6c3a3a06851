"""User model module.

Acts as a Factory for User/Admin and handles registration and credential
checks.
"""
import logging
from typing import Any, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from library_app.errors import (
    ConstraintViolation,
    DuplicateUsername,
    InvalidCredentials,
    ValidationError,
)
from library_app.models.database import Database

logger = logging.getLogger(__name__)

MEMBER = 'member'
ADMIN = 'admin'
ROLES = (MEMBER, ADMIN)


class User:
    """A library member: can borrow and return books."""

    def __init__(self, id, username, role=MEMBER, password=None, **kwargs):
        self.id = int(id)
        self.username = username
        self.role = role
        self.password = password

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.username}>'

    # --- Permission checks ---
    def is_admin(self) -> bool:
        return False

    def can_borrow(self) -> bool:
        return True

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user password."""
        if not self.password:
            return False
        return check_password_hash(self.password, password)

    # --- Lookups ---
    @staticmethod
    def get_by_id(db: Database, user_id: int) -> Optional['User']:
        """Factory Method: Get User or Admin instance by ID."""
        row = db.query_one('SELECT * FROM users WHERE id = ?', (user_id,))
        return get_user_by_role(row) if row else None

    @staticmethod
    def get_by_username(db: Database, username: str) -> Optional['User']:
        row = db.query_one('SELECT * FROM users WHERE username = ?', (username,))
        return get_user_by_role(row) if row else None

    @staticmethod
    def from_session(context) -> 'User':
        """Rebuild the acting user from a session without a database hit."""
        return get_user_by_role({
            'id': context.user_id,
            'username': context.username,
            'role': context.role,
        })

    # --- Registration & login ---
    @staticmethod
    def register(db: Database, username: str, password: str, role: str = MEMBER) -> int:
        """Create a new account and return its id.

        The username's UNIQUE constraint decides duplicates, so two
        concurrent registrations cannot both succeed.

        Raises:
            ValidationError: username or password missing, or unknown role.
            DuplicateUsername: the username is taken.
        """
        username = (username or '').strip()
        if not username or not password:
            raise ValidationError('Username and password are required')
        if role not in ROLES:
            raise ValidationError(f'Unknown role: {role}')

        try:
            result = db.execute(
                'INSERT INTO users (username, password, role) VALUES (?, ?, ?)',
                (username, generate_password_hash(password), role)
            )
        except ConstraintViolation as exc:
            raise DuplicateUsername() from exc

        logger.info('Registered %s %s (id=%s)', role, username, result.inserted_id)
        return result.inserted_id

    @staticmethod
    def authenticate(db: Database, username: str, password: str) -> 'User':
        """Return the user whose credentials match.

        Raises:
            ValidationError: username or password missing.
            InvalidCredentials: unknown username or wrong password.
        """
        username = (username or '').strip()
        if not username or not password:
            raise ValidationError('Username and password are required')

        user = User.get_by_username(db, username)
        if user is None or not user.check_password(password):
            logger.warning('Failed login for %r', username)
            raise InvalidCredentials()
        return user


class Admin(User):
    """Administrator: manages the catalog, never borrows."""

    def is_admin(self) -> bool:
        return True

    def can_borrow(self) -> bool:
        return False


def get_user_by_role(data: Dict[str, Any]) -> User:
    """Build the right class for a user row."""
    if data.get('role') == ADMIN:
        return Admin(**data)
    return User(**data)
