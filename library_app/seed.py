"""Schema bootstrap and demo data.

Modes:
- bootstrap(reset=False) -> create missing tables, keep data
- bootstrap(reset=True)  -> drop every table and recreate it (ALL data is lost;
  meant for tests and throwaway demos)

Seeding is separate from schema management and idempotent: the admin is
created only if missing, the sample books only into an empty catalog.
"""
import logging
from typing import Optional

from library_app.errors import ConfigurationError
from library_app.models.database import Database, create_schema, drop_schema
from library_app.models.system_log import SystemLog
from library_app.models.user import ADMIN, User

logger = logging.getLogger(__name__)

SEED_BOOKS = (
    ('1984', 'George Orwell'),
    ('Dune', 'Frank Herbert'),
    ('The Hobbit', 'J.R.R. Tolkien'),
    ('To Kill a Mockingbird', 'Harper Lee'),
    ('The Great Gatsby', 'F. Scott Fitzgerald'),
    ('Pride and Prejudice', 'Jane Austen'),
    ('The Catcher in the Rye', 'J.D. Salinger'),
    ('Brave New World', 'Aldous Huxley'),
    ('The Lord of the Rings', 'J.R.R. Tolkien'),
    ('Animal Farm', 'George Orwell'),
)


def seed_admin(db: Database, username: str, password: Optional[str]) -> Optional[int]:
    """Create the admin account unless it already exists.

    Returns:
        The new admin's id, or None if the account was already there.
    """
    if User.get_by_username(db, username) is not None:
        return None
    if not password:
        raise ConfigurationError(
            'LIBRARY_ADMIN_PASSWORD must be set to create the admin account'
        )
    admin_id = User.register(db, username, password, role=ADMIN)
    logger.info('Admin user %s created with ID: %s', username, admin_id)
    return admin_id


def seed_books(db: Database) -> int:
    """Insert the sample books into an empty catalog. Returns the count added."""
    if db.query_one('SELECT COUNT(*) AS count FROM books')['count'] > 0:
        return 0
    with db.transaction():
        for title, author in SEED_BOOKS:
            db.execute('INSERT INTO books (title, author) VALUES (?, ?)', (title, author))
    logger.info('Seeded %d books', len(SEED_BOOKS))
    return len(SEED_BOOKS)


def bootstrap(db: Database, reset: bool = False, seed: bool = True,
              admin_username: str = 'admin', admin_password: Optional[str] = None) -> None:
    """Prepare the database at startup."""
    if reset:
        logger.warning('Resetting database: all existing data will be lost')
        drop_schema(db)
    create_schema(db)

    if seed:
        seed_admin(db, admin_username, admin_password)
        added = seed_books(db)
        if added:
            SystemLog.add(db, 'Database Seeded', f'{added} sample books added', 'system')
