"""
Models package

Class Hierarchy:
    User (base) - Library members who borrow books (user.py)
    └── Admin - Catalog administrators, never borrow (user.py)
    Guest - Null object for anonymous visitors (guest.py)

Book holds catalog rows; Circulation owns every state change of a book.
"""
from library_app.models.book import Book
from library_app.models.circulation import Catalog, Circulation
from library_app.models.database import Database, close_db, create_schema, drop_schema, get_db
from library_app.models.guest import Guest
from library_app.models.session import SessionContext, SessionStore
from library_app.models.system_log import SystemLog
from library_app.models.user import Admin, User, get_user_by_role

__all__ = [
    'User', 'Admin', 'Guest', 'get_user_by_role',
    'Book', 'Catalog', 'Circulation',
    'SessionContext', 'SessionStore', 'SystemLog',
    'Database', 'get_db', 'close_db', 'create_schema', 'drop_schema',
]
