"""Book model module.

This module defines the Book model and the overdue fine rule.
"""
from datetime import date, datetime
from typing import List, Optional, Union

from library_app.models.database import Database

AVAILABLE = 'Available'
BORROWED = 'Borrowed'
DATE_FORMAT = '%Y-%m-%d'

_SELECT_BOOKS = '''
    SELECT books.id, books.title, books.author, books.status,
           books.borrowed_by_user_id, books.due_date,
           users.username AS borrower_username
    FROM books
    LEFT JOIN users ON books.borrowed_by_user_id = users.id
'''


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return datetime.strptime(value, DATE_FORMAT).date()


class Book:
    """Represents a book in the catalog.

    Attributes:
        id (int): Unique identifier for the book.
        title (str): Book title.
        author (str): Book author name.
        status (str): 'Available' or 'Borrowed'.
        borrowed_by_user_id (int): Borrower, set only while Borrowed.
        due_date (date): Return deadline, set only while Borrowed.
        borrower_username (str): Borrower's username when loaded via a join.
        fine (int): Overdue fine, filled in by the catalog listing.
    """

    def __init__(self, id: int, title: str, author: str, status: str = AVAILABLE,
                 borrowed_by_user_id: Optional[int] = None,
                 due_date: Union[str, date, None] = None,
                 borrower_username: Optional[str] = None, **kwargs) -> None:
        self.id = int(id)
        self.title = title
        self.author = author
        self.status = status
        self.borrowed_by_user_id = borrowed_by_user_id
        self.due_date = parse_date(due_date)
        self.borrower_username = borrower_username
        self.fine: Optional[int] = None

    def __repr__(self) -> str:
        return f'<Book {self.id} {self.title!r} {self.status}>'

    @property
    def is_borrowed(self) -> bool:
        return self.status == BORROWED

    @property
    def is_available(self) -> bool:
        return self.status == AVAILABLE

    def is_borrowed_by(self, user_id: Optional[int]) -> bool:
        return self.is_borrowed and user_id is not None and self.borrowed_by_user_id == user_id

    @staticmethod
    def calculate_fine(due_date: Optional[date], today: date, rate_per_day: int) -> Optional[int]:
        """Fine for a loan due on ``due_date`` as of ``today``.

        Whole calendar days only: a book due yesterday owes one day.
        Returns None when nothing is owed.
        """
        if due_date is None or today <= due_date:
            return None
        return (today - due_date).days * rate_per_day

    @staticmethod
    def get_by_id(db: Database, book_id: int) -> Optional['Book']:
        """Retrieve a book by its ID, or None."""
        row = db.query_one(_SELECT_BOOKS + ' WHERE books.id = ?', (book_id,))
        return Book(**row) if row else None

    @staticmethod
    def get_all(db: Database) -> List['Book']:
        """Retrieve the whole catalog in id order."""
        rows = db.query_all(_SELECT_BOOKS + ' ORDER BY books.id')
        return [Book(**row) for row in rows]

    @staticmethod
    def count_by_status(db: Database, status: str) -> int:
        row = db.query_one('SELECT COUNT(*) AS count FROM books WHERE status = ?', (status,))
        return row['count']

    @staticmethod
    def get_total_count(db: Database) -> int:
        return db.query_one('SELECT COUNT(*) AS count FROM books')['count']

    @staticmethod
    def get_overdue_count(db: Database, today: date) -> int:
        row = db.query_one(
            'SELECT COUNT(*) AS count FROM books WHERE status = ? AND due_date < ?',
            (BORROWED, today.strftime(DATE_FORMAT))
        )
        return row['count']
