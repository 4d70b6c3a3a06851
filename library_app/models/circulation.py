"""Book lifecycle: borrow, return and catalog maintenance.

A book is either Available or Borrowed. Borrow and return are single
conditional UPDATE statements guarded by the expected prior status, so two
requests racing on the same book cannot both win. When the guard matches no
row, the book is re-read only to pick the right error.
"""
import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, NamedTuple

from library_app.errors import (
    AlreadyBorrowed,
    AuthorizationError,
    BookOnLoan,
    NotBorrowed,
    NotFoundError,
    ValidationError,
)
from library_app.models.book import AVAILABLE, BORROWED, DATE_FORMAT, Book
from library_app.models.database import Database
from library_app.models.system_log import SystemLog

logger = logging.getLogger(__name__)


class Catalog(NamedTuple):
    books: List[Book]
    my_books: List[Book]


def _clean(title: str, author: str):
    title = (title or '').strip()
    author = (author or '').strip()
    if not title or not author:
        raise ValidationError('Title and author are required')
    return title, author


class Circulation:
    """Owns every state change of a book.

    Args:
        db: Persistence adapter.
        loan_period_days: Calendar days between borrow and due date.
        fine_per_day: Penalty per overdue day.
        today: Returns the current local date; injectable for tests.
    """

    def __init__(self, db: Database, loan_period_days: int = 30, fine_per_day: int = 5,
                 today: Callable[[], date] = date.today) -> None:
        self.db = db
        self.loan_period_days = loan_period_days
        self.fine_per_day = fine_per_day
        self.today = today

    # ==================== TRANSITIONS ====================

    def borrow(self, book_id: int, user) -> Book:
        """Lend an Available book to a member.

        Raises:
            AuthorizationError: the acting user is an admin.
            NotFoundError: no such book.
            AlreadyBorrowed: the book is not Available.
        """
        if user.is_admin():
            raise AuthorizationError('Admins cannot borrow books. Please use a member account.')

        due_date = self.today() + timedelta(days=self.loan_period_days)
        with self.db.transaction():
            result = self.db.execute('''
                UPDATE books
                SET status = ?, borrowed_by_user_id = ?, due_date = ?
                WHERE id = ? AND status = ?
            ''', (BORROWED, user.id, due_date.strftime(DATE_FORMAT), book_id, AVAILABLE))

            if result.affected_rows == 0:
                if Book.get_by_id(self.db, book_id) is None:
                    raise NotFoundError('Book not found')
                raise AlreadyBorrowed()

            book = Book.get_by_id(self.db, book_id)
            SystemLog.add(
                self.db, 'Book Borrowed',
                f'{user.username} borrowed "{book.title}" (due {book.due_date})',
                'info', user.id
            )

        logger.info('Book %s borrowed by %s, due %s', book_id, user.username, due_date)
        return book

    def return_book(self, book_id: int, user) -> Book:
        """Hand a Borrowed book back.

        Members may only return their own loans; admins may return any.

        Raises:
            NotFoundError: no such book.
            AuthorizationError: a member returning someone else's loan.
            NotBorrowed: the book is already Available.
        """
        with self.db.transaction():
            book = Book.get_by_id(self.db, book_id)
            if book is None:
                raise NotFoundError('Book not found')

            result = self.db.execute('''
                UPDATE books
                SET status = ?, borrowed_by_user_id = NULL, due_date = NULL
                WHERE id = ? AND status = ? AND (borrowed_by_user_id = ? OR ?)
            ''', (AVAILABLE, book_id, BORROWED, user.id, int(user.is_admin())))

            if result.affected_rows == 0:
                current = Book.get_by_id(self.db, book_id)
                if current is None:
                    raise NotFoundError('Book not found')
                if current.is_borrowed:
                    logger.warning('%s tried to return book %s held by user %s',
                                   user.username, book_id, current.borrowed_by_user_id)
                    raise AuthorizationError('You are not authorized to return this book')
                raise NotBorrowed()

            SystemLog.add(
                self.db, 'Book Returned',
                f'{user.username} returned "{book.title}"'
                + (f' on behalf of {book.borrower_username}' if user.is_admin() else ''),
                'admin' if user.is_admin() else 'info', user.id
            )

        logger.info('Book %s returned by %s', book_id, user.username)
        return Book.get_by_id(self.db, book_id)

    # ==================== CATALOG MAINTENANCE ====================

    def add_book(self, user, title: str, author: str) -> int:
        """Create an Available book and return its id."""
        self._require_admin(user)
        title, author = _clean(title, author)
        with self.db.transaction():
            result = self.db.execute(
                'INSERT INTO books (title, author) VALUES (?, ?)', (title, author)
            )
            SystemLog.add(self.db, 'Book Added', f'"{title}" by {author}', 'admin', user.id)
        logger.info('Book %s added: %s by %s', result.inserted_id, title, author)
        return result.inserted_id

    def edit_book(self, user, book_id: int, title: str, author: str) -> Book:
        """Change title and author; circulation state is left alone."""
        self._require_admin(user)
        title, author = _clean(title, author)
        with self.db.transaction():
            result = self.db.execute(
                'UPDATE books SET title = ?, author = ? WHERE id = ?',
                (title, author, book_id)
            )
            if result.affected_rows == 0:
                raise NotFoundError('Book not found')
            SystemLog.add(self.db, 'Book Edited', f'#{book_id} is now "{title}" by {author}',
                          'admin', user.id)
        return Book.get_by_id(self.db, book_id)

    def delete_book(self, user, book_id: int) -> None:
        """Remove an Available book. Borrowed books must be returned first."""
        self._require_admin(user)
        with self.db.transaction():
            book = Book.get_by_id(self.db, book_id)
            if book is None:
                raise NotFoundError('Book not found')
            result = self.db.execute(
                'DELETE FROM books WHERE id = ? AND status = ?', (book_id, AVAILABLE)
            )
            if result.affected_rows == 0:
                raise BookOnLoan()
            SystemLog.add(self.db, 'Book Deleted', f'"{book.title}" by {book.author}',
                          'admin', user.id)
        logger.info('Book %s deleted by %s', book_id, user.username)

    def get_book(self, book_id: int) -> Book:
        book = Book.get_by_id(self.db, book_id)
        if book is None:
            raise NotFoundError('Book not found')
        return book

    # ==================== READS ====================

    def list_catalog(self, user) -> Catalog:
        """All books with fines, plus the acting member's own loans.

        Admins never hold loans, so their ``my_books`` is always empty.
        """
        today = self.today()
        books = Book.get_all(self.db)
        for book in books:
            if book.is_borrowed:
                book.fine = Book.calculate_fine(book.due_date, today, self.fine_per_day)

        if user.is_admin():
            my_books = []
        else:
            my_books = [book for book in books if book.is_borrowed_by(user.id)]
        return Catalog(books, my_books)

    def get_stats(self) -> Dict[str, int]:
        """Counters for the admin dashboard."""
        return {
            'total_books': Book.get_total_count(self.db),
            'borrowed': Book.count_by_status(self.db, BORROWED),
            'overdue': Book.get_overdue_count(self.db, self.today()),
        }

    @staticmethod
    def _require_admin(user) -> None:
        if not user.is_admin():
            raise AuthorizationError('Forbidden: Admin access required')
