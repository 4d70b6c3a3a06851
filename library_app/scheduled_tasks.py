"""
Scheduled background tasks for the library system.

Tasks include:
- Purging expired login sessions (every SESSION_PURGE_MINUTES)
- Reporting overdue books (daily)
"""
import logging
from datetime import date

from library_app.errors import LibraryError
from library_app.extensions import scheduler
from library_app.models.book import Book
from library_app.models.database import get_db
from library_app.models.system_log import SystemLog
from library_app.utils.context import get_session_store

logger = logging.getLogger(__name__)


def purge_expired_sessions(app) -> int:
    """Scheduled task: delete sessions past their absolute expiry."""
    with app.app_context():
        try:
            removed = get_session_store().purge_expired()
        except LibraryError as e:
            logger.error(f"Error in purge_expired_sessions: {e}")
            return 0
        if removed:
            logger.info(f"Purged {removed} expired session(s)")
        return removed


def report_overdue_books(app) -> int:
    """Scheduled task: log how many borrowed books are past due.

    Runs daily at 9:00 AM.
    """
    with app.app_context():
        try:
            db = get_db()
            overdue = Book.get_overdue_count(db, date.today())
            if overdue > 0:
                logger.info(f"{overdue} book(s) are overdue")
                SystemLog.add(
                    db,
                    'Scheduled Task: Overdue Report',
                    f'{overdue} book(s) overdue',
                    'system'
                )
            return overdue
        except LibraryError as e:
            logger.error(f"Error in report_overdue_books: {e}")
            return 0


def start_scheduler(app):
    """Register the jobs and start the background scheduler."""
    if scheduler.running:
        return

    scheduler.add_job(
        func=purge_expired_sessions,
        args=[app],
        trigger='interval',
        minutes=app.config['SESSION_PURGE_MINUTES'],
        id='purge_expired_sessions',
        name='Purge expired sessions',
        replace_existing=True
    )
    scheduler.add_job(
        func=report_overdue_books,
        args=[app],
        trigger='cron',
        hour=9,
        minute=0,
        id='report_overdue_books',
        name='Report overdue books',
        replace_existing=True
    )
    scheduler.start()
    logger.info("Scheduled tasks started successfully")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduled tasks shut down")
