"""System log model for tracking circulation activity.

Every successful borrow, return and catalog change is recorded here and
shown on the admin dashboard.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from library_app.models.database import Database


class SystemLog:
    """Append-only activity log.

    This class provides static methods for adding and retrieving
    log entries. No instances are created.
    """

    @staticmethod
    def add(db: Database, action: str, details: str, log_type: str = 'info',
            user_id: Optional[int] = None) -> int:
        """Add a new log entry.

        Args:
            db: Persistence adapter.
            action: The action being logged.
            details: Detailed description of the action.
            log_type: 'info', 'admin' or 'system'.
            user_id: ID of user who performed the action (optional).

        Returns:
            The ID of the created log entry.
        """
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        result = db.execute('''
            INSERT INTO audit_log (timestamp, action, details, log_type, user_id)
            VALUES (?, ?, ?, ?, ?)
        ''', (timestamp, action, details, log_type, user_id))
        return result.inserted_id

    @staticmethod
    def get_recent(db: Database, limit: int = 50) -> List[Dict[str, Any]]:
        """Get recent log entries, newest first."""
        return db.query_all('''
            SELECT * FROM audit_log
            ORDER BY id DESC
            LIMIT ?
        ''', (limit,))
