"""Configuration file for Flask application.

This module contains all configuration settings for the library circulation
system, including database paths, session lifetime, and lending rules.
Secrets are never given an in-code default: they must come from the
environment.
"""
import os
from datetime import timedelta


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class for Flask application.

    Attributes:
        SECRET_KEY (str): Key used to sign the session cookie. Required.
        DATABASE_PATH (str): Absolute path to the SQLite database file.
        DATABASE_TIMEOUT (float): Seconds to wait on a locked database.
        SESSION_LIFETIME (timedelta): Absolute lifetime of a login session.
        LOAN_PERIOD_DAYS (int): Calendar days a book may be kept.
        FINE_PER_DAY (int): Flat penalty per overdue day.
        ADMIN_USERNAME (str): Username of the bootstrap admin account.
        ADMIN_PASSWORD (str): Password of the bootstrap admin. Required to seed.
        RESET_DB_ON_START (bool): Drop and recreate all tables at startup.
        SEED_ON_START (bool): Seed the admin and sample books at startup.
        SCHEDULER_ENABLED (bool): Run background housekeeping jobs.
        SESSION_PURGE_MINUTES (int): Interval of the expired-session purge.
        LOG_LEVEL (str): Root logging level.
    """

    SECRET_KEY = os.environ.get('LIBRARY_SECRET_KEY')

    # Database configuration
    DATABASE_PATH: str = os.environ.get('LIBRARY_DATABASE_PATH') or os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'data', 'library.db'
    )
    DATABASE_TIMEOUT: float = 5.0

    # Session configuration
    SESSION_LIFETIME: timedelta = timedelta(
        seconds=int(os.environ.get('LIBRARY_SESSION_SECONDS', 3600))
    )
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = 'Lax'

    # Lending rules
    LOAN_PERIOD_DAYS: int = 30
    FINE_PER_DAY: int = 5

    # Bootstrap
    ADMIN_USERNAME: str = os.environ.get('LIBRARY_ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('LIBRARY_ADMIN_PASSWORD')
    RESET_DB_ON_START: bool = _env_flag('LIBRARY_RESET_DB', False)
    SEED_ON_START: bool = _env_flag('LIBRARY_SEED', True)

    # Background tasks
    SCHEDULER_ENABLED: bool = _env_flag('LIBRARY_SCHEDULER', True)
    SESSION_PURGE_MINUTES: int = 15

    LOG_LEVEL: str = os.environ.get('LIBRARY_LOG_LEVEL', 'INFO')
