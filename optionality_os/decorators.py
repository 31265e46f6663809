"""
Retry decorator for SQLite write contention.
"""
import time
import logging
from functools import wraps
from sqlalchemy.exc import OperationalError

from .config import settings
from .exceptions import DatabaseException

logger = logging.getLogger(__name__)


def retry_on_db_lock(max_retries=None, delay=None):
    """
    Retry a database write when SQLite answers 'database is locked'.

    Defaults come from ``settings.DB_LOCK_RETRIES`` and
    ``settings.DB_LOCK_RETRY_DELAY``. The session passed as the first
    argument is rolled back before each retry. Other operational errors are
    re-raised immediately; exhausting the retries raises DatabaseException.

    Usage:
        @retry_on_db_lock()
        def save_thing(db, thing):
            db.add(thing)
            db.commit()
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            retries = settings.DB_LOCK_RETRIES if max_retries is None else max_retries
            pause = settings.DB_LOCK_RETRY_DELAY if delay is None else delay

            for attempt in range(retries + 1):
                try:
                    return func(*args, **kwargs)
                except OperationalError as e:
                    if "database is locked" not in str(e).lower():
                        raise
                    if args and hasattr(args[0], "rollback"):
                        args[0].rollback()
                    if attempt == retries:
                        logger.error(f"Max retries ({retries}) exceeded for {func.__name__}")
                        raise DatabaseException(
                            f"Database stayed locked during {func.__name__}",
                            error_code="DB_LOCKED",
                        ) from e
                    logger.warning(
                        f"Database locked on {func.__name__}, "
                        f"retry {attempt + 1}/{retries} in {pause}s"
                    )
                    time.sleep(pause)

        return wrapper
    return decorator
