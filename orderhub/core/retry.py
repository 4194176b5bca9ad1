"""
Retry helper for short write transactions that can lose a race.
Only wrap functions whose whole body runs in one transaction.
"""

import sqlite3
import time
import logging
from functools import wraps

from .errors import OrderNumberConflict

logger = logging.getLogger(__name__)

RETRYABLE_MESSAGES = ('database is locked', 'database is busy')


def is_retryable(exc: Exception) -> bool:
    if isinstance(exc, OrderNumberConflict):
        return True
    if isinstance(exc, sqlite3.OperationalError):
        msg = str(exc).lower()
        return any(k in msg for k in RETRYABLE_MESSAGES)
    return False


def retry_on_conflict(max_attempts: int = 3, backoff: float = 0.05):
    """Rerun the wrapped call on a retryable failure, sleeping backoff * attempt."""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                attempt += 1
                try:
                    return fn(*args, **kwargs)
                except Exception as e:
                    if attempt >= max_attempts or not is_retryable(e):
                        raise
                    logger.warning(f"{fn.__name__} attempt {attempt} failed ({e}), retrying")
                    time.sleep(backoff * attempt)
        return wrapper
    return deco
