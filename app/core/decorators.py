"""
Custom decorators for services and views.

This module provides generic infrastructure decorators for:
- Bounded retry of database work that lost a lock race
- Request/response logging

These are domain-agnostic decorators that can be used in any Django project.

Usage:
    from core.decorators import retry_on_contention, log_request

    @retry_on_contention()
    def move_money(...):
        with transaction.atomic():
            ...

    @log_request()
    def debug_view(request):
        ...
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable

from django.conf import settings
from django.db import DatabaseError, OperationalError, transaction

from core.exceptions import StorageError

logger = logging.getLogger(__name__)

# SQLSTATE codes for lock contention on PostgreSQL:
# serialization_failure, deadlock_detected, lock_not_available
CONTENTION_SQLSTATES = frozenset({"40001", "40P01", "55P03"})

# SQLite busy errors: file lock held by another writer, or a table lock
# held by another connection to a shared-cache in-memory database
SQLITE_BUSY_MESSAGES = ("database is locked", "database table is locked")


def is_lock_contention(exc: BaseException) -> bool:
    """
    Check whether a database error was caused by lock contention.

    Looks at the driver error Django wrapped (psycopg exposes ``sqlstate``,
    psycopg2 exposes ``pgcode``) and falls back to SQLite's busy messages.

    Args:
        exc: Exception raised by the database layer

    Returns:
        True if retrying the whole unit of work may succeed
    """
    cause = exc.__cause__ or exc
    code = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if code in CONTENTION_SQLSTATES:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in SQLITE_BUSY_MESSAGES)


def retry_on_contention(
    max_attempts: int | None = None,
    base_delay: float | None = None,
):
    """
    Retry a unit of work that failed on lock contention, with backoff.

    Every database failure that escapes the wrapped function is surfaced
    as StorageError. Contention failures (deadlock, serialization failure,
    lock timeout) are retried first, up to ``max_attempts`` calls in total,
    sleeping ``base_delay * 2 ** n`` seconds between calls.

    Retries only happen when the wrapped call owns the outermost
    transaction. Inside a caller's atomic block the failed transaction
    cannot be replayed, so the error is surfaced immediately.

    Args:
        max_attempts: Total calls allowed (default: settings.LEDGER_RETRY_ATTEMPTS)
        base_delay: First backoff in seconds (default: settings.LEDGER_RETRY_BASE_DELAY)

    Returns:
        Decorator function

    Example:
        @retry_on_contention(max_attempts=5)
        def transfer(source_id, target_id, amount):
            with transaction.atomic():
                ...
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempts = (
                max_attempts
                if max_attempts is not None
                else getattr(settings, "LEDGER_RETRY_ATTEMPTS", 3)
            )
            delay = (
                base_delay
                if base_delay is not None
                else getattr(settings, "LEDGER_RETRY_BASE_DELAY", 0.05)
            )
            can_retry = not transaction.get_connection().in_atomic_block

            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except OperationalError as exc:
                    if can_retry and attempt < attempts and is_lock_contention(exc):
                        wait = delay * 2 ** (attempt - 1)
                        logger.warning(
                            f"Lock contention in {func.__qualname__}, "
                            f"retrying in {wait:.3f}s (attempt {attempt}/{attempts})",
                            extra={"function": func.__qualname__, "attempt": attempt},
                        )
                        time.sleep(wait)
                        attempt += 1
                        continue
                    logger.error(
                        f"Database failure in {func.__qualname__} after {attempt} attempt(s)",
                        exc_info=True,
                    )
                    raise StorageError(
                        "The ledger store could not complete the operation",
                        details={"reason": exc.__class__.__name__, "attempts": attempt},
                    ) from exc
                except DatabaseError as exc:
                    logger.error(
                        f"Database failure in {func.__qualname__}",
                        exc_info=True,
                    )
                    raise StorageError(
                        "The ledger store could not complete the operation",
                        details={"reason": exc.__class__.__name__, "attempts": attempt},
                    ) from exc

        return wrapper

    return decorator


def log_request(logger_name: str | None = None):
    """
    Log request/response for debugging.

    Logs request method, path, user, and response status.

    Args:
        logger_name: Optional logger name (defaults to view module)

    Returns:
        Decorator function

    Example:
        class BalanceView(APIView):
            @method_decorator(log_request())
            def get(self, request):
                ...
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(request, *args, **kwargs):
            log = logging.getLogger(logger_name or func.__module__)

            user_str = str(request.user) if hasattr(request, "user") else "anonymous"
            log.debug(
                f"Request: {request.method} {request.path}",
                extra={
                    "user": user_str,
                    "method": request.method,
                    "path": request.path,
                },
            )

            response = func(request, *args, **kwargs)

            log.debug(
                f"Response: {response.status_code}",
                extra={
                    "user": user_str,
                    "status_code": response.status_code,
                    "path": request.path,
                },
            )

            return response

        return wrapper

    return decorator
