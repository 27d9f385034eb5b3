"""
Tests for core decorators.

retry_on_contention is exercised with fake driver errors, so these tests
need no database; the atomic-block case uses the db fixture, whose
per-test transaction makes every call "nested".
"""

from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError, OperationalError

from core.decorators import is_lock_contention, retry_on_contention
from core.exceptions import StorageError


class FakeDriverError(Exception):
    """Stands in for the psycopg error Django wraps."""

    def __init__(self, sqlstate):
        super().__init__(sqlstate)
        self.sqlstate = sqlstate


def db_error(sqlstate, message="could not obtain lock"):
    exc = OperationalError(message)
    exc.__cause__ = FakeDriverError(sqlstate)
    return exc


@pytest.fixture
def no_sleep():
    with mock.patch("core.decorators.time.sleep") as sleep:
        yield sleep


class TestIsLockContention:
    @pytest.mark.parametrize("sqlstate", ["40001", "40P01", "55P03"])
    def test_contention_sqlstates(self, sqlstate):
        assert is_lock_contention(db_error(sqlstate))

    def test_other_sqlstate(self):
        assert not is_lock_contention(db_error("08006", "connection failure"))

    def test_sqlite_busy(self):
        assert is_lock_contention(OperationalError("database is locked"))

    def test_sqlite_shared_cache_table_lock(self):
        assert is_lock_contention(
            OperationalError("database table is locked: ledger_account")
        )


class TestRetryOnContention:
    def test_returns_value_without_retry(self, no_sleep):
        func = mock.Mock(return_value=42)

        assert retry_on_contention()(func)() == 42
        func.assert_called_once()
        no_sleep.assert_not_called()

    def test_retries_deadlock_then_succeeds(self, no_sleep):
        func = mock.Mock(side_effect=[db_error("40P01"), "ok"])
        func.__qualname__ = "transfer"

        result = retry_on_contention(max_attempts=3, base_delay=0.1)(func)()

        assert result == "ok"
        assert func.call_count == 2
        no_sleep.assert_called_once_with(0.1)

    def test_backoff_doubles(self, no_sleep):
        func = mock.Mock(side_effect=[db_error("40001"), db_error("40001"), "ok"])
        func.__qualname__ = "transfer"

        retry_on_contention(max_attempts=3, base_delay=0.1)(func)()

        assert [c.args[0] for c in no_sleep.call_args_list] == [0.1, 0.2]

    def test_gives_up_after_max_attempts(self, no_sleep):
        func = mock.Mock(side_effect=db_error("55P03"))
        func.__qualname__ = "topup"

        with pytest.raises(StorageError) as exc_info:
            retry_on_contention(max_attempts=3, base_delay=0)(func)()

        assert func.call_count == 3
        assert exc_info.value.details == {"reason": "OperationalError", "attempts": 3}
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_non_contention_failure_not_retried(self, no_sleep):
        func = mock.Mock(side_effect=db_error("08006", "server closed the connection"))
        func.__qualname__ = "topup"

        with pytest.raises(StorageError):
            retry_on_contention(max_attempts=3)(func)()

        func.assert_called_once()

    @pytest.mark.parametrize("error", [IntegrityError("check failed"), DatabaseError("boom")])
    def test_other_database_errors_become_storage_error(self, no_sleep, error):
        func = mock.Mock(side_effect=error)
        func.__qualname__ = "transfer"

        with pytest.raises(StorageError) as exc_info:
            retry_on_contention()(func)()

        assert exc_info.value.http_status == 500
        func.assert_called_once()

    def test_application_errors_pass_through(self, no_sleep):
        func = mock.Mock(side_effect=ValueError("not a db error"))
        func.__qualname__ = "transfer"

        with pytest.raises(ValueError):
            retry_on_contention()(func)()

    def test_no_retry_inside_callers_transaction(self, db, no_sleep):
        func = mock.Mock(side_effect=db_error("40P01"))
        func.__qualname__ = "transfer"

        with pytest.raises(StorageError):
            retry_on_contention(max_attempts=5)(func)()

        func.assert_called_once()
        no_sleep.assert_not_called()

    def test_reads_attempts_from_settings(self, no_sleep, settings):
        settings.LEDGER_RETRY_ATTEMPTS = 2
        func = mock.Mock(side_effect=db_error("40P01"))
        func.__qualname__ = "transfer"

        with pytest.raises(StorageError):
            retry_on_contention()(func)()

        assert func.call_count == 2

    def test_explicit_zero_attempts_ignores_settings(self, no_sleep, settings):
        settings.LEDGER_RETRY_ATTEMPTS = 5
        func = mock.Mock(side_effect=db_error("40P01"))
        func.__qualname__ = "transfer"

        with pytest.raises(StorageError) as exc_info:
            retry_on_contention(max_attempts=0)(func)()

        func.assert_called_once()
        assert exc_info.value.details["attempts"] == 1
