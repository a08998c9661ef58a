"""SQLAlchemy implementation of the transactional primitive."""

from __future__ import annotations

import time
from typing import Callable, TypeVar

import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions import TransientFailure, ensure_attempts

T = TypeVar("T")

logger = structlog.get_logger(__name__)

_LEVEL_KEY = "with_transaction.level"

_CONCURRENCY_SQLSTATES = frozenset({"40001", "40P01"})
_CONCURRENCY_MESSAGES = (
    "deadlock found when trying to get lock",
    "deadlock detected",
    "the database file is locked",
    "database is locked",
    "database table is locked",
    "a table in the database is locked",
    "has been chosen as the deadlock victim",
    "lock wait timeout exceeded",
    "wsrep detected deadlock/conflict",
    "could not serialize access",
)


def is_transient_failure(exc: BaseException) -> bool:
    """Return ``True`` when replaying the transaction may succeed."""

    if isinstance(exc, (TransientFailure, StaleDataError)):
        return True
    if isinstance(exc, sa_exc.DBAPIError):
        orig = exc.orig
        sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if sqlstate in _CONCURRENCY_SQLSTATES:
            return True
        message = str(orig if orig is not None else exc).lower()
        return any(fragment in message for fragment in _CONCURRENCY_MESSAGES)
    return False


class SessionTransactionManager:
    """Run units of work inside transactions of a thread-scoped session.

    The outermost call owns the session transaction and is the only level
    that retries; nested calls run inside a SAVEPOINT and propagate their
    failure to the enclosing level.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        retry_delay: float = 0.0,
    ) -> None:
        if retry_delay < 0:
            raise ValueError("retry_delay cannot be negative")
        self._sessions = scoped_session(session_factory)
        self._retry_delay = retry_delay

    @property
    def session(self) -> Session:
        return self._sessions()

    @property
    def transaction_level(self) -> int:
        """Number of managed transactions currently open on this thread's session."""

        return self.session.info.get(_LEVEL_KEY, 0)

    def remove(self) -> None:
        """Close and discard the current thread's session."""

        self._sessions.remove()

    def commit_unless_managed(self) -> None:
        """Flush pending work, committing it when no managed transaction is open.

        Inside a managed transaction a failed flush is left to the enclosing
        level. Outside one the session is rolled back before re-raising so the
        next unit of work on this thread starts clean.
        """

        session = self.session
        if self.transaction_level:
            session.flush()
            return
        try:
            session.flush()
            session.commit()
        except Exception:
            logger.debug("transaction.rollback", level=0)
            session.rollback()
            raise

    def run_in_transaction(self, unit_of_work: Callable[[], T], attempts: int = 1) -> T:
        ensure_attempts(attempts)
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._run_once(unit_of_work)
            except Exception as exc:
                if not self._should_retry(exc, attempt=attempt, attempts=attempts):
                    raise
                logger.warning(
                    "transaction.retry",
                    attempt=attempt,
                    attempts=attempts,
                    error=repr(exc),
                )
                if self._retry_delay > 0:
                    time.sleep(self._retry_delay * attempt)

    def _should_retry(self, exc: Exception, *, attempt: int, attempts: int) -> bool:
        return (
            attempt < attempts
            and self.transaction_level == 0
            and is_transient_failure(exc)
        )

    def _run_once(self, unit_of_work: Callable[[], T]) -> T:
        session = self.session
        level = session.info.get(_LEVEL_KEY, 0)
        session.info[_LEVEL_KEY] = level + 1
        logger.debug("transaction.begin", level=level + 1)
        try:
            if level:
                with session.begin_nested():
                    result = unit_of_work()
            else:
                result = self._run_root(session, unit_of_work)
        except Exception:
            logger.debug("transaction.rollback", level=level + 1)
            raise
        finally:
            session.info[_LEVEL_KEY] = level
        logger.debug("transaction.commit", level=level + 1)
        return result

    @staticmethod
    def _run_root(session: Session, unit_of_work: Callable[[], T]) -> T:
        # Adopt a transaction the session already autobegun.
        if not session.in_transaction():
            session.begin()
        try:
            result = unit_of_work()
            session.commit()
        except Exception:
            session.rollback()
            raise
        return result
