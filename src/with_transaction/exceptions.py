"""Error hierarchy shared by the transaction helpers."""

from __future__ import annotations

__all__ = [
    "TransactionError",
    "TransientFailure",
    "PersistenceFailure",
    "PolicyViolation",
    "ensure_attempts",
]


class TransactionError(Exception):
    """Base class for transaction helper errors."""


class TransientFailure(TransactionError):
    """Raised for conflicts that may succeed when the transaction is replayed."""


class PersistenceFailure(TransactionError):
    """Raised for persistence failures that must not be retried."""


class PolicyViolation(TransactionError):
    """Raised when a caller breaks the helper's usage contract."""


def ensure_attempts(attempts: int) -> int:
    """Validate a retry budget, otherwise raise :class:`PolicyViolation`."""

    if isinstance(attempts, bool) or not isinstance(attempts, int):
        raise PolicyViolation(f"attempts must be an integer, got {attempts!r}")
    if attempts < 1:
        raise PolicyViolation(f"attempts must be at least 1, got {attempts}")
    return attempts
