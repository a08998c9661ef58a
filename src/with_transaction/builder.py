"""Fluent configuration of a single transactional run."""

from __future__ import annotations

from typing import Callable, TypeVar

from .exceptions import PolicyViolation, ensure_attempts
from .registry import TransactionManager
from .runner import FailureCallback, SuccessCallback, run

T = TypeVar("T")

__all__ = ["TransactionBuilder", "Transaction"]


class TransactionBuilder:
    """Accumulate retry and callback settings, then run one unit of work.

    Builders are single-use: ``run`` may be called once. Create a new one via
    :meth:`start` for every logical operation instead of sharing an instance.
    """

    def __init__(self, *, manager: TransactionManager | None = None) -> None:
        self._manager = manager
        self._attempts = 1
        self._on_success: SuccessCallback | None = None
        self._on_failure: FailureCallback | None = None
        self._consumed = False

    @classmethod
    def start(cls, *, manager: TransactionManager | None = None) -> TransactionBuilder:
        return cls(manager=manager)

    def attempts(self, count: int) -> TransactionBuilder:
        self._attempts = ensure_attempts(count)
        return self

    def on_success(self, callback: SuccessCallback) -> TransactionBuilder:
        self._on_success = callback
        return self

    def on_failure(self, callback: FailureCallback) -> TransactionBuilder:
        self._on_failure = callback
        return self

    def using(self, manager: TransactionManager) -> TransactionBuilder:
        """Run against ``manager`` instead of the bound default."""

        self._manager = manager
        return self

    def run(self, unit_of_work: Callable[[], T]) -> T:
        if self._consumed:
            raise PolicyViolation(
                "TransactionBuilder instances are single-use; call Transaction.start() again"
            )
        self._consumed = True
        return run(
            unit_of_work,
            wrapped=True,
            attempts=self._attempts,
            on_success=self._on_success,
            on_failure=self._on_failure,
            manager=self._manager,
        )


Transaction = TransactionBuilder
