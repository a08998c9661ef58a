"""Run units of work directly or inside a transaction, reporting the outcome."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

import structlog

from .exceptions import ensure_attempts
from .registry import TransactionManager, resolve_transaction_manager

T = TypeVar("T")

SuccessCallback = Callable[[Any], Any]
FailureCallback = Callable[[Exception], Any]

logger = structlog.get_logger(__name__)

__all__ = ["run", "transaction", "transactional"]


def run(
    unit_of_work: Callable[[], T],
    *,
    wrapped: bool,
    attempts: int = 1,
    on_success: SuccessCallback | None = None,
    on_failure: FailureCallback | None = None,
    manager: TransactionManager | None = None,
) -> T:
    """Execute ``unit_of_work`` and return its result.

    When ``wrapped`` is true the unit of work goes through the transaction
    manager's ``run_in_transaction`` with ``attempts`` as the retry budget;
    otherwise it is called once, directly, and ``attempts`` only gets
    validated.

    ``on_success`` receives the result after the transaction committed and
    cannot change what is returned. ``on_failure`` receives the error after
    the rollback; the error is re-raised afterwards in every case, including
    when ``on_failure`` itself fails.

    Raises:
        PolicyViolation: ``attempts`` is not a positive integer, or the
            call is wrapped and no manager is passed or bound.
    """

    ensure_attempts(attempts)
    try:
        if wrapped:
            result = resolve_transaction_manager(manager).run_in_transaction(
                unit_of_work, attempts
            )
        else:
            result = unit_of_work()
    except Exception as exc:
        if on_failure is not None:
            try:
                on_failure(exc)
            except Exception:
                logger.exception("transaction.on_failure_callback_failed", error=repr(exc))
        raise

    if on_success is not None:
        on_success(result)
    return result


def transaction(
    unit_of_work: Callable[[], T],
    attempts: int = 1,
    on_success: SuccessCallback | None = None,
    on_failure: FailureCallback | None = None,
    *,
    manager: TransactionManager | None = None,
) -> T:
    """Always-wrapped shorthand for :func:`run`."""

    return run(
        unit_of_work,
        wrapped=True,
        attempts=attempts,
        on_success=on_success,
        on_failure=on_failure,
        manager=manager,
    )


def transactional(
    func: Callable[..., T] | None = None,
    *,
    attempts: int = 1,
    manager: TransactionManager | None = None,
):
    """Decorator running the wrapped function through :func:`transaction`.

    Usage:
        @transactional
        def transfer(source, target, amount): ...

        @transactional(attempts=3)
        def bump_counter(counter_id): ...
    """

    ensure_attempts(attempts)

    def decorator(target: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(target)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return transaction(
                lambda: target(*args, **kwargs), attempts=attempts, manager=manager
            )

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
