"""Process-wide binding of the default transaction manager.

Models and the free ``transaction()`` helper fall back to the manager bound
here when no manager is passed explicitly. The binding is a single mutable
slot: bind it once during start-up (see :func:`with_transaction.config.create_transaction_manager`)
and pass managers explicitly wherever more than one database is in play.
"""

from __future__ import annotations

from typing import Callable, Protocol, TypeVar, runtime_checkable

from .exceptions import PolicyViolation

T = TypeVar("T")

__all__ = [
    "TransactionManager",
    "bind_transaction_manager",
    "get_transaction_manager",
    "resolve_transaction_manager",
    "unbind_transaction_manager",
]


@runtime_checkable
class TransactionManager(Protocol):
    """Transactional primitive consumed by the runner."""

    def run_in_transaction(self, unit_of_work: Callable[[], T], attempts: int = 1) -> T:
        """Run ``unit_of_work`` atomically, replaying it up to ``attempts`` times."""


_default_manager: TransactionManager | None = None


def bind_transaction_manager(manager: TransactionManager) -> None:
    """Install ``manager`` as the process-wide default."""

    global _default_manager
    _default_manager = manager


def unbind_transaction_manager() -> None:
    """Clear the process-wide default."""

    global _default_manager
    _default_manager = None


def get_transaction_manager() -> TransactionManager:
    """Return the bound default manager."""

    if _default_manager is None:
        raise PolicyViolation(
            "no transaction manager bound; call bind_transaction_manager() first"
        )
    return _default_manager


def resolve_transaction_manager(manager: TransactionManager | None) -> TransactionManager:
    """Return ``manager`` when given, otherwise the bound default."""

    return manager if manager is not None else get_transaction_manager()
