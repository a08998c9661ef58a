"""Per-entity decision of whether operations run inside a transaction.

The decision lives in the ``wrap_in_transaction`` attribute: the class
attribute is the per-type default and an instance attribute of the same name
overrides it. Overrides are only ever applied through :func:`wrap_override`,
which restores the immediately prior value on every exit path, so nested
overrides unwind one level at a time.

An entity instance is expected to be driven by one logical operation at a
time; concurrent overrides on the same instance race (last restore wins).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from .registry import TransactionManager
from .runner import run

T = TypeVar("T")
E = TypeVar("E")

WRAP_ATTRIBUTE = "wrap_in_transaction"

__all__ = [
    "WRAP_ATTRIBUTE",
    "default_wrap_policy",
    "should_wrap",
    "wrap_override",
    "with_forced_transaction",
    "without_transaction",
]


def default_wrap_policy(entity_type: type) -> bool:
    """Return the default decision for ``entity_type`` without instantiating it."""

    return bool(getattr(entity_type, WRAP_ATTRIBUTE, True))


def should_wrap(entity: Any) -> bool:
    return bool(getattr(entity, WRAP_ATTRIBUTE, default_wrap_policy(type(entity))))


@contextmanager
def wrap_override(entity: E, enabled: bool) -> Iterator[E]:
    """Temporarily set the entity's decision to ``enabled``."""

    previous = should_wrap(entity)
    setattr(entity, WRAP_ATTRIBUTE, enabled)
    try:
        yield entity
    finally:
        setattr(entity, WRAP_ATTRIBUTE, previous)


def without_transaction(entity: E, callback: Callable[[E], T]) -> T:
    """Call ``callback(entity)`` with wrapping disabled for that entity."""

    with wrap_override(entity, False):
        return callback(entity)


def with_forced_transaction(
    entity: E,
    callback: Callable[[E], T],
    *,
    manager: TransactionManager | None = None,
) -> T:
    """Call ``callback(entity)`` inside a transaction, whatever the entity's decision."""

    with wrap_override(entity, True):
        return run(lambda: callback(entity), wrapped=should_wrap(entity), manager=manager)
