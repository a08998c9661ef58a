"""Declarative model mixins whose write operations honour the wrap policy."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, TypeVar

from sqlalchemy import DateTime, Select, inspect, select
from sqlalchemy.orm import Mapped, mapped_column

from .db.db_manager import SessionTransactionManager
from .exceptions import PolicyViolation
from .policy import default_wrap_policy, should_wrap, with_forced_transaction, without_transaction
from .registry import get_transaction_manager
from .runner import run

T = TypeVar("T")
M = TypeVar("M", bound="TransactionalMixin")

__all__ = ["TransactionalMixin", "SoftDeleteMixin"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionalMixin:
    """Wrap ``create``/``save``/``update``/``delete`` and friends in transactions.

    Set ``wrap_in_transaction = False`` on a model to run its operations
    without a transaction by default, and ``__transaction_manager__`` to pin
    a manager other than the bound default. Unwrapped operations commit
    immediately unless they run inside an enclosing managed transaction.
    """

    wrap_in_transaction: ClassVar[bool] = True
    __transaction_manager__: ClassVar[SessionTransactionManager | None] = None

    @classmethod
    def transaction_manager(cls) -> SessionTransactionManager:
        manager = cls.__transaction_manager__
        return manager if manager is not None else get_transaction_manager()

    @classmethod
    def create(cls: type[M], **attributes: Any) -> M:
        """Build, fill and persist a new instance."""

        def create_model() -> M:
            model = cls()
            model.fill(**attributes)
            model._persist()
            return model

        return run(create_model, wrapped=default_wrap_policy(cls), manager=cls.transaction_manager())

    @classmethod
    def with_transaction(cls, callback: Callable[[], T]) -> T:
        return run(callback, wrapped=default_wrap_policy(cls), manager=cls.transaction_manager())

    @classmethod
    def transactional(cls: type[M], callback: Callable[[M], T]) -> T:
        """Call ``callback`` with a fresh instance, wrapped per the class default."""

        return run(
            lambda: callback(cls()),
            wrapped=default_wrap_policy(cls),
            manager=cls.transaction_manager(),
        )

    def fill(self: M, **attributes: Any) -> M:
        cls = type(self)
        mapped = inspect(cls).attrs.keys()
        for key, value in attributes.items():
            if key not in mapped:
                raise TypeError(f"{key!r} is an invalid keyword argument for {cls.__name__}")
            setattr(self, key, value)
        return self

    def save(self) -> bool:
        return self._run(self._persist)

    def update(self, **attributes: Any) -> bool:
        def update_model() -> bool:
            self.fill(**attributes)
            return self._persist()

        return self._run(update_model)

    def delete(self) -> bool:
        """Delete the row; returns ``False`` if the instance was never persisted."""

        return self._run(self._perform_delete)

    def force_delete(self) -> bool:
        return self._run(self._perform_force_delete)

    def restore(self) -> bool:
        return self._run(self._perform_restore)

    def without_transaction(self: M, callback: Callable[[M], T]) -> T:
        return without_transaction(self, callback)

    def with_forced_transaction(self: M, callback: Callable[[M], T]) -> T:
        return with_forced_transaction(self, callback, manager=self.transaction_manager())

    def _run(self, unit_of_work: Callable[[], T]) -> T:
        return run(unit_of_work, wrapped=should_wrap(self), manager=self.transaction_manager())

    def _exists(self) -> bool:
        state = inspect(self)
        return not (state.transient or state.pending)

    def _persist(self) -> bool:
        manager = self.transaction_manager()
        manager.session.add(self)
        manager.commit_unless_managed()
        return True

    def _perform_delete(self) -> bool:
        return self._perform_force_delete()

    def _perform_force_delete(self) -> bool:
        if not self._exists():
            return False
        manager = self.transaction_manager()
        manager.session.delete(self)
        manager.commit_unless_managed()
        return True

    def _perform_restore(self) -> bool:
        raise PolicyViolation(f"{type(self).__name__} does not support soft deletes")


class SoftDeleteMixin(TransactionalMixin):
    """Mark rows as deleted instead of removing them."""

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def select_active(cls) -> Select:
        """``SELECT`` of the rows that have not been soft-deleted."""

        return select(cls).where(cls.deleted_at.is_(None))

    def _perform_delete(self) -> bool:
        if not self._exists():
            return False
        self.deleted_at = _utcnow()
        return self._persist()

    def _perform_restore(self) -> bool:
        if not self._exists():
            return False
        self.deleted_at = None
        return self._persist()
