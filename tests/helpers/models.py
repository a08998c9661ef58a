"""Declarative models used by the test-suite."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from with_transaction import SoftDeleteMixin, TransactionalMixin


class Base(DeclarativeBase):
    """Base declarative class."""


class Account(TransactionalMixin, Base):
    __tablename__ = "account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Note(SoftDeleteMixin, Base):
    __tablename__ = "note"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)


class AuditEntry(TransactionalMixin, Base):
    """Audit rows are written immediately unless a caller forces a transaction."""

    __tablename__ = "audit_entry"

    wrap_in_transaction = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    message: Mapped[str] = mapped_column(String(255), nullable=False)
