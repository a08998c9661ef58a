"""Database adapters backing the transaction helpers."""

from .db_manager import SessionTransactionManager, is_transient_failure
from .db_session import build_session_factory, create_engine_from_url

__all__ = [
    "SessionTransactionManager",
    "is_transient_failure",
    "build_session_factory",
    "create_engine_from_url",
]
