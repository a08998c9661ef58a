"""Configuration builder for the transaction helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db import SessionTransactionManager, build_session_factory, create_engine_from_url
from .logging import configure_logging
from .registry import bind_transaction_manager

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


@dataclass(slots=True)
class LoggingSettings:
    level: str
    json_logs: bool


@dataclass(slots=True)
class TransactionConfig:
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    retry_delay: float
    logging: LoggingSettings


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def load_config() -> TransactionConfig:
    """Load configuration from environment (SQLite by default)."""
    database_url = os.getenv("WITH_TRANSACTION_DATABASE_URL", "sqlite:///with_transaction.db")
    echo = _env_flag("WITH_TRANSACTION_SQL_ECHO", False)

    retry_delay = float(os.getenv("WITH_TRANSACTION_RETRY_DELAY", 0.0))
    if retry_delay < 0:
        raise ValueError("WITH_TRANSACTION_RETRY_DELAY cannot be negative")

    logging_settings = LoggingSettings(
        level=os.getenv("WITH_TRANSACTION_LOG_LEVEL", "INFO"),
        json_logs=_env_flag("WITH_TRANSACTION_LOG_JSON", True),
    )

    engine = create_engine_from_url(database_url, echo=echo)
    session_factory = build_session_factory(engine)

    return TransactionConfig(
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        retry_delay=retry_delay,
        logging=logging_settings,
    )


def create_transaction_manager(
    config: TransactionConfig | None = None, *, bind: bool = True
) -> SessionTransactionManager:
    """Build the SQLAlchemy transaction manager, binding it as default when ``bind``."""
    config = config or load_config()
    manager = SessionTransactionManager(config.session_factory, retry_delay=config.retry_delay)
    if bind:
        bind_transaction_manager(manager)
    return manager


def bootstrap(*, bind: bool = True) -> SessionTransactionManager:
    """Configure logging from the environment and build the transaction manager."""
    config = load_config()
    configure_logging(config.logging.level, json_logs=config.logging.json_logs)
    return create_transaction_manager(config, bind=bind)
