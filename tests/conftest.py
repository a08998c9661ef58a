from __future__ import annotations

from typing import Callable, Iterator

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tests.helpers.models import Base
from tests.mocks.managers import RecordingTransactionManager
from with_transaction import bind_transaction_manager, unbind_transaction_manager
from with_transaction.db import (
    SessionTransactionManager,
    build_session_factory,
    create_engine_from_url,
)


@pytest.fixture(autouse=True)
def _reset_default_manager() -> Iterator[None]:
    unbind_transaction_manager()
    yield
    unbind_transaction_manager()


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    engine = create_engine_from_url(f"sqlite:///{tmp_path / 'with_transaction.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture
def manager(session_factory: sessionmaker[Session]) -> Iterator[SessionTransactionManager]:
    manager = SessionTransactionManager(session_factory)
    bind_transaction_manager(manager)
    yield manager
    manager.remove()


@pytest.fixture
def recording_manager() -> RecordingTransactionManager:
    return RecordingTransactionManager()


@pytest.fixture
def transaction_calls(
    manager: SessionTransactionManager, monkeypatch: pytest.MonkeyPatch
) -> list[int]:
    """Attempts passed to every ``run_in_transaction`` call on ``manager``."""

    calls: list[int] = []
    original = manager.run_in_transaction

    def recording(unit_of_work, attempts=1):
        calls.append(attempts)
        return original(unit_of_work, attempts)

    monkeypatch.setattr(manager, "run_in_transaction", recording)
    return calls


@pytest.fixture
def count_rows(session_factory: sessionmaker[Session]) -> Callable[[type], int]:
    """Count committed rows through a session independent of ``manager``."""

    def _count(model: type) -> int:
        with session_factory() as session:
            return session.scalar(select(func.count()).select_from(model))

    return _count
