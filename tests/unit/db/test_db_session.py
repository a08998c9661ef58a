from __future__ import annotations

import pytest
from sqlalchemy import text

from with_transaction.db import build_session_factory, create_engine_from_url

pytestmark = pytest.mark.unit


def test_sqlite_savepoint_rollback_discards_nested_writes(tmp_path) -> None:
    engine = create_engine_from_url(f"sqlite:///{tmp_path / 'savepoints.db'}")
    try:
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE item (name TEXT)"))

        with engine.connect() as conn:
            with conn.begin():
                conn.execute(text("INSERT INTO item VALUES ('kept')"))
                nested = conn.begin_nested()
                conn.execute(text("INSERT INTO item VALUES ('discarded')"))
                nested.rollback()

            names = conn.execute(text("SELECT name FROM item")).scalars().all()
    finally:
        engine.dispose()

    assert names == ["kept"]


def test_session_factory_keeps_attributes_after_commit(tmp_path) -> None:
    engine = create_engine_from_url(f"sqlite:///{tmp_path / 'factory.db'}")
    try:
        factory = build_session_factory(engine)
        assert factory.kw["bind"] is engine
        assert factory.kw["expire_on_commit"] is False
    finally:
        engine.dispose()
