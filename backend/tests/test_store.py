from __future__ import annotations

import pytest
from sqlalchemy import event
from sqlalchemy.orm import Session

from app.domain.real_world_assets.models import Portfolio, Spv, SpvOnPortfolio
from app.domain.real_world_assets.services import store as store_module
from app.domain.real_world_assets.services.store import ProjectionStore
from app.shared.exceptions import MissingTargetRow


def test_create_skips_existing_rows(store: ProjectionStore, portfolio: Portfolio):
    assert store.create(Spv, {"id": "spv-1", "portfolio_id": portfolio.id, "name": "First"}) is True
    assert store.create(Spv, {"id": "spv-1", "portfolio_id": portfolio.id, "name": "Second"}) is False

    row = store.find_one(Spv, id="spv-1", portfolio_id=portfolio.id)
    assert row is not None
    assert row.name == "First"


def test_create_many_counts_only_new_rows(store: ProjectionStore, portfolio: Portfolio):
    rows = [{"id": f"spv-{i}", "portfolio_id": portfolio.id, "name": None} for i in range(3)]
    assert store.create_many(Spv, rows) == 3
    assert store.create_many(Spv, rows + [{"id": "spv-9", "portfolio_id": portfolio.id, "name": None}]) == 1
    assert store.create_many(Spv, []) == 0
    assert len(store.find_all(Spv, portfolio_id=portfolio.id)) == 4


@pytest.fixture()
def inserts(db_engine) -> list[str]:
    """INSERT statements sent to the database while the test runs."""
    statements: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("INSERT"):
            statements.append(statement)

    event.listen(db_engine, "before_cursor_execute", record)
    yield statements
    event.remove(db_engine, "before_cursor_execute", record)


def test_create_many_sends_one_statement(store: ProjectionStore, portfolio: Portfolio, inserts: list[str]):
    rows = [{"id": f"spv-{i}", "portfolio_id": portfolio.id, "name": None} for i in range(5)]
    rows.append({"id": "spv-0", "portfolio_id": portfolio.id, "name": "duplicate"})

    assert store.create_many(Spv, rows) == 5
    assert len(inserts) == 1
    assert store.find_one(Spv, id="spv-0", portfolio_id=portfolio.id).name is None


def test_create_many_batches_large_inputs(monkeypatch, store: ProjectionStore, portfolio: Portfolio, inserts: list[str]):
    monkeypatch.setattr(store_module, "INSERT_BATCH_SIZE", 2)
    rows = [{"id": f"spv-{i}", "portfolio_id": portfolio.id, "name": None} for i in range(4)]
    rows.append({"id": "spv-named", "portfolio_id": portfolio.id})

    assert store.create_many(Spv, rows) == 5
    assert len(inserts) == 3


def test_update_refreshes_loaded_rows(store: ProjectionStore, portfolio: Portfolio):
    store.create(Spv, {"id": "spv-1", "portfolio_id": portfolio.id, "name": "Old"})
    loaded = store.find_one(Spv, id="spv-1", portfolio_id=portfolio.id)
    assert loaded.name == "Old"

    store.update(Spv, {"id": "spv-1", "portfolio_id": portfolio.id}, {"name": "New"})

    assert store.find_one(Spv, id="spv-1", portfolio_id=portfolio.id).name == "New"


def test_update_missing_row_raises(store: ProjectionStore, portfolio: Portfolio):
    with pytest.raises(MissingTargetRow) as exc:
        store.update(Spv, {"id": "ghost", "portfolio_id": portfolio.id}, {"name": "x"})
    assert exc.value.entity == "Spv"
    assert exc.value.key["id"] == "ghost"


def test_update_without_fields_still_checks_existence(store: ProjectionStore, portfolio: Portfolio):
    with pytest.raises(MissingTargetRow):
        store.update(Spv, {"id": "ghost", "portfolio_id": portfolio.id}, {})


def test_delete_removes_and_allows_reinsert(store: ProjectionStore, portfolio: Portfolio):
    key = {"id": "spv-1", "portfolio_id": portfolio.id}
    store.create(Spv, {**key, "name": "A"})
    store.find_one(Spv, **key)

    removed = store.delete(Spv, key)
    assert removed.name == "A"
    assert store.find_one(Spv, **key) is None

    assert store.create(Spv, {**key, "name": "B"}) is True
    assert store.find_one(Spv, **key).name == "B"


def test_delete_missing_row_raises(store: ProjectionStore, portfolio: Portfolio):
    with pytest.raises(MissingTargetRow):
        store.delete(Spv, {"id": "ghost", "portfolio_id": portfolio.id})


def test_delete_many_is_silent_when_nothing_matches(store: ProjectionStore, portfolio: Portfolio):
    assert store.delete_many(SpvOnPortfolio, portfolio_id=portfolio.id, spv_id="none") == 0


def test_store_never_commits(db_session: Session, store: ProjectionStore, portfolio: Portfolio):
    store.create(Spv, {"id": "spv-1", "portfolio_id": portfolio.id, "name": "A"})
    db_session.rollback()
    assert store.find_one(Spv, id="spv-1", portfolio_id=portfolio.id) is None
