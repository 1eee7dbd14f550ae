from __future__ import annotations

import os
import sys
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import Session, sessionmaker

# Make `backend/` and the test helpers importable regardless of pytest import mode.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from app.core.config import settings
from app.core.db.base import Base
from app.core.db.session import get_db
from app.domain.real_world_assets.models import Portfolio
from app.domain.real_world_assets.services.projector import Projector
from app.domain.real_world_assets.services.store import ProjectionStore
from app.main import create_app
from app.shared.enums import Env

# Ensure model modules are imported so Base.metadata is complete.
from app.domain.real_world_assets.models import portfolio as _rwa_portfolio  # noqa: F401
from app.domain.real_world_assets.models import transactions as _rwa_transactions  # noqa: F401
from app.domain.real_world_assets.models import revisions as _rwa_revisions  # noqa: F401

from factories import DOCUMENT_ID, DRIVE_ID, add_file_op, drive_strand


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite emits its own BEGIN and breaks SAVEPOINT; let SQLAlchemy issue it.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, class_=Session)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session: Session) -> TestClient:
    settings.env = Env.test
    app = create_app()

    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)


@pytest.fixture()
def store(db_session: Session) -> ProjectionStore:
    return ProjectionStore(db_session)


@pytest.fixture()
def projector() -> Projector:
    return Projector()


@pytest.fixture()
def portfolio(projector: Projector, db_session: Session) -> Portfolio:
    """Empty portfolio document registered on DRIVE_ID through its drive strand."""
    projector.apply_strands([drive_strand(add_file_op(DOCUMENT_ID, index=0))], db_session)
    db_session.commit()
    return db_session.query(Portfolio).filter_by(drive_id=DRIVE_ID, document_id=DOCUMENT_ID).one()
