from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache
import importlib

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.db.base import Base


def _import_model_modules() -> None:
    module_names = [
        "app.domain.real_world_assets.models.portfolio",
        "app.domain.real_world_assets.models.transactions",
        "app.domain.real_world_assets.models.revisions",
    ]
    for module_name in module_names:
        importlib.import_module(module_name)


@lru_cache(maxsize=1)
def get_engine():
    # Lazy init so importing the app does not require a reachable database.
    engine = create_engine(settings.database_url, pool_pre_ping=True)
    _import_model_modules()
    Base.metadata.create_all(bind=engine)
    return engine


def get_session_local() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()
