from __future__ import annotations

from app.domain.real_world_assets.models import ProjectionRevision
from app.domain.real_world_assets.services.store import ProjectionStore


def last_revision(store: ProjectionStore, *, listener_id: str, drive_id: str, document_id: str) -> int | None:
    row = store.find_one(ProjectionRevision, listener_id=listener_id, drive_id=drive_id, document_id=document_id)
    return row.revision if row is not None else None


def record_revision(
    store: ProjectionStore,
    *,
    listener_id: str,
    drive_id: str,
    document_id: str,
    revision: int,
) -> None:
    store.upsert(
        ProjectionRevision,
        {"listener_id": listener_id, "drive_id": drive_id, "document_id": document_id},
        {"revision": revision},
    )


def forget_revisions(store: ProjectionStore, *, listener_id: str, drive_id: str, document_id: str | None = None) -> int:
    filters = {"listener_id": listener_id, "drive_id": drive_id}
    if document_id is not None:
        filters["document_id"] = document_id
    return store.delete_many(ProjectionRevision, **filters)
