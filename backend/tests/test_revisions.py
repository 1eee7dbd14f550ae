from __future__ import annotations

from app.domain.real_world_assets.services.revisions import forget_revisions, last_revision, record_revision
from app.domain.real_world_assets.services.store import ProjectionStore


def test_record_and_read_back(store: ProjectionStore):
    assert last_revision(store, listener_id="l1", drive_id="d1", document_id="doc1") is None

    record_revision(store, listener_id="l1", drive_id="d1", document_id="doc1", revision=4)
    record_revision(store, listener_id="l1", drive_id="d1", document_id="doc1", revision=7)

    assert last_revision(store, listener_id="l1", drive_id="d1", document_id="doc1") == 7
    assert last_revision(store, listener_id="l2", drive_id="d1", document_id="doc1") is None


def test_forget_scoped_to_drive_or_document(store: ProjectionStore):
    for document_id in ("", "doc1", "doc2"):
        record_revision(store, listener_id="l1", drive_id="d1", document_id=document_id, revision=1)
    record_revision(store, listener_id="l1", drive_id="d2", document_id="doc1", revision=1)

    assert forget_revisions(store, listener_id="l1", drive_id="d1", document_id="doc1") == 1
    assert last_revision(store, listener_id="l1", drive_id="d1", document_id="doc2") == 1

    assert forget_revisions(store, listener_id="l1", drive_id="d1") == 2
    assert last_revision(store, listener_id="l1", drive_id="d1", document_id="") is None
    assert last_revision(store, listener_id="l1", drive_id="d2", document_id="doc1") == 1
