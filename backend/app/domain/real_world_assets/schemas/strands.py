from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.domain.real_world_assets.schemas.state import WireModel


class OperationUpdate(WireModel):
    type: str = Field(min_length=1)
    index: int = Field(ge=0)
    skip: int = Field(default=0, ge=0)
    input: dict[str, Any] = Field(default_factory=dict)
    hash: str | None = None
    timestamp: str | None = None


class Strand(WireModel):
    """
    One batch of operations for a document (or for the drive itself when
    `document_id` is empty) plus the document state after the last operation.
    """

    drive_id: str = Field(min_length=1)
    document_id: str = ""
    scope: str = "global"
    branch: str = "main"
    operations: list[OperationUpdate] = Field(default_factory=list)
    state: dict[str, Any] = Field(default_factory=dict)


class AddFileInput(WireModel):
    id: str
    name: str | None = None
    document_type: str
    parent_folder: str | None = None
    document: dict[str, Any] | None = None


class DeleteNodeInput(WireModel):
    id: str


class DriveState(WireModel):
    id: str | None = None
    name: str | None = None


class StrandBatchIn(BaseModel):
    strands: list[Strand] = Field(default_factory=list)


class StrandBatchOut(BaseModel):
    applied: int
    skipped: int
