from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import Base, TimestampMixin


class ProjectionRevision(Base, TimestampMixin):
    """Last operation index applied per (listener, drive, document); drive rows use document_id ''."""

    __tablename__ = "rwa_projection_revisions"

    listener_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    drive_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    document_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)
