from __future__ import annotations


class AppError(Exception):
    """Base error for domain/application exceptions."""


class NotFound(AppError):
    """Raised when entity is missing from the read model."""


class ValidationError(AppError):
    """Raised for domain-level validation beyond schema validation."""


class MissingTargetRow(NotFound):
    """Raised when an update/delete addresses a natural key absent from the store.

    Means a strand was delivered out of order or a history rewrite slipped past
    reset detection.
    """

    def __init__(self, entity: str, key: dict) -> None:
        self.entity = entity
        self.key = dict(key)
        super().__init__(f"{entity} not found for key {self.key}")


class UnknownOperationType(AppError):
    """Raised when the surgical registry has no handler for an operation type."""

    def __init__(self, operation_type: str) -> None:
        self.operation_type = operation_type
        super().__init__(f"No surgical handler registered for {operation_type!r}")


class StoreTransactionFailure(AppError):
    """Raised when the backend rejects a statement while applying a strand."""


class StrandApplicationError(AppError):
    """Single strand-level failure surfaced to the caller; nothing of the strand is kept."""

    def __init__(self, drive_id: str, document_id: str, cause: Exception) -> None:
        self.drive_id = drive_id
        self.document_id = document_id
        self.cause = cause
        target = document_id or "<drive>"
        super().__init__(f"Strand for {drive_id}/{target} not applied: {cause}")
