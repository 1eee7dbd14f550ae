from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from structlog.stdlib import BoundLogger

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.real_world_assets.enums import StrandOutcome
from app.domain.real_world_assets.models import Portfolio
from app.domain.real_world_assets.schemas.state import RealWorldAssetsState
from app.domain.real_world_assets.schemas.strands import OperationUpdate, Strand
from app.domain.real_world_assets.services.initial_state import create_initial_state as default_initial_state
from app.domain.real_world_assets.services.rebuild import clear_portfolio, rebuild_portfolio
from app.domain.real_world_assets.services.registry import SurgicalRegistry, registry as default_registry
from app.domain.real_world_assets.services.revisions import last_revision, record_revision
from app.domain.real_world_assets.services.router import (
    InitialStateFactory,
    ParsedOperation,
    apply_drive_strand,
    classify,
    parse_operations,
    requires_reset,
)
from app.domain.real_world_assets.services.store import ProjectionStore
from app.shared.enums import StrandKind
from app.shared.exceptions import (
    AppError,
    StoreTransactionFailure,
    StrandApplicationError,
    UnknownOperationType,
    ValidationError,
)

ANY = "*"

_SKIPPED = (StrandOutcome.UNTRACKED, StrandOutcome.REDELIVERED, StrandOutcome.FILTERED)


@dataclass
class ProjectionResult:
    outcomes: list[StrandOutcome] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return sum(1 for o in self.outcomes if o not in _SKIPPED)

    @property
    def skipped(self) -> int:
        return len(self.outcomes) - self.applied


class Projector:
    """
    Applies strands from the document drive to the RWA read model.

    Each document strand is either replayed operation by operation through the
    surgical registry or, when it may rewrite history or carries an operation
    without a handler, rebuilt from the strand's state. Strands run in
    delivery order inside the caller's transaction, each in its own savepoint;
    the first failure stops the batch and is raised as `StrandApplicationError`.

    Strands outside the listener filter (`branches` and `scopes`, where "*"
    matches anything) are skipped without touching the read model.
    """

    def __init__(
        self,
        *,
        listener_id: str | None = None,
        portfolio_document_type: str | None = None,
        create_initial_state: InitialStateFactory = default_initial_state,
        registry: SurgicalRegistry = default_registry,
        track_revisions: bool | None = None,
        branches: Sequence[str] | None = None,
        scopes: Sequence[str] | None = None,
        log: BoundLogger | None = None,
    ) -> None:
        self.listener_id = listener_id or settings.rwa_listener_id
        self.portfolio_document_type = portfolio_document_type or settings.rwa_portfolio_document_type
        self.create_initial_state = create_initial_state
        self.registry = registry
        self.track_revisions = settings.rwa_track_revisions if track_revisions is None else track_revisions
        self.branches = tuple(settings.rwa_branches if branches is None else branches)
        self.scopes = tuple(settings.rwa_scopes if scopes is None else scopes)
        self.log = log or get_logger("rwa.projector", listener_id=self.listener_id)

    def apply_strands(self, strands: Sequence[Strand], db: Session) -> ProjectionResult:
        result = ProjectionResult()
        for strand in strands:
            log = self.log.bind(drive_id=strand.drive_id, document_id=strand.document_id or None)
            store = ProjectionStore(db, log=log)
            try:
                with db.begin_nested():
                    outcome = self.apply(strand, store)
            except SQLAlchemyError as exc:
                log.error("strand.failed", error=type(exc).__name__, detail=str(exc))
                failure = StoreTransactionFailure(str(exc))
                failure.__cause__ = exc
                raise StrandApplicationError(strand.drive_id, strand.document_id, failure) from exc
            except AppError as exc:
                log.error("strand.failed", error=type(exc).__name__, detail=str(exc))
                raise StrandApplicationError(strand.drive_id, strand.document_id, exc) from exc
            log.info("strand.processed", outcome=outcome.value, operations=len(strand.operations))
            result.outcomes.append(outcome)
        return result

    def apply(self, strand: Strand, store: ProjectionStore) -> StrandOutcome:
        if not self.accepts(strand):
            store.log.debug("strand.filtered", branch=strand.branch, scope=strand.scope)
            return StrandOutcome.FILTERED

        reset = requires_reset(strand.operations)
        if not reset and strand.operations:
            pending = self._unapplied(strand, store)
            if not pending:
                store.log.info("strand.redelivered", last_index=strand.operations[-1].index)
                return StrandOutcome.REDELIVERED
            if len(pending) < len(strand.operations):
                store.log.info(
                    "strand.partially_redelivered",
                    first_pending=pending[0].index,
                    already_applied=len(strand.operations) - len(pending),
                )
                strand = strand.model_copy(update={"operations": pending})

        if classify(strand) is StrandKind.DRIVE:
            apply_drive_strand(
                strand,
                store,
                listener_id=self.listener_id,
                portfolio_document_type=self.portfolio_document_type,
                create_initial_state=self.create_initial_state,
            )
            outcome = StrandOutcome.DRIVE
        else:
            outcome = self._apply_document_strand(strand, store, reset=reset)

        if outcome is not StrandOutcome.UNTRACKED:
            self._record(strand, store)
        return outcome

    def accepts(self, strand: Strand) -> bool:
        return _matches(strand.branch, self.branches) and _matches(strand.scope, self.scopes)

    def _apply_document_strand(self, strand: Strand, store: ProjectionStore, *, reset: bool) -> StrandOutcome:
        portfolio = store.find_one(Portfolio, drive_id=strand.drive_id, document_id=strand.document_id)
        if portfolio is None:
            store.log.debug("strand.untracked_document")
            return StrandOutcome.UNTRACKED

        operations = parse_operations(strand, self.registry, store.log)
        if reset or not all(op.surgical for op in operations):
            store.log.debug("strand.rebuild", reset=reset, operations=[op.type for op in operations])
            self._rebuild(strand, portfolio, store)
            return StrandOutcome.REBUILT

        try:
            self._apply_surgically(operations, portfolio, store)
        except UnknownOperationType as exc:
            store.log.warning("strand.surgical_fallback", operation=exc.operation_type)
            self._rebuild(strand, portfolio, store)
            return StrandOutcome.REBUILT
        return StrandOutcome.SURGICAL

    def _apply_surgically(self, operations: list[ParsedOperation], portfolio: Portfolio, store: ProjectionStore) -> None:
        for op in operations:
            self.registry.dispatch(op.type, op.payload, portfolio, store)

    def _rebuild(self, strand: Strand, portfolio: Portfolio, store: ProjectionStore) -> None:
        try:
            state = RealWorldAssetsState.model_validate(strand.state)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid portfolio state for {strand.document_id}: {exc}") from exc
        removed = clear_portfolio(store, portfolio.id)
        store.log.debug("strand.cleared", rows_removed=removed)
        rebuild_portfolio(store, drive_id=strand.drive_id, document_id=strand.document_id, state=state)

    def _unapplied(self, strand: Strand, store: ProjectionStore) -> list[OperationUpdate]:
        """Operations past the recorded revision of the strand's document."""
        if not self.track_revisions:
            return strand.operations
        revision = last_revision(
            store,
            listener_id=self.listener_id,
            drive_id=strand.drive_id,
            document_id=strand.document_id,
        )
        if revision is None:
            return strand.operations
        return [op for op in strand.operations if op.index > revision]

    def _record(self, strand: Strand, store: ProjectionStore) -> None:
        if not self.track_revisions or not strand.operations:
            return
        record_revision(
            store,
            listener_id=self.listener_id,
            drive_id=strand.drive_id,
            document_id=strand.document_id,
            revision=strand.operations[-1].index,
        )


def _matches(value: str, accepted: Sequence[str]) -> bool:
    return ANY in accepted or value in accepted


def apply_strands_atomically(projector: Projector, strands: Sequence[Strand], db: Session) -> ProjectionResult:
    """Run one batch as a single unit of work: commit on success, roll back everything on failure."""
    try:
        result = projector.apply_strands(strands, db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result
