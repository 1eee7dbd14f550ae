from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError as PydanticValidationError
from structlog.stdlib import BoundLogger

from app.domain.real_world_assets.enums import DriveOperationType
from app.domain.real_world_assets.schemas.state import RealWorldAssetsState
from app.domain.real_world_assets.schemas.strands import (
    AddFileInput,
    DeleteNodeInput,
    DriveState,
    OperationUpdate,
    Strand,
)
from app.domain.real_world_assets.services.rebuild import delete_portfolios, rebuild_portfolio
from app.domain.real_world_assets.services.registry import SurgicalRegistry
from app.domain.real_world_assets.services.revisions import forget_revisions
from app.domain.real_world_assets.services.store import ProjectionStore
from app.shared.enums import StrandKind
from app.shared.exceptions import ValidationError

InitialStateFactory = Callable[[AddFileInput], RealWorldAssetsState]


@dataclass(frozen=True)
class ParsedOperation:
    type: str
    index: int
    skip: int
    raw_input: dict[str, Any] = field(default_factory=dict)
    # None when the type has no surgical handler or its input did not validate.
    payload: BaseModel | None = None

    @property
    def surgical(self) -> bool:
        return self.payload is not None


def classify(strand: Strand) -> StrandKind:
    return StrandKind.DRIVE if strand.document_id == "" else StrandKind.DOCUMENT


def requires_reset(operations: Sequence[OperationUpdate | ParsedOperation]) -> bool:
    """
    True when the strand may rewrite history: it starts from operation 0, or
    its last operation's index minus skip collapses to 0.
    """
    if not operations:
        return False
    first, last = operations[0], operations[-1]
    return first.index == 0 or last.index - last.skip == 0


def parse_operations(strand: Strand, registry: SurgicalRegistry, log: BoundLogger) -> list[ParsedOperation]:
    parsed: list[ParsedOperation] = []
    for op in strand.operations:
        payload = None
        if op.type in registry:
            try:
                payload = registry.parse(op.type, op.input)
            except PydanticValidationError as exc:
                log.warning(
                    "strand.operation_input_invalid",
                    operation=op.type,
                    index=op.index,
                    errors=exc.errors(include_url=False),
                )
        parsed.append(ParsedOperation(type=op.type, index=op.index, skip=op.skip, raw_input=op.input, payload=payload))
    return parsed


def _drive_id(strand: Strand) -> str:
    try:
        state = DriveState.model_validate(strand.state)
    except PydanticValidationError:
        return strand.drive_id
    return state.id or strand.drive_id


def apply_drive_strand(
    strand: Strand,
    store: ProjectionStore,
    *,
    listener_id: str,
    portfolio_document_type: str,
    create_initial_state: InitialStateFactory,
) -> None:
    """
    Structural replay of a drive strand: a reset tears down every portfolio of
    the drive, then ADD_FILE seeds portfolio documents and DELETE_NODE removes
    them. Other drive operations do not affect the read model.
    """
    log = store.log
    if requires_reset(strand.operations):
        drive_id = _drive_id(strand)
        removed = delete_portfolios(store, drive_id=drive_id)
        forget_revisions(store, listener_id=listener_id, drive_id=drive_id)
        log.info("drive.reset", drive_id=drive_id, portfolios_removed=removed)

    for op in strand.operations:
        if op.type == DriveOperationType.ADD_FILE.value:
            add_file = _parse_drive_input(AddFileInput, op)
            if add_file.document_type != portfolio_document_type:
                log.debug("drive.add_file_ignored", document_id=add_file.id, document_type=add_file.document_type)
                continue
            try:
                initial_state = create_initial_state(add_file)
            except PydanticValidationError as exc:
                raise ValidationError(f"Invalid initial state for {add_file.id}: {exc}") from exc
            log.info("drive.add_file", document_id=add_file.id)
            rebuild_portfolio(store, drive_id=strand.drive_id, document_id=add_file.id, state=initial_state)
        elif op.type == DriveOperationType.DELETE_NODE.value:
            node = _parse_drive_input(DeleteNodeInput, op)
            removed = delete_portfolios(store, drive_id=strand.drive_id, document_id=node.id)
            forget_revisions(store, listener_id=listener_id, drive_id=strand.drive_id, document_id=node.id)
            log.info("drive.delete_node", document_id=node.id, portfolios_removed=removed)
        else:
            log.debug("drive.operation_ignored", operation=op.type)


def _parse_drive_input(model: type[BaseModel], op: OperationUpdate):
    try:
        return model.model_validate(op.input)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {op.type} input at index {op.index}: {exc}") from exc
