from __future__ import annotations

import pytest
import structlog

from app.domain.real_world_assets.schemas.strands import OperationUpdate
from app.domain.real_world_assets.services.registry import registry
from app.domain.real_world_assets.services.router import classify, parse_operations, requires_reset
from app.shared.enums import StrandKind

from factories import document_strand, drive_strand, op


def _ops(*pairs: tuple[int, int]) -> list[OperationUpdate]:
    return [OperationUpdate(type="EDIT_SPV", index=index, skip=skip) for index, skip in pairs]


def test_classify_by_document_id():
    assert classify(drive_strand()) is StrandKind.DRIVE
    assert classify(document_strand()) is StrandKind.DOCUMENT


@pytest.mark.parametrize(
    "pairs, expected",
    [
        ([], False),
        ([(0, 0)], True),
        ([(0, 0), (1, 0), (2, 0)], True),
        ([(5, 0), (6, 0)], False),
        ([(5, 0), (6, 6)], True),
        ([(3, 3)], True),
        ([(5, 0), (6, 2)], False),
    ],
)
def test_requires_reset(pairs, expected):
    assert requires_reset(_ops(*pairs)) is expected


def test_reset_checks_the_final_operation():
    # Only the last op's index - skip matters, not a middle one.
    assert requires_reset(_ops((4, 0), (5, 5), (6, 0))) is False


def test_parse_marks_handled_and_valid_operations_surgical():
    strand = document_strand(
        op("CREATE_SPV", 1, {"id": "spv-1", "name": "SPV"}),
        op("NOT_A_REAL_OPERATION", 2, {"id": "x"}),
        op("EDIT_SPV", 3, {"name": "missing id"}),
    )
    parsed = parse_operations(strand, registry, structlog.get_logger())

    assert [p.type for p in parsed] == ["CREATE_SPV", "NOT_A_REAL_OPERATION", "EDIT_SPV"]
    assert [p.surgical for p in parsed] == [True, False, False]
    assert parsed[0].payload.id == "spv-1"
    assert parsed[1].raw_input == {"id": "x"}
