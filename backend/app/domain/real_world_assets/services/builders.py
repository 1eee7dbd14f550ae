from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from app.domain.real_world_assets.enums import ALLOWED_ROLES, GroupTransactionType, TransactionRole
from app.domain.real_world_assets.models import (
    BaseTransaction,
    BaseTransactionOnGroupTransaction,
    GroupTransaction,
)
from app.domain.real_world_assets.schemas.state import BaseTransactionValue, GroupTransactionValue
from app.domain.real_world_assets.services.store import ProjectionStore


@dataclass(frozen=True)
class GroupTransactionLegs:
    """Base transactions a group transaction keeps once its type's shape is applied."""

    cash: BaseTransactionValue | None = None
    fixed_income: BaseTransactionValue | None = None
    interest: BaseTransactionValue | None = None
    fees: list[BaseTransactionValue] = field(default_factory=list)
    dropped: list[TransactionRole] = field(default_factory=list)


def shape_legs(tx_type: GroupTransactionType, value: GroupTransactionValue) -> GroupTransactionLegs:
    allowed = ALLOWED_ROLES[tx_type]
    offered = {
        TransactionRole.CASH: value.cash_transaction,
        TransactionRole.FIXED_INCOME: value.fixed_income_transaction,
        TransactionRole.INTEREST: value.interest_transaction,
    }
    kept = {role: (tx if role in allowed else None) for role, tx in offered.items()}
    dropped = [role for role, tx in offered.items() if tx is not None and role not in allowed]

    fees = list(value.fee_transactions) if TransactionRole.FEE in allowed else []
    if value.fee_transactions and TransactionRole.FEE not in allowed:
        dropped.append(TransactionRole.FEE)

    return GroupTransactionLegs(
        cash=kept[TransactionRole.CASH],
        fixed_income=kept[TransactionRole.FIXED_INCOME],
        interest=kept[TransactionRole.INTEREST],
        fees=fees,
        dropped=dropped,
    )


def base_transaction_row(portfolio_id: uuid.UUID, tx: BaseTransactionValue) -> dict:
    return {**tx.model_dump(), "portfolio_id": portfolio_id}


def attach_fee_transactions(
    store: ProjectionStore,
    *,
    portfolio_id: uuid.UUID,
    group_transaction_id: str,
    fees: list[BaseTransactionValue],
) -> None:
    store.create_many(BaseTransaction, [base_transaction_row(portfolio_id, fee) for fee in fees])
    store.create_many(
        BaseTransactionOnGroupTransaction,
        [
            {
                "portfolio_id": portfolio_id,
                "base_transaction_id": fee.id,
                "group_transaction_id": group_transaction_id,
            }
            for fee in fees
        ],
    )


def build_group_transaction(
    store: ProjectionStore,
    *,
    portfolio_id: uuid.UUID,
    tx_type: GroupTransactionType,
    value: GroupTransactionValue,
) -> GroupTransactionLegs:
    """
    Insert one group transaction with its permitted legs.

    Cash, fixed income and interest legs are linked by direct id on the group
    row; fees get a join row each. Legs the type does not permit are dropped.
    Every insert skips rows that already exist, so replaying the same value is
    a no-op. Used by the rebuild engine and by every create handler.
    """
    legs = shape_legs(tx_type, value)
    if legs.dropped:
        store.log.warning(
            "group_transaction.legs_dropped",
            group_transaction_id=value.id,
            type=tx_type.value,
            roles=[r.value for r in legs.dropped],
        )

    direct = [tx for tx in (legs.cash, legs.fixed_income, legs.interest) if tx is not None]
    store.create_many(BaseTransaction, [base_transaction_row(portfolio_id, tx) for tx in direct])

    store.create(
        GroupTransaction,
        {
            "id": value.id,
            "portfolio_id": portfolio_id,
            "type": tx_type,
            "entry_time": value.entry_time,
            "cash_balance_change": value.cash_balance_change,
            "unit_price": value.unit_price,
            "cash_transaction_id": legs.cash.id if legs.cash else None,
            "fixed_transaction_id": legs.fixed_income.id if legs.fixed_income else None,
            "interest_transaction_id": legs.interest.id if legs.interest else None,
        },
    )

    attach_fee_transactions(store, portfolio_id=portfolio_id, group_transaction_id=value.id, fees=legs.fees)
    return legs
