from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Enum as SAEnum, ForeignKey, ForeignKeyConstraint, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import Base
from app.domain.real_world_assets.enums import GroupTransactionType


class BaseTransaction(Base):
    """Elementary cash/fee/fixed income/interest movement."""

    __tablename__ = "rwa_base_transactions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("rwa_portfolios.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    asset_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    entry_time: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    trade_time: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    settlement_time: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    tx_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    counter_party_account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)


class GroupTransaction(Base):
    """
    Composite transaction of one of the seven group types.

    Cash, fixed income and interest legs are owned 1:1 through the direct id
    columns; fee legs are attached through `BaseTransactionOnGroupTransaction`.
    """

    __tablename__ = "rwa_group_transactions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("rwa_portfolios.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    type: Mapped[GroupTransactionType] = mapped_column(
        SAEnum(
            GroupTransactionType,
            name="rwa_group_transaction_type_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        index=True,
    )
    entry_time: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    cash_balance_change: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)

    cash_transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    fixed_transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    interest_transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        ForeignKeyConstraint(
            ["cash_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            name="fk_rwa_group_transactions_cash",
        ),
        ForeignKeyConstraint(
            ["fixed_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            name="fk_rwa_group_transactions_fixed",
        ),
        ForeignKeyConstraint(
            ["interest_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            name="fk_rwa_group_transactions_interest",
        ),
    )


class BaseTransactionOnGroupTransaction(Base):
    __tablename__ = "rwa_base_transactions_on_group_transactions"

    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("rwa_portfolios.id", ondelete="CASCADE"),
        primary_key=True,
    )
    base_transaction_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    group_transaction_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    __table_args__ = (
        ForeignKeyConstraint(
            ["base_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            ondelete="CASCADE",
            name="fk_rwa_fee_links_base",
        ),
        ForeignKeyConstraint(
            ["group_transaction_id", "portfolio_id"],
            ["rwa_group_transactions.id", "rwa_group_transactions.portfolio_id"],
            ondelete="CASCADE",
            name="fk_rwa_fee_links_group",
        ),
        Index("ix_rwa_fee_links_group", "portfolio_id", "group_transaction_id"),
    )
