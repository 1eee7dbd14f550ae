from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Enum as SAEnum, ForeignKey, Index, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import Base, IdMixin, TimestampMixin
from app.domain.real_world_assets.enums import AssetType


def _portfolio_fk() -> Mapped[uuid.UUID]:
    return mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("rwa_portfolios.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )


class Portfolio(Base, IdMixin, TimestampMixin):
    """
    Root of one RWA portfolio document projected from a drive.

    Every other read-model row hangs off `id` and is removed with it.
    """

    __tablename__ = "rwa_portfolios"

    drive_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    document_id: Mapped[str] = mapped_column(String(255), nullable=False)
    principal_lender_account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (UniqueConstraint("drive_id", "document_id", name="uq_rwa_portfolios_drive_document"),)


class Spv(Base):
    __tablename__ = "rwa_portfolio_spvs"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)


class ServiceProvider(Base):
    __tablename__ = "rwa_portfolio_service_providers"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    fee_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)


class FixedIncomeType(Base):
    __tablename__ = "rwa_portfolio_fixed_income_types"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)


class Account(Base):
    __tablename__ = "rwa_portfolio_accounts"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)


class Asset(Base):
    """Cash or fixed income position; `asset_type` is derived by the projector."""

    __tablename__ = "rwa_portfolio_assets"

    asset_ref_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    asset_type: Mapped[AssetType] = mapped_column(
        SAEnum(AssetType, name="rwa_asset_type_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    spv_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Cash
    currency: Mapped[str | None] = mapped_column(String(16), nullable=True)
    balance: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)

    # Fixed income
    fixed_income_type_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    maturity: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    purchase_date: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    notional: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    purchase_proceeds: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    total_discount: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    annualized_yield: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    realized_surplus: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    cusip: Mapped[str | None] = mapped_column(String(32), nullable=True)
    isin: Mapped[str | None] = mapped_column(String(32), nullable=True)
    coupon: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)


class SpvOnPortfolio(Base):
    __tablename__ = "rwa_spvs_on_portfolios"

    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    spv_id: Mapped[str] = mapped_column(String(255), primary_key=True)


class ServiceProviderOnPortfolio(Base):
    __tablename__ = "rwa_service_providers_on_portfolios"

    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    service_provider_id: Mapped[str] = mapped_column(String(255), primary_key=True)


class FixedIncomeTypeOnPortfolio(Base):
    __tablename__ = "rwa_fixed_income_types_on_portfolios"

    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    fixed_income_type_id: Mapped[str] = mapped_column(String(255), primary_key=True)


class AccountOnPortfolio(Base):
    __tablename__ = "rwa_accounts_on_portfolios"

    portfolio_id: Mapped[uuid.UUID] = _portfolio_fk()
    account_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    __table_args__ = (Index("ix_rwa_accounts_on_portfolios_account", "account_id"),)
