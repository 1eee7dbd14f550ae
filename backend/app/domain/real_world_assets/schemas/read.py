from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field

from app.domain.real_world_assets.enums import AssetType, GroupTransactionType


class _ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PortfolioOut(_ReadModel):
    id: uuid.UUID
    drive_id: str
    document_id: str
    principal_lender_account_id: str | None = None


class SpvOut(_ReadModel):
    id: str
    name: str | None = None


class ServiceProviderOut(_ReadModel):
    id: str
    name: str | None = None
    fee_type: str | None = None
    account_id: str | None = None


class FixedIncomeTypeOut(_ReadModel):
    id: str
    name: str | None = None


class AccountOut(_ReadModel):
    id: str
    reference: str | None = None
    label: str | None = None


class AssetOut(_ReadModel):
    asset_ref_id: str
    asset_type: AssetType
    spv_id: str | None = None
    name: str | None = None
    currency: str | None = None
    balance: float | None = None
    fixed_income_type_id: str | None = None
    maturity: dt.datetime | None = None
    purchase_date: dt.datetime | None = None
    notional: float | None = None
    purchase_price: float | None = None
    purchase_proceeds: float | None = None
    total_discount: float | None = None
    annualized_yield: float | None = None
    realized_surplus: float | None = None
    cusip: str | None = None
    isin: str | None = None
    coupon: float | None = None


class BaseTransactionOut(_ReadModel):
    id: str
    asset_id: str | None = None
    amount: float | None = None
    entry_time: dt.datetime | None = None
    trade_time: dt.datetime | None = None
    settlement_time: dt.datetime | None = None
    tx_ref: str | None = None
    account_id: str | None = None
    counter_party_account_id: str | None = None


class GroupTransactionOut(_ReadModel):
    id: str
    type: GroupTransactionType
    entry_time: dt.datetime | None = None
    cash_balance_change: float | None = None
    unit_price: float | None = None
    cash_transaction: BaseTransactionOut | None = None
    fixed_income_transaction: BaseTransactionOut | None = None
    interest_transaction: BaseTransactionOut | None = None
    fee_transactions: list[BaseTransactionOut] = Field(default_factory=list)


class PortfolioDetailOut(PortfolioOut):
    spvs: list[SpvOut] = Field(default_factory=list)
    service_providers: list[ServiceProviderOut] = Field(default_factory=list)
    fixed_income_types: list[FixedIncomeTypeOut] = Field(default_factory=list)
    accounts: list[AccountOut] = Field(default_factory=list)
    assets: list[AssetOut] = Field(default_factory=list)
    transactions: list[GroupTransactionOut] = Field(default_factory=list)
