from __future__ import annotations

import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.domain.real_world_assets.enums import GroupTransactionType


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; unknown keys are ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AccountState(WireModel):
    id: str
    reference: str | None = None
    label: str | None = None


class SpvState(WireModel):
    id: str
    name: str | None = None


class ServiceProviderState(WireModel):
    id: str
    name: str | None = None
    fee_type: str | None = None
    account_id: str | None = None


class FixedIncomeTypeState(WireModel):
    id: str
    name: str | None = None


class AssetState(WireModel):
    """Either a cash asset (carries `currency`) or a fixed income asset."""

    id: str
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
    cusip: str | None = Field(default=None, validation_alias=AliasChoices("CUSIP", "cusip"))
    isin: str | None = Field(default=None, validation_alias=AliasChoices("ISIN", "isin"))
    coupon: float | None = None

    @property
    def is_cash(self) -> bool:
        return "currency" in self.model_fields_set


class BaseTransactionValue(WireModel):
    id: str
    asset_id: str | None = None
    amount: float | None = None
    entry_time: dt.datetime | None = None
    trade_time: dt.datetime | None = None
    settlement_time: dt.datetime | None = None
    tx_ref: str | None = None
    account_id: str | None = None
    counter_party_account_id: str | None = None


class GroupTransactionValue(WireModel):
    """Group transaction as carried by the document state and by create operations."""

    id: str
    type: GroupTransactionType | None = None
    entry_time: dt.datetime | None = None
    cash_balance_change: float | None = None
    unit_price: float | None = None
    cash_transaction: BaseTransactionValue | None = None
    fixed_income_transaction: BaseTransactionValue | None = None
    interest_transaction: BaseTransactionValue | None = None
    fee_transactions: list[BaseTransactionValue] = Field(default_factory=list)

    @field_validator("fee_transactions", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class RealWorldAssetsState(WireModel):
    principal_lender_account_id: str | None = None
    accounts: list[AccountState] = Field(default_factory=list)
    spvs: list[SpvState] = Field(default_factory=list)
    fee_types: list[ServiceProviderState] = Field(
        default_factory=list,
        validation_alias=AliasChoices("feeTypes", "serviceProviderFeeTypes", "fee_types"),
    )
    fixed_income_types: list[FixedIncomeTypeState] = Field(default_factory=list)
    portfolio: list[AssetState] = Field(default_factory=list)
    transactions: list[GroupTransactionValue] = Field(default_factory=list)
