from __future__ import annotations

import datetime as dt

from pydantic import AliasChoices, Field, field_validator

from app.domain.real_world_assets.enums import GroupTransactionType
from app.domain.real_world_assets.schemas.state import (
    BaseTransactionValue,
    GroupTransactionValue,
    WireModel,
)


class DeleteByIdInput(WireModel):
    id: str


# SPV
class CreateSpvInput(WireModel):
    id: str
    name: str | None = None


class EditSpvInput(WireModel):
    id: str
    name: str | None = None


class DeleteSpvInput(DeleteByIdInput):
    pass


# Service providers (a.k.a. fee types)
class CreateServiceProviderInput(WireModel):
    id: str
    name: str | None = None
    fee_type: str | None = None
    account_id: str | None = None


class EditServiceProviderInput(CreateServiceProviderInput):
    pass


class DeleteServiceProviderInput(DeleteByIdInput):
    pass


# Fixed income types
class CreateFixedIncomeTypeInput(WireModel):
    id: str
    name: str | None = None


class EditFixedIncomeTypeInput(CreateFixedIncomeTypeInput):
    pass


class DeleteFixedIncomeTypeInput(DeleteByIdInput):
    pass


# Accounts
class CreateAccountInput(WireModel):
    id: str
    reference: str | None = None
    label: str | None = None


class EditAccountInput(CreateAccountInput):
    pass


class DeleteAccountInput(DeleteByIdInput):
    pass


# Assets
class CreateCashAssetInput(WireModel):
    id: str
    spv_id: str | None = None
    currency: str | None = None
    balance: float | None = None


class EditCashAssetInput(CreateCashAssetInput):
    pass


class DeleteCashAssetInput(DeleteByIdInput):
    pass


class CreateFixedIncomeAssetInput(WireModel):
    id: str
    fixed_income_type_id: str | None = None
    name: str | None = None
    spv_id: str | None = None
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


class EditFixedIncomeAssetInput(CreateFixedIncomeAssetInput):
    pass


class DeleteFixedIncomeAssetInput(DeleteByIdInput):
    pass


# Group transactions: create inputs share the state shape so one builder serves both.
class CreateGroupTransactionInput(GroupTransactionValue):
    pass


class EditGroupTransactionInput(GroupTransactionValue):
    """Edits address every leg by its own id; `type` comes from the operation, not the payload."""


class EditGroupTransactionTypeInput(WireModel):
    id: str
    type: GroupTransactionType


class AddFeeTransactionsToGroupTransactionInput(WireModel):
    id: str
    fee_transactions: list[BaseTransactionValue] = Field(default_factory=list)

    @field_validator("fee_transactions", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class EditFeeTransactionInput(BaseTransactionValue):
    pass


class RemoveFeeTransactionFromGroupTransactionInput(WireModel):
    id: str
    fee_transaction_id: str


class DeleteGroupTransactionInput(DeleteByIdInput):
    pass
