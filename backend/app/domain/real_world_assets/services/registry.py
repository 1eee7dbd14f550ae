from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from app.core.db.base import Base
from app.domain.real_world_assets.enums import (
    ALLOWED_ROLES,
    AssetType,
    GroupTransactionType,
    OperationType,
    TransactionRole,
)
from app.domain.real_world_assets.models import (
    Account,
    AccountOnPortfolio,
    Asset,
    BaseTransaction,
    BaseTransactionOnGroupTransaction,
    FixedIncomeType,
    FixedIncomeTypeOnPortfolio,
    GroupTransaction,
    Portfolio,
    ServiceProvider,
    ServiceProviderOnPortfolio,
    Spv,
    SpvOnPortfolio,
)
from app.domain.real_world_assets.schemas import operations as ops
from app.domain.real_world_assets.services.builders import (
    attach_fee_transactions,
    build_group_transaction,
    shape_legs,
)
from app.domain.real_world_assets.services.store import ProjectionStore
from app.shared.exceptions import MissingTargetRow, UnknownOperationType

Handler = Callable[[Any, Portfolio, ProjectionStore], None]

# Direct legs deleted together with their group transaction.
OWNED_LEG_COLUMNS = ("cash_transaction_id", "fixed_transaction_id")

_LEG_COLUMNS = {
    TransactionRole.CASH: "cash_transaction_id",
    TransactionRole.FIXED_INCOME: "fixed_transaction_id",
    TransactionRole.INTEREST: "interest_transaction_id",
}


@dataclass(frozen=True)
class SurgicalOperation:
    operation_type: OperationType
    input_model: type[BaseModel]
    handler: Handler


class SurgicalRegistry:
    """Operation type name -> (typed input model, handler)."""

    def __init__(self) -> None:
        self._operations: dict[str, SurgicalOperation] = {}

    def register(self, operation_type: OperationType, input_model: type[BaseModel]) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.add(operation_type, input_model, handler)
            return handler

        return decorator

    def add(self, operation_type: OperationType, input_model: type[BaseModel], handler: Handler) -> None:
        if operation_type.value in self._operations:
            raise ValueError(f"Surgical handler already registered for {operation_type.value}")
        self._operations[operation_type.value] = SurgicalOperation(operation_type, input_model, handler)

    def __contains__(self, operation_type: object) -> bool:
        return str(getattr(operation_type, "value", operation_type)) in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def types(self) -> list[str]:
        return sorted(self._operations)

    def get(self, operation_type: str) -> SurgicalOperation:
        try:
            return self._operations[operation_type]
        except KeyError:
            raise UnknownOperationType(operation_type) from None

    def parse(self, operation_type: str, raw_input: dict[str, Any]) -> BaseModel:
        """Validate a wire payload into its typed model (pydantic ValidationError on bad input)."""
        return self.get(operation_type).input_model.model_validate(raw_input)

    def dispatch(self, operation_type: str, payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        operation = self.get(operation_type)
        store.log.debug("surgical.apply", operation=operation_type, input=payload.model_dump(mode="json"))
        operation.handler(payload, portfolio, store)


registry = SurgicalRegistry()


def _key(portfolio: Portfolio, entity_id: str, *, column: str = "id") -> dict[str, Any]:
    return {column: entity_id, "portfolio_id": portfolio.id}


def _changes(payload: BaseModel, *, exclude: set[str] | None = None) -> dict[str, Any]:
    # Absent or null fields leave the stored value alone.
    return payload.model_dump(exclude={"id", *(exclude or set())}, exclude_none=True)


# --- Portfolio-scoped reference entities -------------------------------------------


def _register_entity(
    *,
    model: type[Base],
    membership: type[Base],
    membership_column: str,
    create: tuple[OperationType, type[BaseModel]],
    edit: tuple[OperationType, type[BaseModel]],
    remove: tuple[OperationType, type[BaseModel]],
) -> None:
    def create_handler(payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        store.create(model, {**payload.model_dump(), "portfolio_id": portfolio.id})
        store.create(membership, {"portfolio_id": portfolio.id, membership_column: payload.id})

    def edit_handler(payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        store.update(model, _key(portfolio, payload.id), _changes(payload))

    def delete_handler(payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        store.delete_many(membership, portfolio_id=portfolio.id, **{membership_column: payload.id})
        store.delete(model, _key(portfolio, payload.id))

    registry.add(*create, create_handler)
    registry.add(*edit, edit_handler)
    registry.add(*remove, delete_handler)


_register_entity(
    model=Spv,
    membership=SpvOnPortfolio,
    membership_column="spv_id",
    create=(OperationType.CREATE_SPV, ops.CreateSpvInput),
    edit=(OperationType.EDIT_SPV, ops.EditSpvInput),
    remove=(OperationType.DELETE_SPV, ops.DeleteSpvInput),
)
_register_entity(
    model=ServiceProvider,
    membership=ServiceProviderOnPortfolio,
    membership_column="service_provider_id",
    create=(OperationType.CREATE_SERVICE_PROVIDER, ops.CreateServiceProviderInput),
    edit=(OperationType.EDIT_SERVICE_PROVIDER, ops.EditServiceProviderInput),
    remove=(OperationType.DELETE_SERVICE_PROVIDER, ops.DeleteServiceProviderInput),
)
_register_entity(
    model=FixedIncomeType,
    membership=FixedIncomeTypeOnPortfolio,
    membership_column="fixed_income_type_id",
    create=(OperationType.CREATE_FIXED_INCOME_TYPE, ops.CreateFixedIncomeTypeInput),
    edit=(OperationType.EDIT_FIXED_INCOME_TYPE, ops.EditFixedIncomeTypeInput),
    remove=(OperationType.DELETE_FIXED_INCOME_TYPE, ops.DeleteFixedIncomeTypeInput),
)
_register_entity(
    model=Account,
    membership=AccountOnPortfolio,
    membership_column="account_id",
    create=(OperationType.CREATE_ACCOUNT, ops.CreateAccountInput),
    edit=(OperationType.EDIT_ACCOUNT, ops.EditAccountInput),
    remove=(OperationType.DELETE_ACCOUNT, ops.DeleteAccountInput),
)


# --- Assets ------------------------------------------------------------------------


def _register_asset(
    *,
    asset_type: AssetType,
    create: tuple[OperationType, type[BaseModel]],
    edit: tuple[OperationType, type[BaseModel]],
    remove: tuple[OperationType, type[BaseModel]],
) -> None:
    def create_handler(payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        store.create(
            Asset,
            {
                **payload.model_dump(exclude={"id"}),
                "asset_ref_id": payload.id,
                "portfolio_id": portfolio.id,
                "asset_type": asset_type,
            },
        )

    def edit_handler(payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        store.update(Asset, _key(portfolio, payload.id, column="asset_ref_id"), _changes(payload))

    def delete_handler(payload: BaseModel, portfolio: Portfolio, store: ProjectionStore) -> None:
        store.delete(Asset, _key(portfolio, payload.id, column="asset_ref_id"))

    registry.add(*create, create_handler)
    registry.add(*edit, edit_handler)
    registry.add(*remove, delete_handler)


_register_asset(
    asset_type=AssetType.CASH,
    create=(OperationType.CREATE_CASH_ASSET, ops.CreateCashAssetInput),
    edit=(OperationType.EDIT_CASH_ASSET, ops.EditCashAssetInput),
    remove=(OperationType.DELETE_CASH_ASSET, ops.DeleteCashAssetInput),
)
_register_asset(
    asset_type=AssetType.FIXED_INCOME,
    create=(OperationType.CREATE_FIXED_INCOME_ASSET, ops.CreateFixedIncomeAssetInput),
    edit=(OperationType.EDIT_FIXED_INCOME_ASSET, ops.EditFixedIncomeAssetInput),
    remove=(OperationType.DELETE_FIXED_INCOME_ASSET, ops.DeleteFixedIncomeAssetInput),
)


# --- Group transactions --------------------------------------------------------------


def _group(store: ProjectionStore, portfolio: Portfolio, group_id: str) -> GroupTransaction:
    group = store.find_one(GroupTransaction, **_key(portfolio, group_id))
    if group is None:
        raise MissingTargetRow(GroupTransaction.__name__, _key(portfolio, group_id))
    return group


def enforce_group_shape(store: ProjectionStore, portfolio: Portfolio, group_id: str) -> None:
    """Detach every leg the group's current type does not permit."""
    group = _group(store, portfolio, group_id)
    allowed = ALLOWED_ROLES[GroupTransactionType(group.type)]

    detached = {
        column: getattr(group, column)
        for role, column in _LEG_COLUMNS.items()
        if role not in allowed and getattr(group, column) is not None
    }
    if detached:
        store.update(GroupTransaction, _key(portfolio, group_id), {column: None for column in detached})
        for column, leg_id in detached.items():
            if column in OWNED_LEG_COLUMNS:
                store.delete(BaseTransaction, _key(portfolio, leg_id))

    if TransactionRole.FEE not in allowed:
        store.delete_many(BaseTransactionOnGroupTransaction, portfolio_id=portfolio.id, group_transaction_id=group_id)

    if detached:
        store.log.info("group_transaction.legs_detached", group_transaction_id=group_id, columns=sorted(detached))


def _create_group_transaction(tx_type: GroupTransactionType) -> Handler:
    def handler(payload: ops.CreateGroupTransactionInput, portfolio: Portfolio, store: ProjectionStore) -> None:
        build_group_transaction(store, portfolio_id=portfolio.id, tx_type=tx_type, value=payload)

    return handler


def _edit_group_transaction(tx_type: GroupTransactionType) -> Handler:
    def handler(payload: ops.EditGroupTransactionInput, portfolio: Portfolio, store: ProjectionStore) -> None:
        fields = payload.model_dump(include={"entry_time", "cash_balance_change", "unit_price"}, exclude_none=True)
        store.update(GroupTransaction, _key(portfolio, payload.id), {"type": tx_type, **fields})

        legs = shape_legs(tx_type, payload)
        if legs.dropped:
            store.log.warning(
                "group_transaction.legs_ignored",
                group_transaction_id=payload.id,
                type=tx_type.value,
                roles=[r.value for r in legs.dropped],
            )
        for leg in (legs.cash, legs.fixed_income, legs.interest, *legs.fees):
            if leg is not None:
                store.update(BaseTransaction, _key(portfolio, leg.id), _changes(leg))

        enforce_group_shape(store, portfolio, payload.id)

    return handler


_GROUP_OPERATIONS = {
    GroupTransactionType.PRINCIPAL_DRAW: (
        OperationType.CREATE_PRINCIPAL_DRAW_GROUP_TRANSACTION,
        OperationType.EDIT_PRINCIPAL_DRAW_GROUP_TRANSACTION,
    ),
    GroupTransactionType.PRINCIPAL_RETURN: (
        OperationType.CREATE_PRINCIPAL_RETURN_GROUP_TRANSACTION,
        OperationType.EDIT_PRINCIPAL_RETURN_GROUP_TRANSACTION,
    ),
    GroupTransactionType.ASSET_PURCHASE: (
        OperationType.CREATE_ASSET_PURCHASE_GROUP_TRANSACTION,
        OperationType.EDIT_ASSET_PURCHASE_GROUP_TRANSACTION,
    ),
    GroupTransactionType.ASSET_SALE: (
        OperationType.CREATE_ASSET_SALE_GROUP_TRANSACTION,
        OperationType.EDIT_ASSET_SALE_GROUP_TRANSACTION,
    ),
    GroupTransactionType.INTEREST_DRAW: (
        OperationType.CREATE_INTEREST_DRAW_GROUP_TRANSACTION,
        OperationType.EDIT_INTEREST_DRAW_GROUP_TRANSACTION,
    ),
    GroupTransactionType.INTEREST_RETURN: (
        OperationType.CREATE_INTEREST_RETURN_GROUP_TRANSACTION,
        OperationType.EDIT_INTEREST_RETURN_GROUP_TRANSACTION,
    ),
    GroupTransactionType.FEES_PAYMENT: (
        OperationType.CREATE_FEES_PAYMENT_GROUP_TRANSACTION,
        OperationType.EDIT_FEES_PAYMENT_GROUP_TRANSACTION,
    ),
}

for _tx_type, (_create_op, _edit_op) in _GROUP_OPERATIONS.items():
    registry.add(_create_op, ops.CreateGroupTransactionInput, _create_group_transaction(_tx_type))
    registry.add(_edit_op, ops.EditGroupTransactionInput, _edit_group_transaction(_tx_type))


@registry.register(OperationType.EDIT_GROUP_TRANSACTION_TYPE, ops.EditGroupTransactionTypeInput)
def edit_group_transaction_type(
    payload: ops.EditGroupTransactionTypeInput, portfolio: Portfolio, store: ProjectionStore
) -> None:
    store.update(GroupTransaction, _key(portfolio, payload.id), {"type": payload.type})
    enforce_group_shape(store, portfolio, payload.id)


@registry.register(OperationType.ADD_FEE_TRANSACTIONS_TO_GROUP_TRANSACTION, ops.AddFeeTransactionsToGroupTransactionInput)
def add_fee_transactions_to_group_transaction(
    payload: ops.AddFeeTransactionsToGroupTransactionInput, portfolio: Portfolio, store: ProjectionStore
) -> None:
    group = _group(store, portfolio, payload.id)
    if TransactionRole.FEE not in ALLOWED_ROLES[GroupTransactionType(group.type)]:
        store.log.warning("group_transaction.fees_not_permitted", group_transaction_id=payload.id, type=group.type.value)
        return
    attach_fee_transactions(store, portfolio_id=portfolio.id, group_transaction_id=payload.id, fees=payload.fee_transactions)


@registry.register(OperationType.EDIT_FEE_TRANSACTION, ops.EditFeeTransactionInput)
def edit_fee_transaction(payload: ops.EditFeeTransactionInput, portfolio: Portfolio, store: ProjectionStore) -> None:
    store.update(BaseTransaction, _key(portfolio, payload.id), _changes(payload))


@registry.register(
    OperationType.REMOVE_FEE_TRANSACTION_FROM_GROUP_TRANSACTION,
    ops.RemoveFeeTransactionFromGroupTransactionInput,
)
def remove_fee_transaction_from_group_transaction(
    payload: ops.RemoveFeeTransactionFromGroupTransactionInput, portfolio: Portfolio, store: ProjectionStore
) -> None:
    store.delete_many(
        BaseTransactionOnGroupTransaction,
        portfolio_id=portfolio.id,
        base_transaction_id=payload.fee_transaction_id,
        group_transaction_id=payload.id,
    )
    store.delete(BaseTransaction, _key(portfolio, payload.fee_transaction_id))


@registry.register(OperationType.DELETE_GROUP_TRANSACTION, ops.DeleteGroupTransactionInput)
def delete_group_transaction(
    payload: ops.DeleteGroupTransactionInput, portfolio: Portfolio, store: ProjectionStore
) -> None:
    group = _group(store, portfolio, payload.id)
    owned = [getattr(group, column) for column in OWNED_LEG_COLUMNS if getattr(group, column) is not None]

    # Fee legs stay addressable by their own id; only the links go.
    store.delete_many(BaseTransactionOnGroupTransaction, portfolio_id=portfolio.id, group_transaction_id=payload.id)
    store.delete(GroupTransaction, _key(portfolio, payload.id))
    for leg_id in owned:
        store.delete(BaseTransaction, _key(portfolio, leg_id))
