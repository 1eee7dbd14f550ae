from __future__ import annotations

import uuid
from typing import Any

from app.domain.real_world_assets.enums import AssetType, GroupTransactionType
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
from app.domain.real_world_assets.schemas.state import AssetState, RealWorldAssetsState
from app.domain.real_world_assets.services.builders import build_group_transaction
from app.domain.real_world_assets.services.store import ProjectionStore

# Children first so direct foreign keys never dangle mid-teardown.
_DESCENDANT_MODELS = (
    BaseTransactionOnGroupTransaction,
    GroupTransaction,
    BaseTransaction,
    Asset,
    SpvOnPortfolio,
    ServiceProviderOnPortfolio,
    FixedIncomeTypeOnPortfolio,
    AccountOnPortfolio,
    Spv,
    ServiceProvider,
    FixedIncomeType,
    Account,
)


def asset_row(portfolio_id: uuid.UUID, asset: AssetState) -> dict[str, Any]:
    data = asset.model_dump(exclude={"id"})
    return {
        **data,
        "asset_ref_id": asset.id,
        "portfolio_id": portfolio_id,
        "asset_type": AssetType.CASH if asset.is_cash else AssetType.FIXED_INCOME,
    }


def rebuild_portfolio(
    store: ProjectionStore,
    *,
    drive_id: str,
    document_id: str,
    state: RealWorldAssetsState,
) -> Portfolio:
    """
    Re-derive the whole projection of one document from its state.

    Does not delete anything: rows already present are kept as they are, so a
    second run over the same state is a no-op. Callers that need stale rows
    gone run `clear_portfolio` first.
    """
    portfolio = store.upsert(
        Portfolio,
        {"drive_id": drive_id, "document_id": document_id},
        {"principal_lender_account_id": state.principal_lender_account_id},
    )
    pid = portfolio.id

    store.create_many(Spv, [{**spv.model_dump(), "portfolio_id": pid} for spv in state.spvs])
    store.create_many(ServiceProvider, [{**sp.model_dump(), "portfolio_id": pid} for sp in state.fee_types])
    store.create_many(FixedIncomeType, [{**fit.model_dump(), "portfolio_id": pid} for fit in state.fixed_income_types])
    store.create_many(Account, [{**account.model_dump(), "portfolio_id": pid} for account in state.accounts])
    store.create_many(Asset, [asset_row(pid, asset) for asset in state.portfolio])

    for transaction in state.transactions:
        if transaction.type is None:
            store.log.warning("rebuild.transaction_without_type", group_transaction_id=transaction.id)
            continue
        build_group_transaction(store, portfolio_id=pid, tx_type=GroupTransactionType(transaction.type), value=transaction)

    store.create_many(SpvOnPortfolio, [{"portfolio_id": pid, "spv_id": spv.id} for spv in state.spvs])
    store.create_many(
        ServiceProviderOnPortfolio,
        [{"portfolio_id": pid, "service_provider_id": sp.id} for sp in state.fee_types],
    )
    store.create_many(
        FixedIncomeTypeOnPortfolio,
        [{"portfolio_id": pid, "fixed_income_type_id": fit.id} for fit in state.fixed_income_types],
    )
    store.create_many(AccountOnPortfolio, [{"portfolio_id": pid, "account_id": a.id} for a in state.accounts])

    store.log.debug(
        "rebuild.completed",
        drive_id=drive_id,
        document_id=document_id,
        transactions=len(state.transactions),
        assets=len(state.portfolio),
    )
    return portfolio


def clear_portfolio(store: ProjectionStore, portfolio_id: uuid.UUID) -> int:
    """Delete every descendant row of a portfolio, keeping the portfolio row itself."""
    return sum(store.delete_many(model, portfolio_id=portfolio_id) for model in _DESCENDANT_MODELS)


def delete_portfolios(store: ProjectionStore, **filters: Any) -> int:
    """Delete matching portfolios together with all of their descendants."""
    portfolios = store.find_all(Portfolio, **filters)
    for portfolio in portfolios:
        clear_portfolio(store, portfolio.id)
        store.delete_many(Portfolio, id=portfolio.id)
    return len(portfolios)
