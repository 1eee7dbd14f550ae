from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

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
from app.domain.real_world_assets.schemas.read import (
    AccountOut,
    AssetOut,
    BaseTransactionOut,
    FixedIncomeTypeOut,
    GroupTransactionOut,
    PortfolioDetailOut,
    ServiceProviderOut,
    SpvOut,
)
from app.shared.exceptions import NotFound


def list_portfolios(db: Session, *, drive_id: str) -> list[Portfolio]:
    stmt = select(Portfolio).where(Portfolio.drive_id == drive_id).order_by(Portfolio.document_id.asc())
    return list(db.execute(stmt).scalars().all())


def get_portfolio(db: Session, *, drive_id: str, document_id: str) -> Portfolio:
    portfolio = (
        db.execute(select(Portfolio).where(Portfolio.drive_id == drive_id, Portfolio.document_id == document_id))
        .scalars()
        .first()
    )
    if portfolio is None:
        raise NotFound(f"Portfolio {drive_id}/{document_id} not found")
    return portfolio


def _members(db: Session, model, membership, column: str, portfolio_id) -> list:
    # Reference entities are listed through their membership rows.
    stmt = (
        select(model)
        .join(
            membership,
            (getattr(membership, column) == model.id) & (membership.portfolio_id == model.portfolio_id),
        )
        .where(model.portfolio_id == portfolio_id)
        .order_by(model.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_portfolio_detail(db: Session, *, drive_id: str, document_id: str) -> PortfolioDetailOut:
    portfolio = get_portfolio(db, drive_id=drive_id, document_id=document_id)
    pid = portfolio.id

    base_txs = {
        tx.id: BaseTransactionOut.model_validate(tx)
        for tx in db.execute(select(BaseTransaction).where(BaseTransaction.portfolio_id == pid)).scalars()
    }
    fee_links: dict[str, list[str]] = {}
    for link in db.execute(
        select(BaseTransactionOnGroupTransaction)
        .where(BaseTransactionOnGroupTransaction.portfolio_id == pid)
        .order_by(BaseTransactionOnGroupTransaction.base_transaction_id.asc())
    ).scalars():
        fee_links.setdefault(link.group_transaction_id, []).append(link.base_transaction_id)

    transactions = []
    for group in db.execute(
        select(GroupTransaction).where(GroupTransaction.portfolio_id == pid).order_by(GroupTransaction.id.asc())
    ).scalars():
        transactions.append(
            GroupTransactionOut(
                id=group.id,
                type=group.type,
                entry_time=group.entry_time,
                cash_balance_change=group.cash_balance_change,
                unit_price=group.unit_price,
                cash_transaction=base_txs.get(group.cash_transaction_id) if group.cash_transaction_id else None,
                fixed_income_transaction=(
                    base_txs.get(group.fixed_transaction_id) if group.fixed_transaction_id else None
                ),
                interest_transaction=(
                    base_txs.get(group.interest_transaction_id) if group.interest_transaction_id else None
                ),
                fee_transactions=[base_txs[i] for i in fee_links.get(group.id, []) if i in base_txs],
            )
        )

    assets = db.execute(select(Asset).where(Asset.portfolio_id == pid).order_by(Asset.asset_ref_id.asc())).scalars()

    return PortfolioDetailOut(
        id=portfolio.id,
        drive_id=portfolio.drive_id,
        document_id=portfolio.document_id,
        principal_lender_account_id=portfolio.principal_lender_account_id,
        spvs=[SpvOut.model_validate(s) for s in _members(db, Spv, SpvOnPortfolio, "spv_id", pid)],
        service_providers=[
            ServiceProviderOut.model_validate(s)
            for s in _members(db, ServiceProvider, ServiceProviderOnPortfolio, "service_provider_id", pid)
        ],
        fixed_income_types=[
            FixedIncomeTypeOut.model_validate(f)
            for f in _members(db, FixedIncomeType, FixedIncomeTypeOnPortfolio, "fixed_income_type_id", pid)
        ],
        accounts=[AccountOut.model_validate(a) for a in _members(db, Account, AccountOnPortfolio, "account_id", pid)],
        assets=[AssetOut.model_validate(a) for a in assets],
        transactions=transactions,
    )
