from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from app.domain.real_world_assets.enums import AssetType, GroupTransactionType
from app.domain.real_world_assets.models import (
    Account,
    AccountOnPortfolio,
    Asset,
    BaseTransaction,
    BaseTransactionOnGroupTransaction,
    GroupTransaction,
    Portfolio,
    ServiceProvider,
    Spv,
)
from app.domain.real_world_assets.schemas.state import RealWorldAssetsState
from app.domain.real_world_assets.services.rebuild import clear_portfolio, delete_portfolios, rebuild_portfolio
from app.domain.real_world_assets.services.store import ProjectionStore
from app.shared.utils import sa_model_to_dict

from factories import DOCUMENT_ID, DRIVE_ID, base_tx, cash_asset, fixed_income_asset, group_tx, portfolio_state


def _state() -> RealWorldAssetsState:
    return RealWorldAssetsState.model_validate(
        portfolio_state(
            principalLenderAccountId="acc-lender",
            accounts=[{"id": "acc-lender", "reference": "REF", "label": "Lender"}, {"id": "acc-2"}],
            spvs=[{"id": "spv-1", "name": "SPV One"}],
            feeTypes=[{"id": "sp-1", "name": "Custodian", "feeType": "Custody", "accountId": "acc-2"}],
            fixedIncomeTypes=[{"id": "fit-1", "name": "T-Bill"}],
            portfolio=[cash_asset(), fixed_income_asset()],
            transactions=[
                group_tx(
                    "gt-purchase",
                    "AssetPurchase",
                    cash=base_tx("bt-cash"),
                    fixed=base_tx("bt-fixed", asset_id="fi-1"),
                    fees=[base_tx("bt-fee-1", amount=5), base_tx("bt-fee-2", amount=6)],
                ),
                group_tx("gt-interest", "InterestReturn", interest=base_tx("bt-int", amount=3)),
            ],
        )
    )


def _snapshot(db: Session, portfolio_id) -> dict[str, list[dict]]:
    snapshot = {}
    for model in (Spv, ServiceProvider, Account, AccountOnPortfolio, Asset, BaseTransaction, GroupTransaction):
        rows = db.query(model).filter_by(portfolio_id=portfolio_id).all()
        snapshot[model.__tablename__] = sorted((sa_model_to_dict(r) for r in rows), key=repr)
    return snapshot


def test_rebuild_projects_every_entity(db_session: Session, store: ProjectionStore):
    portfolio = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=_state())

    assert portfolio.principal_lender_account_id == "acc-lender"
    assert db_session.query(Spv).filter_by(portfolio_id=portfolio.id).count() == 1
    assert db_session.query(ServiceProvider).filter_by(portfolio_id=portfolio.id).one().fee_type == "Custody"
    assert db_session.query(AccountOnPortfolio).filter_by(portfolio_id=portfolio.id).count() == 2

    assets = {a.asset_ref_id: a for a in db_session.query(Asset).filter_by(portfolio_id=portfolio.id)}
    assert assets["cash-1"].asset_type is AssetType.CASH
    assert assets["cash-1"].currency == "USD"
    assert assets["fi-1"].asset_type is AssetType.FIXED_INCOME
    assert assets["fi-1"].cusip == "912796XY1"
    assert assets["fi-1"].isin == "US912796XY12"

    purchase = db_session.query(GroupTransaction).filter_by(id="gt-purchase").one()
    assert purchase.type is GroupTransactionType.ASSET_PURCHASE
    assert purchase.cash_transaction_id == "bt-cash"
    assert purchase.fixed_transaction_id == "bt-fixed"
    assert purchase.interest_transaction_id is None
    links = db_session.query(BaseTransactionOnGroupTransaction).filter_by(group_transaction_id="gt-purchase").all()
    assert sorted(link.base_transaction_id for link in links) == ["bt-fee-1", "bt-fee-2"]

    interest = db_session.query(GroupTransaction).filter_by(id="gt-interest").one()
    assert interest.interest_transaction_id == "bt-int"
    assert interest.cash_transaction_id is None


def test_amounts_load_as_exact_decimals(db_session: Session, store: ProjectionStore):
    portfolio = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=_state())

    assets = {a.asset_ref_id: a for a in db_session.query(Asset).filter_by(portfolio_id=portfolio.id)}
    assert isinstance(assets["cash-1"].balance, Decimal)
    assert assets["fi-1"].purchase_price == Decimal("98.5")
    assert isinstance(db_session.query(BaseTransaction).filter_by(id="bt-cash").one().amount, Decimal)


def test_rebuild_twice_yields_identical_rows(db_session: Session, store: ProjectionStore):
    first = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=_state())
    before = _snapshot(db_session, first.id)

    second = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=_state())

    assert second.id == first.id
    assert _snapshot(db_session, second.id) == before


def test_rebuild_drops_legs_the_type_does_not_permit(db_session: Session, store: ProjectionStore):
    state = RealWorldAssetsState.model_validate(
        portfolio_state(
            transactions=[
                group_tx(
                    "gt-fees",
                    "FeesPayment",
                    cash=base_tx("bt-cash"),
                    interest=base_tx("bt-int"),
                    fees=[base_tx("bt-fee")],
                )
            ]
        )
    )
    portfolio = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=state)

    group = db_session.query(GroupTransaction).filter_by(id="gt-fees").one()
    assert (group.cash_transaction_id, group.fixed_transaction_id, group.interest_transaction_id) == (None, None, None)
    ids = {tx.id for tx in db_session.query(BaseTransaction).filter_by(portfolio_id=portfolio.id)}
    assert ids == {"bt-fee"}


def test_rebuild_skips_transactions_without_type(db_session: Session, store: ProjectionStore):
    tx = group_tx("gt-x", "PrincipalDraw", cash=base_tx("bt-cash"))
    tx["type"] = None
    state = RealWorldAssetsState.model_validate(portfolio_state(transactions=[tx]))

    portfolio = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=state)

    assert db_session.query(GroupTransaction).filter_by(portfolio_id=portfolio.id).count() == 0


def test_clear_keeps_the_portfolio_row(db_session: Session, store: ProjectionStore):
    portfolio = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=_state())

    removed = clear_portfolio(store, portfolio.id)

    assert removed > 0
    assert all(not rows for rows in _snapshot(db_session, portfolio.id).values())
    assert db_session.query(Portfolio).filter_by(id=portfolio.id).count() == 1


def test_delete_portfolios_cascades(db_session: Session, store: ProjectionStore):
    kept = rebuild_portfolio(store, drive_id="other-drive", document_id=DOCUMENT_ID, state=_state())
    gone = rebuild_portfolio(store, drive_id=DRIVE_ID, document_id=DOCUMENT_ID, state=_state())
    gone_id = gone.id
    kept_id = kept.id

    assert delete_portfolios(store, drive_id=DRIVE_ID) == 1

    assert db_session.query(Portfolio).filter_by(id=gone_id).count() == 0
    assert all(not rows for rows in _snapshot(db_session, gone_id).values())
    assert db_session.query(BaseTransactionOnGroupTransaction).filter_by(portfolio_id=gone_id).count() == 0
    assert db_session.query(Spv).filter_by(portfolio_id=kept_id).count() == 1
