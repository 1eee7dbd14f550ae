"""rwa read model

Revision ID: 0001_rwa_read_model
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_rwa_read_model"
down_revision = None
branch_labels = None
depends_on = None


ASSET_TYPES = ("Cash", "FixedIncome")
GROUP_TRANSACTION_TYPES = (
    "PrincipalDraw",
    "PrincipalReturn",
    "AssetPurchase",
    "AssetSale",
    "InterestDraw",
    "InterestReturn",
    "FeesPayment",
)


def _portfolio_fk() -> sa.Column:
    return sa.Column(
        "portfolio_id",
        sa.Uuid(),
        sa.ForeignKey("rwa_portfolios.id", ondelete="CASCADE"),
        primary_key=True,
        nullable=False,
    )


def _numeric(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(28, 8), nullable=True)


def _membership(table: str, column: str) -> None:
    op.create_table(
        table,
        _portfolio_fk(),
        sa.Column(column, sa.String(length=255), primary_key=True, nullable=False),
    )
    op.create_index(f"ix_{table}_portfolio_id", table, ["portfolio_id"])


def upgrade() -> None:
    op.create_table(
        "rwa_portfolios",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("drive_id", sa.String(length=255), nullable=False),
        sa.Column("document_id", sa.String(length=255), nullable=False),
        sa.Column("principal_lender_account_id", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("drive_id", "document_id", name="uq_rwa_portfolios_drive_document"),
    )
    op.create_index("ix_rwa_portfolios_id", "rwa_portfolios", ["id"])
    op.create_index("ix_rwa_portfolios_drive_id", "rwa_portfolios", ["drive_id"])

    op.create_table(
        "rwa_portfolio_spvs",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("name", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_rwa_portfolio_spvs_portfolio_id", "rwa_portfolio_spvs", ["portfolio_id"])

    op.create_table(
        "rwa_portfolio_service_providers",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("fee_type", sa.String(length=255), nullable=True),
        sa.Column("account_id", sa.String(length=255), nullable=True),
    )
    op.create_index(
        "ix_rwa_portfolio_service_providers_portfolio_id", "rwa_portfolio_service_providers", ["portfolio_id"]
    )

    op.create_table(
        "rwa_portfolio_fixed_income_types",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("name", sa.String(length=255), nullable=True),
    )
    op.create_index(
        "ix_rwa_portfolio_fixed_income_types_portfolio_id", "rwa_portfolio_fixed_income_types", ["portfolio_id"]
    )

    op.create_table(
        "rwa_portfolio_accounts",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("reference", sa.String(length=255), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_rwa_portfolio_accounts_portfolio_id", "rwa_portfolio_accounts", ["portfolio_id"])

    op.create_table(
        "rwa_portfolio_assets",
        sa.Column("asset_ref_id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("asset_type", sa.Enum(*ASSET_TYPES, name="rwa_asset_type_enum"), nullable=False),
        sa.Column("spv_id", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("currency", sa.String(length=16), nullable=True),
        _numeric("balance"),
        sa.Column("fixed_income_type_id", sa.String(length=255), nullable=True),
        sa.Column("maturity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=True),
        _numeric("notional"),
        _numeric("purchase_price"),
        _numeric("purchase_proceeds"),
        _numeric("total_discount"),
        _numeric("annualized_yield"),
        _numeric("realized_surplus"),
        sa.Column("cusip", sa.String(length=32), nullable=True),
        sa.Column("isin", sa.String(length=32), nullable=True),
        _numeric("coupon"),
    )
    op.create_index("ix_rwa_portfolio_assets_portfolio_id", "rwa_portfolio_assets", ["portfolio_id"])
    op.create_index("ix_rwa_portfolio_assets_asset_type", "rwa_portfolio_assets", ["asset_type"])

    op.create_table(
        "rwa_base_transactions",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("asset_id", sa.String(length=255), nullable=True),
        _numeric("amount"),
        sa.Column("entry_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trade_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("settlement_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tx_ref", sa.String(length=255), nullable=True),
        sa.Column("account_id", sa.String(length=255), nullable=True),
        sa.Column("counter_party_account_id", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_rwa_base_transactions_portfolio_id", "rwa_base_transactions", ["portfolio_id"])

    op.create_table(
        "rwa_group_transactions",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        _portfolio_fk(),
        sa.Column("type", sa.Enum(*GROUP_TRANSACTION_TYPES, name="rwa_group_transaction_type_enum"), nullable=False),
        sa.Column("entry_time", sa.DateTime(timezone=True), nullable=True),
        _numeric("cash_balance_change"),
        _numeric("unit_price"),
        sa.Column("cash_transaction_id", sa.String(length=255), nullable=True),
        sa.Column("fixed_transaction_id", sa.String(length=255), nullable=True),
        sa.Column("interest_transaction_id", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(
            ["cash_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            name="fk_rwa_group_transactions_cash",
        ),
        sa.ForeignKeyConstraint(
            ["fixed_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            name="fk_rwa_group_transactions_fixed",
        ),
        sa.ForeignKeyConstraint(
            ["interest_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            name="fk_rwa_group_transactions_interest",
        ),
    )
    op.create_index("ix_rwa_group_transactions_portfolio_id", "rwa_group_transactions", ["portfolio_id"])
    op.create_index("ix_rwa_group_transactions_type", "rwa_group_transactions", ["type"])

    op.create_table(
        "rwa_base_transactions_on_group_transactions",
        sa.Column(
            "portfolio_id",
            sa.Uuid(),
            sa.ForeignKey("rwa_portfolios.id", ondelete="CASCADE"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("base_transaction_id", sa.String(length=255), primary_key=True, nullable=False),
        sa.Column("group_transaction_id", sa.String(length=255), primary_key=True, nullable=False),
        sa.ForeignKeyConstraint(
            ["base_transaction_id", "portfolio_id"],
            ["rwa_base_transactions.id", "rwa_base_transactions.portfolio_id"],
            ondelete="CASCADE",
            name="fk_rwa_fee_links_base",
        ),
        sa.ForeignKeyConstraint(
            ["group_transaction_id", "portfolio_id"],
            ["rwa_group_transactions.id", "rwa_group_transactions.portfolio_id"],
            ondelete="CASCADE",
            name="fk_rwa_fee_links_group",
        ),
    )
    op.create_index(
        "ix_rwa_fee_links_group",
        "rwa_base_transactions_on_group_transactions",
        ["portfolio_id", "group_transaction_id"],
    )

    _membership("rwa_spvs_on_portfolios", "spv_id")
    _membership("rwa_service_providers_on_portfolios", "service_provider_id")
    _membership("rwa_fixed_income_types_on_portfolios", "fixed_income_type_id")
    _membership("rwa_accounts_on_portfolios", "account_id")
    op.create_index("ix_rwa_accounts_on_portfolios_account", "rwa_accounts_on_portfolios", ["account_id"])

    op.create_table(
        "rwa_projection_revisions",
        sa.Column("listener_id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("drive_id", sa.String(length=255), primary_key=True, nullable=False),
        sa.Column("document_id", sa.String(length=255), primary_key=True, nullable=False),
        sa.Column("revision", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("rwa_projection_revisions")
    op.drop_table("rwa_accounts_on_portfolios")
    op.drop_table("rwa_fixed_income_types_on_portfolios")
    op.drop_table("rwa_service_providers_on_portfolios")
    op.drop_table("rwa_spvs_on_portfolios")
    op.drop_table("rwa_base_transactions_on_group_transactions")
    op.drop_table("rwa_group_transactions")
    op.drop_table("rwa_base_transactions")
    op.drop_table("rwa_portfolio_assets")
    op.drop_table("rwa_portfolio_accounts")
    op.drop_table("rwa_portfolio_fixed_income_types")
    op.drop_table("rwa_portfolio_service_providers")
    op.drop_table("rwa_portfolio_spvs")
    op.drop_table("rwa_portfolios")
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS rwa_group_transaction_type_enum")
        op.execute("DROP TYPE IF EXISTS rwa_asset_type_enum")
