from app.domain.real_world_assets.models.portfolio import (
    Account,
    AccountOnPortfolio,
    Asset,
    FixedIncomeType,
    FixedIncomeTypeOnPortfolio,
    Portfolio,
    ServiceProvider,
    ServiceProviderOnPortfolio,
    Spv,
    SpvOnPortfolio,
)
from app.domain.real_world_assets.models.revisions import ProjectionRevision
from app.domain.real_world_assets.models.transactions import (
    BaseTransaction,
    BaseTransactionOnGroupTransaction,
    GroupTransaction,
)

__all__ = [
    "Account",
    "AccountOnPortfolio",
    "Asset",
    "BaseTransaction",
    "BaseTransactionOnGroupTransaction",
    "FixedIncomeType",
    "FixedIncomeTypeOnPortfolio",
    "GroupTransaction",
    "Portfolio",
    "ProjectionRevision",
    "ServiceProvider",
    "ServiceProviderOnPortfolio",
    "Spv",
    "SpvOnPortfolio",
]
