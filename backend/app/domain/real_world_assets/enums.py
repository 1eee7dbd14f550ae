from __future__ import annotations

from enum import Enum


class AssetType(str, Enum):
    CASH = "Cash"
    FIXED_INCOME = "FixedIncome"


class GroupTransactionType(str, Enum):
    PRINCIPAL_DRAW = "PrincipalDraw"
    PRINCIPAL_RETURN = "PrincipalReturn"
    ASSET_PURCHASE = "AssetPurchase"
    ASSET_SALE = "AssetSale"
    INTEREST_DRAW = "InterestDraw"
    INTEREST_RETURN = "InterestReturn"
    FEES_PAYMENT = "FeesPayment"


class TransactionRole(str, Enum):
    CASH = "cash"
    FIXED_INCOME = "fixed_income"
    INTEREST = "interest"
    FEE = "fee"


# Base-transaction roles each group transaction type may link.
ALLOWED_ROLES: dict[GroupTransactionType, frozenset[TransactionRole]] = {
    GroupTransactionType.PRINCIPAL_DRAW: frozenset({TransactionRole.CASH, TransactionRole.FEE}),
    GroupTransactionType.PRINCIPAL_RETURN: frozenset({TransactionRole.CASH, TransactionRole.FEE}),
    GroupTransactionType.ASSET_PURCHASE: frozenset(
        {TransactionRole.CASH, TransactionRole.FIXED_INCOME, TransactionRole.FEE}
    ),
    GroupTransactionType.ASSET_SALE: frozenset(
        {TransactionRole.CASH, TransactionRole.FIXED_INCOME, TransactionRole.FEE}
    ),
    GroupTransactionType.INTEREST_DRAW: frozenset({TransactionRole.INTEREST}),
    GroupTransactionType.INTEREST_RETURN: frozenset({TransactionRole.INTEREST}),
    GroupTransactionType.FEES_PAYMENT: frozenset({TransactionRole.FEE}),
}


class DriveOperationType(str, Enum):
    ADD_FILE = "ADD_FILE"
    DELETE_NODE = "DELETE_NODE"


class OperationType(str, Enum):
    CREATE_SPV = "CREATE_SPV"
    EDIT_SPV = "EDIT_SPV"
    DELETE_SPV = "DELETE_SPV"

    CREATE_SERVICE_PROVIDER = "CREATE_SERVICE_PROVIDER"
    EDIT_SERVICE_PROVIDER = "EDIT_SERVICE_PROVIDER"
    DELETE_SERVICE_PROVIDER = "DELETE_SERVICE_PROVIDER"

    CREATE_FIXED_INCOME_TYPE = "CREATE_FIXED_INCOME_TYPE"
    EDIT_FIXED_INCOME_TYPE = "EDIT_FIXED_INCOME_TYPE"
    DELETE_FIXED_INCOME_TYPE = "DELETE_FIXED_INCOME_TYPE"

    CREATE_ACCOUNT = "CREATE_ACCOUNT"
    EDIT_ACCOUNT = "EDIT_ACCOUNT"
    DELETE_ACCOUNT = "DELETE_ACCOUNT"

    CREATE_CASH_ASSET = "CREATE_CASH_ASSET"
    EDIT_CASH_ASSET = "EDIT_CASH_ASSET"
    DELETE_CASH_ASSET = "DELETE_CASH_ASSET"

    CREATE_FIXED_INCOME_ASSET = "CREATE_FIXED_INCOME_ASSET"
    EDIT_FIXED_INCOME_ASSET = "EDIT_FIXED_INCOME_ASSET"
    DELETE_FIXED_INCOME_ASSET = "DELETE_FIXED_INCOME_ASSET"

    CREATE_PRINCIPAL_DRAW_GROUP_TRANSACTION = "CREATE_PRINCIPAL_DRAW_GROUP_TRANSACTION"
    CREATE_PRINCIPAL_RETURN_GROUP_TRANSACTION = "CREATE_PRINCIPAL_RETURN_GROUP_TRANSACTION"
    CREATE_ASSET_PURCHASE_GROUP_TRANSACTION = "CREATE_ASSET_PURCHASE_GROUP_TRANSACTION"
    CREATE_ASSET_SALE_GROUP_TRANSACTION = "CREATE_ASSET_SALE_GROUP_TRANSACTION"
    CREATE_INTEREST_DRAW_GROUP_TRANSACTION = "CREATE_INTEREST_DRAW_GROUP_TRANSACTION"
    CREATE_INTEREST_RETURN_GROUP_TRANSACTION = "CREATE_INTEREST_RETURN_GROUP_TRANSACTION"
    CREATE_FEES_PAYMENT_GROUP_TRANSACTION = "CREATE_FEES_PAYMENT_GROUP_TRANSACTION"

    EDIT_PRINCIPAL_DRAW_GROUP_TRANSACTION = "EDIT_PRINCIPAL_DRAW_GROUP_TRANSACTION"
    EDIT_PRINCIPAL_RETURN_GROUP_TRANSACTION = "EDIT_PRINCIPAL_RETURN_GROUP_TRANSACTION"
    EDIT_ASSET_PURCHASE_GROUP_TRANSACTION = "EDIT_ASSET_PURCHASE_GROUP_TRANSACTION"
    EDIT_ASSET_SALE_GROUP_TRANSACTION = "EDIT_ASSET_SALE_GROUP_TRANSACTION"
    EDIT_INTEREST_DRAW_GROUP_TRANSACTION = "EDIT_INTEREST_DRAW_GROUP_TRANSACTION"
    EDIT_INTEREST_RETURN_GROUP_TRANSACTION = "EDIT_INTEREST_RETURN_GROUP_TRANSACTION"
    EDIT_FEES_PAYMENT_GROUP_TRANSACTION = "EDIT_FEES_PAYMENT_GROUP_TRANSACTION"

    EDIT_GROUP_TRANSACTION_TYPE = "EDIT_GROUP_TRANSACTION_TYPE"
    ADD_FEE_TRANSACTIONS_TO_GROUP_TRANSACTION = "ADD_FEE_TRANSACTIONS_TO_GROUP_TRANSACTION"
    EDIT_FEE_TRANSACTION = "EDIT_FEE_TRANSACTION"
    REMOVE_FEE_TRANSACTION_FROM_GROUP_TRANSACTION = "REMOVE_FEE_TRANSACTION_FROM_GROUP_TRANSACTION"
    DELETE_GROUP_TRANSACTION = "DELETE_GROUP_TRANSACTION"


class StrandOutcome(str, Enum):
    DRIVE = "DRIVE"
    SURGICAL = "SURGICAL"
    REBUILT = "REBUILT"
    UNTRACKED = "UNTRACKED"
    REDELIVERED = "REDELIVERED"
    FILTERED = "FILTERED"
