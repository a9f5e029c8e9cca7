"""Services package."""

from giftcalc.services.currency import (
    ConversionResult,
    CurrencyConverter,
    CurrencyFormatter,
    IdentityConverter,
    PlainCurrencyFormatter,
    format_amount,
)
from giftcalc.services.storage import (
    BudgetStorageInterface,
    CorruptStoreError,
    InMemoryBudgetStorage,
    InMemoryLedger,
    InMemoryPersonStorage,
    JsonBudgetStorage,
    JsonPersonStorage,
    LedgerFile,
    LedgerSourceInterface,
    PersonStorageInterface,
    StorageError,
    WriteError,
)

__all__ = [
    # Currency collaborators
    "ConversionResult",
    "CurrencyConverter",
    "CurrencyFormatter",
    "IdentityConverter",
    "PlainCurrencyFormatter",
    "format_amount",
    # Storage services
    "BudgetStorageInterface",
    "CorruptStoreError",
    "InMemoryBudgetStorage",
    "InMemoryLedger",
    "InMemoryPersonStorage",
    "JsonBudgetStorage",
    "JsonPersonStorage",
    "LedgerFile",
    "LedgerSourceInterface",
    "PersonStorageInterface",
    "StorageError",
    "WriteError",
]
