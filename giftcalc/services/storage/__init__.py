"""
Storage Services Package

Provides repository interfaces and concrete implementations for the
budget store, the person registry and the gift log.
"""

from giftcalc.services.storage.interface import (
    BudgetStorageInterface,
    CorruptStoreError,
    LedgerSourceInterface,
    PersonStorageInterface,
    StorageError,
    WriteError,
)
from giftcalc.services.storage.json_files import (
    JsonBudgetStorage,
    JsonPersonStorage,
    LedgerFile,
)
from giftcalc.services.storage.memory import (
    InMemoryBudgetStorage,
    InMemoryLedger,
    InMemoryPersonStorage,
)

__all__ = [
    # Interfaces
    "BudgetStorageInterface",
    "LedgerSourceInterface",
    "PersonStorageInterface",
    # Exceptions
    "CorruptStoreError",
    "StorageError",
    "WriteError",
    # JSON file implementation
    "JsonBudgetStorage",
    "JsonPersonStorage",
    "LedgerFile",
    # In-memory implementation
    "InMemoryBudgetStorage",
    "InMemoryLedger",
    "InMemoryPersonStorage",
]
