"""
Abstract Storage Interface

DESIGN DECISION: Each persisted store is a repository with a whole-snapshot
load()/save() contract. This allows us to:
1. Keep the aggregation engine free of file I/O
2. Use in-memory storage for testing
3. Swap the JSON files for something else later

Writers are assumed to be one process at a time; there is no locking.
"""

from abc import ABC, abstractmethod

from giftcalc.models.budget import BudgetBook
from giftcalc.models.person import PersonRecord


class BudgetStorageInterface(ABC):
    """Repository for the budget store."""
    
    @abstractmethod
    def load(self) -> BudgetBook:
        """
        Load the whole budget store.
        
        Returns:
            The stored snapshot, or an empty one (no budgets, nextId 1)
            when nothing usable is stored. Never raises for a missing or
            corrupt store.
        """
        pass
    
    @abstractmethod
    def save(self, book: BudgetBook) -> None:
        """
        Replace the stored snapshot.
        
        Raises:
            WriteError: If the snapshot could not be written
        """
        pass


class PersonStorageInterface(ABC):
    """Repository for the person registry, keyed by case-folded name."""
    
    @abstractmethod
    def load(self) -> dict[str, PersonRecord]:
        """
        Load all persons.
        
        Returns:
            Mapping of case-folded name to record; empty when nothing
            usable is stored.
        """
        pass
    
    @abstractmethod
    def save(self, persons: dict[str, PersonRecord]) -> None:
        """
        Replace the stored registry.
        
        Raises:
            WriteError: If the registry could not be written
        """
        pass


class LedgerSourceInterface(ABC):
    """
    The append-only gift log.
    
    Readers get raw lines in file order; parsing is not the storage
    layer's job.
    """
    
    @abstractmethod
    def exists(self) -> bool:
        """Whether the log has ever been written."""
        pass
    
    @abstractmethod
    def read_lines(self) -> list[str]:
        """
        Return every line of the log in file order.
        
        Returns an empty list for a missing log.
        
        Raises:
            StorageError: If the log exists but cannot be read
        """
        pass
    
    @abstractmethod
    def append_line(self, line: str) -> None:
        """
        Append one line to the log.
        
        Raises:
            WriteError: If the line could not be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStoreError(StorageError):
    """Stored data exists but cannot be parsed."""
    pass


class WriteError(StorageError):
    """Stored data could not be written."""
    pass
