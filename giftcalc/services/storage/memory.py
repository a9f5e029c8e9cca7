"""
In-Memory Storage

Same contracts as the JSON stores, without touching disk. Snapshots are
deep-copied on the way in and out so callers cannot mutate stored state
behind the repository's back.
"""

from typing import Optional

from giftcalc.models.budget import BudgetBook
from giftcalc.models.person import PersonRecord, person_key
from giftcalc.services.storage.interface import (
    BudgetStorageInterface,
    LedgerSourceInterface,
    PersonStorageInterface,
    WriteError,
)


class InMemoryBudgetStorage(BudgetStorageInterface):
    
    def __init__(self, book: Optional[BudgetBook] = None, fail_writes: bool = False):
        self._book = book.model_copy(deep=True) if book else BudgetBook()
        self.fail_writes = fail_writes
        self.save_count = 0
    
    def load(self) -> BudgetBook:
        return self._book.model_copy(deep=True)
    
    def save(self, book: BudgetBook) -> None:
        if self.fail_writes:
            raise WriteError("in-memory store is read-only")
        self._book = book.model_copy(deep=True)
        self.save_count += 1


class InMemoryPersonStorage(PersonStorageInterface):
    
    def __init__(self, persons: Optional[list[PersonRecord]] = None):
        self._persons = {person.key: person for person in persons or []}
    
    def load(self) -> dict[str, PersonRecord]:
        return {key: person.model_copy() for key, person in self._persons.items()}
    
    def save(self, persons: dict[str, PersonRecord]) -> None:
        self._persons = {person_key(key): person.model_copy() for key, person in persons.items()}


class InMemoryLedger(LedgerSourceInterface):
    
    def __init__(self, lines: Optional[list[str]] = None):
        self._lines = list(lines) if lines is not None else None
    
    def exists(self) -> bool:
        return self._lines is not None
    
    def read_lines(self) -> list[str]:
        return list(self._lines or [])
    
    def append_line(self, line: str) -> None:
        if self._lines is None:
            self._lines = []
        self._lines.append(line.rstrip("\n"))
