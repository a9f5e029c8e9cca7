"""
JSON File Storage Implementation

DESIGN DECISION: Stores are small JSON documents next to the gift log in
the user's config directory because:
1. Users can read (and fix) them with any editor
2. No database setup required
3. A whole-file rewrite per mutation is cheap at this size

TRADEOFFS:
- No cross-process coordination; one writer at a time is assumed
- Every save rewrites the whole file, through a temporary file and an
  atomic rename so a crash never leaves a half-written store
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from giftcalc.audit import AuditLogger
from giftcalc.models.budget import BudgetBook
from giftcalc.models.person import PersonRecord, person_key
from giftcalc.services.storage.interface import (
    BudgetStorageInterface,
    CorruptStoreError,
    LedgerSourceInterface,
    PersonStorageInterface,
    StorageError,
    WriteError,
)

logger = structlog.get_logger(__name__)


@retry(
    retry=retry_if_exception_type(PermissionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.05, max=0.5),
    reraise=True,
)
def _replace(source: str, target: Path) -> None:
    # On Windows the target can be briefly locked by a reader or a virus scanner
    os.replace(source, target)


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON to `path` via a temporary sibling file and os.replace.
    
    Raises:
        WriteError: On any OS-level failure
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
                handle.write("\n")
            _replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise WriteError(f"Failed to write {path}: {e}") from e


def read_json(path: Path) -> Optional[Any]:
    """
    Read a JSON document.
    
    Returns None for a missing file.
    
    Raises:
        CorruptStoreError: If the file exists but is not readable JSON
    """
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptStoreError(str(e)) from e


class JsonBudgetStorage(BudgetStorageInterface):
    """Budget store kept in `budgets.json`."""
    
    def __init__(self, path: Path, audit_logger: Optional[AuditLogger] = None):
        self._path = Path(path)
        self._audit_logger = audit_logger
    
    @property
    def path(self) -> Path:
        return self._path
    
    def load(self) -> BudgetBook:
        try:
            data = read_json(self._path)
            if data is None:
                return BudgetBook()
            if not isinstance(data, dict):
                raise CorruptStoreError("top-level value is not an object")
            return BudgetBook.model_validate(data)
        except (CorruptStoreError, ValidationError) as e:
            self._fallback(str(e))
            return BudgetBook()
    
    def save(self, book: BudgetBook) -> None:
        write_json_atomic(self._path, book.model_dump(mode="json", by_alias=True))
    
    def _fallback(self, reason: str) -> None:
        logger.warning(
            "budget_store_unreadable",
            path=str(self._path),
            reason=reason,
        )
        if self._audit_logger:
            self._audit_logger.log_store_fallback("budgets", str(self._path), reason)


class JsonPersonStorage(PersonStorageInterface):
    """Person registry kept in `persons.json`."""
    
    def __init__(self, path: Path, audit_logger: Optional[AuditLogger] = None):
        self._path = Path(path)
        self._audit_logger = audit_logger
    
    @property
    def path(self) -> Path:
        return self._path
    
    def load(self) -> dict[str, PersonRecord]:
        try:
            data = read_json(self._path)
            if data is None:
                return {}
            if not isinstance(data, dict) or not isinstance(data.get("persons", {}), dict):
                raise CorruptStoreError("expected an object with a 'persons' mapping")
        except CorruptStoreError as e:
            logger.warning(
                "person_store_unreadable",
                path=str(self._path),
                reason=str(e),
            )
            if self._audit_logger:
                self._audit_logger.log_store_fallback("persons", str(self._path), str(e))
            return {}
        
        # A bad record only costs that person, not the registry
        persons = {}
        for key, raw in data.get("persons", {}).items():
            if isinstance(raw, dict) and "name" not in raw:
                raw = {**raw, "name": key}
            try:
                persons[person_key(key)] = PersonRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning(
                    "person_record_skipped",
                    path=str(self._path),
                    person=key,
                    reason=str(e),
                )
        return persons
    
    def save(self, persons: dict[str, PersonRecord]) -> None:
        data = {
            "persons": {
                person_key(key): record.model_dump(mode="json", by_alias=True, exclude_none=True)
                for key, record in persons.items()
            }
        }
        write_json_atomic(self._path, data)


class LedgerFile(LedgerSourceInterface):
    """The gift log as a UTF-8 text file."""
    
    def __init__(self, path: Path):
        self._path = Path(path)
    
    @property
    def path(self) -> Path:
        return self._path
    
    def exists(self) -> bool:
        return self._path.is_file()
    
    def read_lines(self) -> list[str]:
        if not self._path.exists():
            return []
        try:
            text = self._path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise StorageError(f"Could not read log file {self._path}: {e}") from e
        return text.splitlines()
    
    def append_line(self, line: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line.rstrip("\n") + "\n")
        except OSError as e:
            raise WriteError(f"Failed to append to {self._path}: {e}") from e
