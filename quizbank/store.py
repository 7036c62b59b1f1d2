"""Tabular store boundary and its local backends.

A store holds named tables; a table is a grid of rows where row 1
conventionally holds the headers. Row indexes passed to ``append_rows``
are 1-based, matching spreadsheet ranges.

Identifiers understood by ``open_store``:

* ``memory:<name>``  process-local store, shared by name (dev and tests)
* ``gsheet:<key>``   hosted Google spreadsheet (see ``sheets_store``)
* anything else      path to an ``.xlsx`` workbook, created on first write
"""
from __future__ import annotations

import logging
import threading
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .errors import StoreAccessError

logger = logging.getLogger(__name__)

Row = List[Any]


class Table:
    """One named grid inside a store."""

    name: str

    def read_all(self) -> List[Row]:
        raise NotImplementedError

    def row_count(self) -> int:
        raise NotImplementedError

    def append_row(self, row: Sequence[Any]) -> None:
        raise NotImplementedError

    def append_rows(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        raise NotImplementedError

    def freeze_header(self) -> None:
        raise NotImplementedError


class TabularStore:
    identifier: str

    def refresh(self) -> None:
        """Re-read backing state written by other handles. No-op by default."""

    def get_table(self, name: str) -> Optional[Table]:
        raise NotImplementedError

    def create_table(self, name: str) -> Table:
        raise NotImplementedError


def _trim_trailing_blank(rows: List[Row]) -> List[Row]:
    while rows and all(v is None or v == "" for v in rows[-1]):
        rows.pop()
    return rows


# --- In-memory backend -----------------------------------------------------

class MemoryTable(Table):
    def __init__(self, name: str) -> None:
        self.name = name
        self.rows: List[Row] = []
        self.frozen_rows = 0

    def read_all(self) -> List[Row]:
        return [list(r) for r in self.rows]

    def row_count(self) -> int:
        return len(self.rows)

    def append_row(self, row: Sequence[Any]) -> None:
        self.rows.append(list(row))

    def append_rows(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        # Range write: overwrites whatever already sits at the target rows.
        offset = start_row - 1
        while len(self.rows) < offset:
            self.rows.append([])
        for i, row in enumerate(rows):
            if offset + i < len(self.rows):
                self.rows[offset + i] = list(row)
            else:
                self.rows.append(list(row))

    def freeze_header(self) -> None:
        self.frozen_rows = 1


class MemoryStore(TabularStore):
    def __init__(self, identifier: str = "memory:default") -> None:
        self.identifier = identifier
        self.tables: Dict[str, MemoryTable] = {}

    def get_table(self, name: str) -> Optional[Table]:
        return self.tables.get(name)

    def create_table(self, name: str) -> Table:
        table = self.tables.get(name)
        if table is None:
            table = MemoryTable(name)
            self.tables[name] = table
        return table

    def add_table(self, name: str, rows: Sequence[Sequence[Any]]) -> MemoryTable:
        table = self.create_table(name)
        for row in rows:
            table.append_row(row)
        return table  # type: ignore[return-value]


_MEMORY_STORES: Dict[str, MemoryStore] = {}
_MEMORY_GUARD = threading.Lock()


def reset_memory_stores() -> None:
    with _MEMORY_GUARD:
        _MEMORY_STORES.clear()


# --- Workbook (.xlsx) backend ----------------------------------------------

class WorkbookTable(Table):
    def __init__(self, store: "WorkbookStore", worksheet: Any) -> None:
        self.store = store
        self.ws = worksheet
        self.name = worksheet.title

    def read_all(self) -> List[Row]:
        rows = [list(r) for r in self.ws.iter_rows(values_only=True)]
        return _trim_trailing_blank(rows)

    def row_count(self) -> int:
        return len(self.read_all())

    def _write(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        for i, row in enumerate(rows):
            for j, value in enumerate(row):
                self.ws.cell(row=start_row + i, column=j + 1, value=value)
        self.store.save(self.name)

    def append_row(self, row: Sequence[Any]) -> None:
        self._write(self.row_count() + 1, [row])

    def append_rows(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        self._write(start_row, rows)

    def freeze_header(self) -> None:
        self.ws.freeze_panes = "A2"
        self.store.save(self.name)


class WorkbookStore(TabularStore):
    """Store backed by a single ``.xlsx`` file, saved after every write."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.identifier = str(self.path)
        self.refresh()

    def refresh(self) -> None:
        # Another handle may have saved since this one loaded; callers reload
        # under the store lock before reading row counts.
        self._fresh = not self.path.exists()
        try:
            if self._fresh:
                self.workbook = Workbook()
            else:
                self.workbook = load_workbook(self.path)
        except (OSError, ValueError, zipfile.BadZipFile, InvalidFileException) as exc:
            raise StoreAccessError(self.path.name, repr(exc))

    def get_table(self, name: str) -> Optional[Table]:
        if self._fresh or name not in self.workbook.sheetnames:
            return None
        return WorkbookTable(self, self.workbook[name])

    def create_table(self, name: str) -> Table:
        if not self._fresh and name in self.workbook.sheetnames:
            return WorkbookTable(self, self.workbook[name])
        if self._fresh:
            # Reuse the placeholder sheet openpyxl puts in every new workbook.
            ws = self.workbook.active
            ws.title = name
            self._fresh = False
            logger.info("[STORE] created workbook %s", self.path)
        else:
            ws = self.workbook.create_sheet(title=name)
        self.save(name)
        return WorkbookTable(self, ws)

    def save(self, table_name: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(self.path)
        except OSError as exc:
            raise StoreAccessError(table_name, repr(exc))


MEMORY_PREFIX = "memory:"
SHEETS_PREFIX = "gsheet:"
REMOTE_PREFIXES = (MEMORY_PREFIX, SHEETS_PREFIX)
PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_WORKBOOK = PACKAGE_DIR / "instance" / "quizbank.xlsx"


def resolve_store_identifier(raw: Optional[str] = None) -> str:
    """Normalize a configured store identifier.

    Surrounding whitespace and quotes (common in hand-edited ``.env`` files)
    are dropped. Memory and Sheets identifiers pass through; anything else is
    a workbook path, anchored at the package directory when relative. An
    empty value selects ``DEFAULT_WORKBOOK``.
    """
    identifier = (raw or "").strip().strip("\"'").strip()
    if not identifier:
        return str(DEFAULT_WORKBOOK)
    if identifier.startswith(REMOTE_PREFIXES):
        return identifier
    path = Path(identifier).expanduser()
    if not path.is_absolute():
        path = PACKAGE_DIR / path
    return str(path)


def open_store(identifier: str) -> TabularStore:
    identifier = identifier.strip()
    if identifier.startswith(MEMORY_PREFIX):
        with _MEMORY_GUARD:
            store = _MEMORY_STORES.get(identifier)
            if store is None:
                store = MemoryStore(identifier)
                _MEMORY_STORES[identifier] = store
            return store
    if identifier.startswith(SHEETS_PREFIX):
        from .sheets_store import SheetsStore

        return SheetsStore.open(identifier[len(SHEETS_PREFIX):])
    return WorkbookStore(Path(identifier))


__all__ = [
    "Row",
    "Table",
    "TabularStore",
    "MemoryTable",
    "MemoryStore",
    "WorkbookTable",
    "WorkbookStore",
    "REMOTE_PREFIXES",
    "PACKAGE_DIR",
    "DEFAULT_WORKBOOK",
    "resolve_store_identifier",
    "open_store",
    "reset_memory_stores",
]
