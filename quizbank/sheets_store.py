"""Google Sheets backend for the tabular store, built on gspread."""
from __future__ import annotations

import logging
import os
from typing import Any, List, Optional, Sequence

import gspread
from gspread.exceptions import GSpreadException, WorksheetNotFound
from gspread.utils import rowcol_to_a1

from .errors import StoreAccessError
from .store import Row, Table, TabularStore

logger = logging.getLogger(__name__)

NEW_SHEET_ROWS = 1000
NEW_SHEET_COLS = 26


class SheetsTable(Table):
    def __init__(self, worksheet: Any) -> None:
        self.ws = worksheet
        self.name = worksheet.title

    def read_all(self) -> List[Row]:
        try:
            return [list(r) for r in self.ws.get_all_values()]
        except (GSpreadException, OSError) as exc:
            raise StoreAccessError(self.name, repr(exc))

    def row_count(self) -> int:
        # ws.row_count is the grid size, not the number of filled rows.
        return len(self.read_all())

    def append_row(self, row: Sequence[Any]) -> None:
        try:
            self.ws.append_row(list(row), value_input_option="RAW")
        except (GSpreadException, OSError) as exc:
            raise StoreAccessError(self.name, repr(exc))

    def append_rows(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return
        width = max(len(r) for r in rows)
        target = f"{rowcol_to_a1(start_row, 1)}:{rowcol_to_a1(start_row + len(rows) - 1, width)}"
        try:
            self.ws.update(
                range_name=target,
                values=[list(r) for r in rows],
                value_input_option="RAW",
            )
        except (GSpreadException, OSError) as exc:
            raise StoreAccessError(self.name, repr(exc))

    def freeze_header(self) -> None:
        try:
            self.ws.freeze(rows=1)
        except (GSpreadException, OSError) as exc:
            raise StoreAccessError(self.name, repr(exc))


class SheetsStore(TabularStore):
    def __init__(self, spreadsheet: Any, key: str) -> None:
        self.spreadsheet = spreadsheet
        self.identifier = f"gsheet:{key}"

    @classmethod
    def open(cls, key: str, client: Optional[Any] = None) -> "SheetsStore":
        try:
            if client is None:
                keyfile = os.environ.get("GOOGLE_SERVICE_ACCOUNT_FILE")
                client = gspread.service_account(filename=keyfile) if keyfile else gspread.service_account()
            spreadsheet = client.open_by_key(key)
        except (GSpreadException, OSError, ValueError) as exc:
            raise StoreAccessError(key, repr(exc))
        return cls(spreadsheet, key)

    def get_table(self, name: str) -> Optional[Table]:
        try:
            return SheetsTable(self.spreadsheet.worksheet(name))
        except WorksheetNotFound:
            return None
        except (GSpreadException, OSError) as exc:
            raise StoreAccessError(name, repr(exc))

    def create_table(self, name: str) -> Table:
        logger.info("[STORE] creating worksheet %s", name)
        try:
            ws = self.spreadsheet.add_worksheet(title=name, rows=NEW_SHEET_ROWS, cols=NEW_SHEET_COLS)
        except (GSpreadException, OSError) as exc:
            raise StoreAccessError(name, repr(exc))
        return SheetsTable(ws)


__all__ = ["SheetsTable", "SheetsStore"]
