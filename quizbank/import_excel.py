"""
Excel/CSV import for the question bank.
Appends questions from questions.xlsx (or a .csv export) to the Questions table.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .locking import DEFAULT_LOCK_TIMEOUT, lock_for
from .provisioner import ensure_table
from .schema import QUESTION_HEADERS, REQUIRED_QUESTION_COLUMNS, build_header_map
from .service import QUESTIONS_TABLE
from .store import TabularStore, open_store, resolve_store_identifier

logger = logging.getLogger(__name__)

PREFERRED_SHEET = "questions"


def read_question_frame(questions_file: str) -> pd.DataFrame:
    """Read the source file as text columns with blanks instead of NaN."""
    path = Path(questions_file)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    else:
        sheets = pd.ExcelFile(path).sheet_names
        sheet = PREFERRED_SHEET if PREFERRED_SHEET in sheets else sheets[0]
        df = pd.read_excel(path, sheet_name=sheet, dtype=str)
    df = df.fillna("")
    df.columns = [str(c).strip() for c in df.columns]

    missing_cols = [col for col in REQUIRED_QUESTION_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing columns: {missing_cols}")
    return df


def _existing_ids(rows: List[List[Any]], header_map: Dict[str, int]) -> set:
    idx = header_map.get("ID")
    if idx is None:
        return set()
    return {str(r[idx]).strip() for r in rows[1:] if idx < len(r) and r[idx] not in (None, "")}


def import_questions(
    store: TabularStore,
    questions_file: str,
    table_name: str = QUESTIONS_TABLE,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> int:
    """Append every new question in ``questions_file``; returns how many were added.

    Rows without an ID and IDs already present (in the table or earlier in
    the file) are skipped.
    """
    print(f"Importing questions from {questions_file}...")
    df = read_question_frame(questions_file)

    with lock_for(store.identifier).acquire(timeout):
        store.refresh()
        table = ensure_table(store, table_name, QUESTION_HEADERS)
        existing_rows = table.read_all()
        header = [str(h).strip() if h is not None else "" for h in existing_rows[0]]
        seen = _existing_ids(existing_rows, build_header_map(header))

        new_rows: List[List[Any]] = []
        skipped = 0
        for _, row in df.iterrows():
            qid = str(row["ID"]).strip()
            if not qid or qid in seen:
                skipped += 1
                continue
            seen.add(qid)
            new_rows.append([str(row[h]).strip() if h in df.columns else "" for h in header])

        if new_rows:
            table.append_rows(len(existing_rows) + 1, new_rows)

    if skipped:
        print(f"Skipped {skipped} row(s) with a blank or duplicate ID")
    print(f"Successfully imported {len(new_rows)} questions")
    return len(new_rows)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Import questions into the quiz store")
    parser.add_argument("questions", help="Questions Excel (.xlsx) or CSV file path")
    parser.add_argument(
        "--store",
        default=None,
        help="Store identifier: workbook path, memory:<name> or gsheet:<key>",
    )
    parser.add_argument("--sheet", default=QUESTIONS_TABLE, help="Questions table name")

    args = parser.parse_args(argv)

    try:
        store = open_store(resolve_store_identifier(args.store))
        import_questions(store, args.questions, table_name=args.sheet)
        print("Import completed successfully!")
    except Exception as e:
        logger.debug("import failed", exc_info=True)
        print(f"Import failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
