"""Create a timestamped copy of the workbook store in the backups directory."""
from __future__ import annotations

import sys
from pathlib import Path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
import os
import shutil
from datetime import datetime, timezone

from dotenv import load_dotenv

from quizbank.store import REMOTE_PREFIXES, resolve_store_identifier


def main() -> None:
    load_dotenv()
    identifier = resolve_store_identifier(os.environ.get("QUIZ_STORE"))
    if identifier.startswith(REMOTE_PREFIXES):
        raise SystemExit(f"Only workbook stores can be backed up, not {identifier}")
    store_path = Path(identifier)
    if not store_path.exists():
        raise SystemExit(f"Workbook not found at {store_path}")
    backups_dir = Path.cwd() / "backups"
    backups_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    target = backups_dir / f"quizbank_{timestamp}.xlsx"
    shutil.copy2(store_path, target)
    print(f"Backup created at {target}")


if __name__ == "__main__":
    main()
