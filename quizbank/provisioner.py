"""One-time table setup before the recorder writes to a table."""
from __future__ import annotations

import logging
from typing import Sequence

from .schema import build_header_map
from .store import Table, TabularStore

logger = logging.getLogger(__name__)


def ensure_table(store: TabularStore, table_name: str, expected_headers: Sequence[str]) -> Table:
    """Return ``table_name``, creating it and writing its header row if needed.

    Headers are only written to a table with no content. A table that
    already has rows keeps its headers even if they differ from
    ``expected_headers``; there is no migration.
    """
    table = store.get_table(table_name)
    if table is None:
        logger.info("[PROVISION] creating table %s", table_name)
        table = store.create_table(table_name)

    if table.row_count() == 0:
        table.append_row(list(expected_headers))
        table.freeze_header()
        logger.info("[PROVISION] wrote headers to %s", table_name)
        return table

    existing = list(build_header_map(table.read_all()[0]))
    if existing != [h.strip() for h in expected_headers]:
        logger.warning(
            "[PROVISION] %s headers differ from expected (%s); leaving them unchanged",
            table_name,
            ", ".join(existing),
        )
    return table


__all__ = ["ensure_table"]
