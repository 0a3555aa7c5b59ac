import copy
import logging
from typing import Any, Dict, List, Optional

from catalog_backend.database.record_store import RecordStore

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """
    Process-local RecordStore for local runs and tests.
    Tables are dicts keyed by primary key; pages are served in key order.
    Not thread-safe: serve it from a single worker only.
    """

    def __init__(self, primary_keys: Optional[Dict[str, str]] = None):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._primary_keys = dict(primary_keys or {})
        self.upsert_calls: List[int] = []

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(table, {})

    def count_records(self, table: str) -> int:
        return len(self._table(table))

    def fetch_page(self, table: str, limit: int, offset: int) -> List[Dict[str, Any]]:
        rows = self._table(table)
        keys = sorted(rows)[offset:offset + limit]
        return [copy.deepcopy(rows[k]) for k in keys]

    def upsert_batch(self, table: str, rows: List[Dict[str, Any]], conflict_key: str) -> int:
        known_key = self._primary_keys.setdefault(table, conflict_key)
        if known_key != conflict_key:
            raise ValueError(f"Table {table} is keyed on {known_key}, not {conflict_key}")

        target = self._table(table)
        for row in rows:
            target[str(row[conflict_key])] = copy.deepcopy(row)

        self.upsert_calls.append(len(rows))
        logger.debug(f"Upserted {len(rows)} rows into {table}")
        return len(rows)

    def clear_table(self, table: str) -> None:
        self._table(table).clear()

    def repair_schema(self, table: str) -> None:
        # Rows are schemaless here, so there is never drift to repair
        logger.debug(f"Schema of {table} already matches")
