"""Storage boundary used by the importer, the ranker and the API."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List


class RecordStore(ABC):
    """
    Relational row store. Implementations own transaction mechanics; callers
    rely only on the per-call contracts below.
    """

    @abstractmethod
    def count_records(self, table: str) -> int:
        """Total number of rows in `table`"""

    @abstractmethod
    def fetch_page(self, table: str, limit: int, offset: int) -> List[Dict[str, Any]]:
        """Rows ordered by primary key; consecutive offsets never overlap or skip on a static table"""

    @abstractmethod
    def upsert_batch(self, table: str, rows: List[Dict[str, Any]], conflict_key: str) -> int:
        """Insert rows, fully replacing any existing row with the same `conflict_key`. Returns rows affected."""

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Delete every row. Clearing an empty table is a no-op."""

    @abstractmethod
    def repair_schema(self, table: str) -> None:
        """Best-effort fix of column types that drifted from what the importer writes"""

    def scan(self, table: str, page_size: int = 500) -> Iterator[Dict[str, Any]]:
        offset = 0
        while True:
            page = self.fetch_page(table, limit=page_size, offset=offset)
            yield from page
            if len(page) < page_size:
                return
            offset += len(page)
