from supabase import create_client, Client, ClientOptions
from postgrest.exceptions import APIError
from typing import Any, Callable, Dict, List, Optional, TypeVar
import logging

import httpx

from catalog_backend.config import Settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.exceptions import SchemaDriftError, StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# string_data_right_truncation (e.g. a VARCHAR(n) column), datatype_mismatch
SCHEMA_DRIFT_CODES = {"22001", "42804"}

# Primary key of each table, used to order pages
DEFAULT_PRIMARY_KEYS = {"netflix_titles": "show_id", "netflix_embeddings": "show_id"}


class SupabaseRecordStore(RecordStore):
    """
    RecordStore backed by Supabase (PostgREST).
    Every call is bounded by the client timeout; a timeout means the batch is
    not confirmed and the caller may retry the same offset.
    """

    def __init__(self, settings: Settings, primary_keys: Optional[Dict[str, str]] = None):
        self.url = settings.supabase_url
        self.key = settings.supabase_key

        if not self.url or not self.key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) must be set in environment variables")

        self.primary_keys = dict(DEFAULT_PRIMARY_KEYS)
        self.primary_keys[settings.titles_table] = settings.key_column
        self.primary_keys[settings.embeddings_table] = settings.key_column
        if primary_keys:
            self.primary_keys.update(primary_keys)

        options = ClientOptions(postgrest_client_timeout=settings.storage_timeout_seconds)
        self.client: Client = create_client(self.url, self.key, options=options)
        logger.info(f"Supabase record store ready (timeout={settings.storage_timeout_seconds}s)")

    def _call(self, operation: str, table: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except APIError as e:
            if e.code in SCHEMA_DRIFT_CODES:
                logger.warning(f"Schema drift on {table} during {operation}: {e.message}")
                raise SchemaDriftError(f"Column type mismatch on {table}: {e.message}") from e
            logger.error(f"Supabase error during {operation} on {table}: {e.message}")
            raise StorageError(f"{operation} on {table} failed: {e.message}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Timeout during {operation} on {table}: {str(e)}")
            raise StorageTimeoutError(f"{operation} on {table} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Storage unreachable during {operation} on {table}: {str(e)}")
            raise StorageError(f"{operation} on {table} failed: {str(e)}") from e

    def _primary_key(self, table: str) -> str:
        return self.primary_keys.get(table, "id")

    def count_records(self, table: str) -> int:
        response = self._call(
            "count", table,
            lambda: self.client.table(table).select("*", count="exact", head=True).execute(),
        )
        return int(response.count or 0)

    def fetch_page(self, table: str, limit: int, offset: int) -> List[Dict[str, Any]]:
        if limit <= 0:
            return []
        response = self._call(
            "fetch_page", table,
            lambda: self.client.table(table)
            .select("*")
            .order(self._primary_key(table))
            .range(offset, offset + limit - 1)
            .execute(),
        )
        return response.data or []

    def upsert_batch(self, table: str, rows: List[Dict[str, Any]], conflict_key: str) -> int:
        if not rows:
            return 0
        response = self._call(
            "upsert", table,
            lambda: self.client.table(table).upsert(rows, on_conflict=conflict_key).execute(),
        )
        affected = len(response.data) if response.data else len(rows)
        logger.info(f"Upserted {affected} rows into {table}")
        return affected

    def clear_table(self, table: str) -> None:
        # PostgREST refuses an unfiltered delete; every text key is >= ''
        key = self._primary_key(table)
        self._call(
            "clear", table,
            lambda: self.client.table(table).delete().gte(key, "").execute(),
        )
        logger.info(f"Cleared table {table}")

    def repair_schema(self, table: str) -> None:
        """
        Widen VARCHAR columns of `table` to TEXT through the widen_text_columns
        function from database/schema.sql. Tables already on TEXT are left as is.
        """
        try:
            self.client.rpc("widen_text_columns", {"target_table": table}).execute()
            logger.info(f"Schema repair applied to {table}")
        except APIError as e:
            logger.error(f"Schema repair failed for {table}: {e.message}")
            raise SchemaDriftError(f"Could not repair schema of {table}: {e.message}") from e
        except httpx.HTTPError as e:
            logger.error(f"Schema repair failed for {table}: {str(e)}")
            raise StorageError(f"Could not repair schema of {table}: {str(e)}") from e
