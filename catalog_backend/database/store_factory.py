import logging

from catalog_backend.config import Settings
from catalog_backend.database.record_store import RecordStore

logger = logging.getLogger(__name__)


def build_record_store(settings: Settings) -> RecordStore:
    """Create the RecordStore selected by STORAGE_BACKEND"""
    if settings.storage_backend == "memory":
        from catalog_backend.database.memory_store import InMemoryRecordStore
        logger.warning("Using the in-memory record store; rows are lost when the process exits")
        return InMemoryRecordStore(primary_keys={
            settings.titles_table: settings.key_column,
            settings.embeddings_table: settings.key_column,
        })

    from catalog_backend.database.supabase_client import SupabaseRecordStore
    return SupabaseRecordStore(settings)
