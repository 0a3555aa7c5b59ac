import logging
from typing import Callable, List, Optional, Sequence, Tuple, Dict, Any

import numpy as np

from catalog_backend.config import Settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.exceptions import BatchImportError, CatalogPipelineError, InvalidRequestError, SchemaDriftError
from catalog_backend.models.embedding_models import EmbeddingRecord
from catalog_backend.models.response_models import BatchProgress, ImportSummary
from catalog_backend.models.title_models import SourceRecord
from catalog_backend.services.embedding_service import EmbeddingPipeline, l2_normalize

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[BatchProgress], None]


def make_progress(batch_index: int, batch_size: int, processed: int, total: int) -> BatchProgress:
    fraction = min(processed / total, 1.0) if total > 0 else 1.0
    return BatchProgress(
        batch_index=batch_index,
        batch_size=batch_size,
        processed=processed,
        total=total,
        fraction=fraction,
        percent=round(fraction * 100),
    )


class BatchImporter:
    """
    Sequential batch writer with upsert semantics.

    - one upsert call per batch of at most `batch_size` rows
    - batches commit in order, progress never goes backwards
    - a failing batch stops the run with a BatchImportError whose `offset`
      is where to resume; committed batches stay committed
    - a schema drift error is repaired once, then the batch is retried once
    """

    def __init__(self, store: RecordStore, batch_size: int = 100,
                 titles_table: str = "netflix_titles",
                 embeddings_table: str = "netflix_embeddings",
                 key_column: str = "show_id"):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.titles_table = titles_table
        self.embeddings_table = embeddings_table
        self.key_column = key_column
        self._schema_repaired = set()

    @classmethod
    def from_settings(cls, store: RecordStore, settings: Settings, batch_size: Optional[int] = None) -> "BatchImporter":
        return cls(
            store,
            batch_size=batch_size or settings.import_batch_size,
            titles_table=settings.titles_table,
            embeddings_table=settings.embeddings_table,
            key_column=settings.key_column,
        )

    # ============= SOURCE RECORDS =============

    def import_records(self, records: Sequence[SourceRecord], offset: int = 0,
                       on_progress: Optional[ProgressCallback] = None) -> ImportSummary:
        """
        Upsert records[offset:] into the titles table.

        Args:
            records: Full, ordered list of parsed source records
            offset: Index of the first record to process (resume point)
            on_progress: Called after every committed batch
        Returns:
            ImportSummary with cumulative counts and per-batch progress
        """
        rows = [r.to_row() for r in records]
        return self._write_batches(self.titles_table, rows, offset, on_progress)

    # ============= EMBEDDINGS =============

    def store_embeddings(self, embeddings: Sequence[EmbeddingRecord], offset: int = 0,
                         on_progress: Optional[ProgressCallback] = None) -> ImportSummary:
        """
        Upsert precomputed embedding rows into the embeddings table.
        Vectors are rescaled to unit norm before writing; the ranker scores by plain dot product.
        """
        if embeddings:
            dimension = len(embeddings[0].embedding)
            for record in embeddings:
                if len(record.embedding) != dimension:
                    raise InvalidRequestError(
                        f"Embedding for {record.show_id} has {len(record.embedding)} dimensions, expected {dimension}"
                    )
        rows = []
        for record in embeddings:
            vector = np.asarray(record.embedding, dtype=np.float64)
            if not np.all(np.isfinite(vector)):
                raise InvalidRequestError(f"Embedding for {record.show_id} contains NaN or infinite values")
            row = record.to_row()
            row["embedding"] = l2_normalize(vector).tolist()
            rows.append(row)
        return self._write_batches(self.embeddings_table, rows, offset, on_progress)

    def embed_batch(self, pipeline: EmbeddingPipeline, offset: int, limit: Optional[int] = None) -> Tuple[int, int]:
        """
        Embed one page of the titles table and upsert the embedding rows.
        The page holds at most `limit` rows (default: the batch size).

        Returns:
            (rows written, rows in the fetched page)
        """
        try:
            page = self.store.fetch_page(self.titles_table, limit=limit or self.batch_size, offset=offset)
            if not page:
                return 0, 0
            records = [SourceRecord.model_validate(row) for row in page]
            embeddings = pipeline.embed_records(records)
            written = self._upsert(self.embeddings_table, [e.to_row() for e in embeddings])
        except CatalogPipelineError as e:
            logger.error(f"Embedding batch at offset {offset} failed: {e.message}")
            raise BatchImportError(f"Embedding batch at offset {offset} failed: {e.message}",
                                   offset=offset, processed=offset, cause=e) from e
        except Exception as e:
            logger.error(f"Embedding batch at offset {offset} failed: {str(e)}")
            raise BatchImportError(f"Embedding batch at offset {offset} failed: {str(e)}",
                                   offset=offset, processed=offset, cause=e) from e

        logger.info(f"Embedded {written} records starting at offset {offset}")
        return written, len(page)

    def embed_catalog(self, pipeline: EmbeddingPipeline, offset: int = 0, total: Optional[int] = None,
                      on_progress: Optional[ProgressCallback] = None) -> ImportSummary:
        """
        Run every catalog record from `offset` through the pipeline.
        Stops on a short page or once `total` records have been processed.
        """
        if total is None:
            total = self.store.count_records(self.titles_table)

        summary = ImportSummary(processed=offset, total=total, next_offset=offset)
        while summary.processed < total:
            limit = min(self.batch_size, total - summary.processed)
            written, page_size = self.embed_batch(pipeline, summary.processed, limit)
            if page_size == 0:
                break

            summary.processed += page_size
            summary.next_offset = summary.processed
            summary.batches += 1
            progress = make_progress(summary.batches, written, summary.processed, total)
            summary.progress.append(progress)
            if on_progress:
                on_progress(progress)

            if page_size < limit:
                break

        logger.info(f"Catalog embedding finished: {summary.processed}/{total} records in {summary.batches} batches")
        return summary

    def clear_embeddings(self) -> bool:
        """
        Remove every embedding row before a full retrain.
        A failure is logged and reported as False; it never blocks the import pass.
        """
        try:
            self.store.clear_table(self.embeddings_table)
            logger.info(f"Cleared {self.embeddings_table}")
            return True
        except Exception as e:
            logger.error(f"Failed to clear {self.embeddings_table}: {str(e)}")
            return False

    # ============= INTERNALS =============

    def _write_batches(self, table: str, rows: List[Dict[str, Any]], offset: int,
                       on_progress: Optional[ProgressCallback]) -> ImportSummary:
        if offset < 0:
            raise InvalidRequestError(f"offset must not be negative, got {offset}")

        total = len(rows)
        summary = ImportSummary(processed=min(offset, total), total=total, next_offset=min(offset, total))

        for start in range(summary.processed, total, self.batch_size):
            batch = rows[start:start + self.batch_size]
            try:
                self._upsert(table, batch)
            except CatalogPipelineError as e:
                logger.error(f"Batch at offset {start} into {table} failed after {summary.processed} rows: {e.message}")
                raise BatchImportError(f"Batch at offset {start} into {table} failed: {e.message}",
                                       offset=start, processed=summary.processed, cause=e) from e
            except Exception as e:
                logger.error(f"Batch at offset {start} into {table} failed after {summary.processed} rows: {str(e)}")
                raise BatchImportError(f"Batch at offset {start} into {table} failed: {str(e)}",
                                       offset=start, processed=summary.processed, cause=e) from e

            summary.processed = start + len(batch)
            summary.next_offset = summary.processed
            summary.batches += 1
            progress = make_progress(summary.batches, len(batch), summary.processed, total)
            summary.progress.append(progress)
            if on_progress:
                on_progress(progress)
            logger.info(f"Committed batch {summary.batches} into {table}: {summary.processed}/{total} ({progress.percent}%)")

        return summary

    def _dedupe(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # ON CONFLICT cannot touch one key twice in a statement; the last row for a key wins
        latest: Dict[Any, Dict[str, Any]] = {}
        for row in rows:
            latest[row[self.key_column]] = row
        if len(latest) < len(rows):
            logger.warning(f"Dropped {len(rows) - len(latest)} earlier rows with a repeated {self.key_column} in one batch")
        return list(latest.values())

    def _upsert(self, table: str, rows: List[Dict[str, Any]]) -> int:
        rows = self._dedupe(rows)
        try:
            return self.store.upsert_batch(table, rows, conflict_key=self.key_column)
        except SchemaDriftError:
            if table in self._schema_repaired:
                raise
            logger.warning(f"Schema drift on {table}, attempting one corrective adjustment")
            self._schema_repaired.add(table)
            self.store.repair_schema(table)
            return self.store.upsert_batch(table, rows, conflict_key=self.key_column)
