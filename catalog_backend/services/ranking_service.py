import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
from pydantic import ValidationError

from catalog_backend.database.record_store import RecordStore
from catalog_backend.models.embedding_models import EmbeddingRecord, RankedResult

logger = logging.getLogger(__name__)


class SimilarityRanker:
    """
    Exact cosine ranking of stored embeddings against a query embedding.

    Both sides are already unit-norm, so the score is a plain dot product.
    Sorting is stable: equal scores keep scan order, which is key order.
    """

    def matches_filters(self, record: EmbeddingRecord,
                        type_filter: Optional[str] = None,
                        genre_filter: Optional[str] = None) -> bool:
        if type_filter and record.type != type_filter:
            return False
        if genre_filter and genre_filter.lower() not in record.listed_in.lower():
            return False
        return True

    def rank(self, query_embedding: Sequence[float],
             records: Iterable[Union[EmbeddingRecord, Dict[str, Any]]],
             limit: int = 10,
             type_filter: Optional[str] = None,
             genre_filter: Optional[str] = None) -> List[RankedResult]:
        """
        Score every record passing the filters and return the top `limit`.

        Args:
            query_embedding: Unit-norm query vector
            records: Stored embedding rows, in key order
            limit: Maximum number of results (K)
            type_filter: Exact category match, e.g. "Movie"
            genre_filter: Case-insensitive substring of listed_in, e.g. "sci"
        Returns:
            Results by descending similarity, scores rounded to 2 decimals in [0, 1]
        """
        if limit <= 0:
            return []

        query = np.asarray(query_embedding, dtype=np.float64)
        if not np.any(query):
            logger.info("All-zero query embedding, nothing to score")
            return []

        candidates: List[EmbeddingRecord] = []
        vectors: List[List[float]] = []
        skipped = 0

        for row in records:
            if isinstance(row, EmbeddingRecord):
                record = row
            else:
                try:
                    record = EmbeddingRecord.model_validate(row)
                except ValidationError as e:
                    logger.warning(f"Skipping unreadable stored embedding {row.get('show_id')}: {str(e)}")
                    continue
            if not self.matches_filters(record, type_filter, genre_filter):
                continue
            if len(record.embedding) != query.shape[0]:
                skipped += 1
                continue
            candidates.append(record)
            vectors.append(record.embedding)

        if skipped:
            logger.warning(f"Skipped {skipped} stored embeddings whose dimension differs from the query ({query.shape[0]})")

        if not candidates:
            logger.info("No stored embeddings match the filters")
            return []

        scores = np.clip(np.asarray(vectors, dtype=np.float64) @ query, 0.0, 1.0)
        order = np.argsort(-scores, kind="stable")[:limit]

        results = []
        for idx in order:
            record = candidates[idx]
            results.append(RankedResult(
                show_id=record.show_id,
                title=record.title,
                type=record.type,
                listed_in=record.listed_in,
                description=record.description,
                similarity=round(float(scores[idx]), 2),
            ))

        logger.info(f"Ranked {len(candidates)} candidates, returning {len(results)}")
        return results

    def recommend(self, store: RecordStore, table: str, query_embedding: Sequence[float],
                  limit: int = 10,
                  type_filter: Optional[str] = None,
                  genre_filter: Optional[str] = None,
                  page_size: int = 500) -> List[RankedResult]:
        """Rank the whole embeddings table, scanned page by page in key order"""
        return self.rank(
            query_embedding,
            store.scan(table, page_size=page_size),
            limit=limit,
            type_filter=type_filter,
            genre_filter=genre_filter,
        )


# Global service instance
similarity_ranker = SimilarityRanker()
