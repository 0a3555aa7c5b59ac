"""
Recommendation service that interfaces with the orchestrator and the ranker
"""
from typing import Dict, Any
from catalog_backend.config import Settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.exceptions import InvalidRequestError
from catalog_backend.models.request_models import QueryCriteria, RecommendRequest
from catalog_backend.pipelines.orchestrator import recommendation_orchestrator
from catalog_backend.services.embedding_service import EmbeddingPipeline, l2_normalize
from catalog_backend.services.ranking_service import similarity_ranker


def get_recommendations(criteria: QueryCriteria, store: RecordStore,
                        pipeline: EmbeddingPipeline, settings: Settings) -> Dict[str, Any]:
    """
    Get recommendations for a set of query criteria using the orchestrator

    Args:
        criteria: Criteria picked by the user (at least one must be set)
        store: Storage holding the embeddings table
        pipeline: Embedding pipeline shared with ingestion
        settings: Table names and limits

    Returns:
        Dictionary containing recommendations, the query text and metadata
    """
    return recommendation_orchestrator.generate_recommendations(
        criteria=criteria, store=store, pipeline=pipeline, settings=settings
    )


def recommend_by_embedding(request: RecommendRequest, store: RecordStore,
                           dimension: int, settings: Settings) -> Dict[str, Any]:
    """
    Rank stored embeddings against a caller-supplied embedding, rescaled to unit norm first

    Raises:
        InvalidRequestError: the embedding does not have the pipeline dimension
    """
    if len(request.embedding) != dimension:
        raise InvalidRequestError(f"embedding must have {dimension} values, got {len(request.embedding)}")

    results = similarity_ranker.recommend(
        store,
        settings.embeddings_table,
        l2_normalize(request.embedding).tolist(),
        limit=min(request.limit, settings.max_recommendation_limit),
        type_filter=request.type_filter or None,
        genre_filter=request.genre_filter or None,
    )
    return {"recommendations": [r.model_dump() for r in results]}
