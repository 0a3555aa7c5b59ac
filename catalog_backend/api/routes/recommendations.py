from fastapi import APIRouter, Depends
from typing import Dict, Any
from catalog_backend.api.dependencies import get_embedding_pipeline, get_record_store
from catalog_backend.config import Settings, get_settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.models.request_models import QueryCriteria
from catalog_backend.services.embedding_service import EmbeddingPipeline
from catalog_backend.services.recommendation_service import get_recommendations

router = APIRouter()

@router.post("/", response_model=Dict[str, Any])
def recommend_titles(
    criteria: QueryCriteria,
    store: RecordStore = Depends(get_record_store),
    pipeline: EmbeddingPipeline = Depends(get_embedding_pipeline),
    settings: Settings = Depends(get_settings)
):
    """
    Recommend catalog titles for the selected criteria.
    `type` also filters by exact category and `genre` by genre substring.
    """
    return get_recommendations(criteria=criteria, store=store, pipeline=pipeline, settings=settings)
