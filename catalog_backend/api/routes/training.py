from fastapi import APIRouter, Depends
import logging

from catalog_backend.api.dependencies import get_embedding_pipeline, get_record_store
from catalog_backend.config import Settings, get_settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.models.request_models import TrainRequest
from catalog_backend.models.response_models import TrainingResponse
from catalog_backend.pipelines.training_orchestrator import training_orchestrator
from catalog_backend.services.embedding_service import EmbeddingPipeline

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/run", response_model=TrainingResponse)
def run_training(
    request: TrainRequest,
    store: RecordStore = Depends(get_record_store),
    pipeline: EmbeddingPipeline = Depends(get_embedding_pipeline),
    settings: Settings = Depends(get_settings)
):
    """
    Run every catalog record through the embedding pipeline and upsert the results.

    On a failed batch the response is {"error", "offset", "processed"};
    call again with that offset to resume.
    """
    logger.info("Triggering embedding training via API")
    return training_orchestrator.run_training(
        store,
        pipeline,
        settings,
        batch_size=request.batch_size,
        offset=request.offset,
        clear_first=request.clear_first
    )

@router.get("/status")
def get_training_status(
    store: RecordStore = Depends(get_record_store),
    pipeline: EmbeddingPipeline = Depends(get_embedding_pipeline),
    settings: Settings = Depends(get_settings)
):
    """
    Stored vs. catalog record counts and the active embedding configuration
    """
    total = store.count_records(settings.titles_table)
    embedded = store.count_records(settings.embeddings_table)
    return {
        "success": True,
        "total_records": total,
        "embedded_records": embedded,
        "remaining": max(total - embedded, 0),
        "scheme": pipeline.scheme,
        "dimension": pipeline.dimension
    }
