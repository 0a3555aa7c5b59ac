# Single-endpoint action boundary: /external-db?action=<name>
from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ValidationError
from typing import Any, Callable, Dict, Optional, Type, TypeVar
import logging

from catalog_backend.api.dependencies import get_embedding_pipeline, get_record_store
from catalog_backend.config import Settings, get_settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.exceptions import InvalidRequestError, UnknownActionError
from catalog_backend.models.request_models import ImportRequest, RecommendRequest, StoreEmbeddingsRequest, TrainRequest
from catalog_backend.pipelines.training_orchestrator import training_orchestrator
from catalog_backend.services.batch_import_service import BatchImporter
from catalog_backend.services.csv_service import parse_rows
from catalog_backend.services.embedding_service import EmbeddingPipeline
from catalog_backend.services.recommendation_service import recommend_by_embedding

logger = logging.getLogger(__name__)
router = APIRouter()

M = TypeVar("M", bound=BaseModel)


class ActionContext:
    def __init__(self, payload: Optional[Dict[str, Any]], limit: int, offset: int,
                 store: RecordStore, pipeline: EmbeddingPipeline, settings: Settings):
        self.payload = payload or {}
        self.limit = limit
        self.offset = offset
        self.store = store
        self.pipeline = pipeline
        self.settings = settings

    def parse(self, model: Type[M]) -> M:
        try:
            return model.model_validate(self.payload)
        except ValidationError as e:
            details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            raise InvalidRequestError(f"Invalid payload: {details}") from e

    def importer(self, batch_size: Optional[int] = None) -> BatchImporter:
        return BatchImporter.from_settings(self.store, self.settings, batch_size=batch_size)


def _import(ctx: ActionContext) -> Dict[str, Any]:
    request = ctx.parse(ImportRequest)
    records = parse_rows(request.records)
    summary = ctx.importer().import_records(records)
    return {
        "success": True,
        "imported": summary.processed,
        "total": summary.total,
        "progress": [p.percent for p in summary.progress]
    }


def _count(ctx: ActionContext) -> Dict[str, Any]:
    return {"success": True, "total": ctx.store.count_records(ctx.settings.titles_table)}


def _preview(ctx: ActionContext) -> Dict[str, Any]:
    data = ctx.store.fetch_page(ctx.settings.titles_table, limit=ctx.limit, offset=ctx.offset)
    return {"success": True, "data": data}


def _store_embeddings(ctx: ActionContext) -> Dict[str, Any]:
    request = ctx.parse(StoreEmbeddingsRequest)
    for record in request.embeddings:
        if len(record.embedding) != ctx.pipeline.dimension:
            raise InvalidRequestError(
                f"Embedding for {record.show_id} has {len(record.embedding)} values, expected {ctx.pipeline.dimension}"
            )
    summary = ctx.importer(ctx.settings.embedding_batch_size).store_embeddings(request.embeddings)
    return {"success": True, "stored": summary.processed}


def _embedding_count(ctx: ActionContext) -> Dict[str, Any]:
    return {"success": True, "count": ctx.store.count_records(ctx.settings.embeddings_table)}


def _clear_embeddings(ctx: ActionContext) -> Dict[str, Any]:
    cleared = ctx.importer().clear_embeddings()
    return {"success": True, "cleared": cleared}


def _recommend(ctx: ActionContext) -> Dict[str, Any]:
    request = ctx.parse(RecommendRequest)
    return recommend_by_embedding(request, ctx.store, ctx.pipeline.dimension, ctx.settings)


def _train(ctx: ActionContext) -> Dict[str, Any]:
    request = ctx.parse(TrainRequest)
    return training_orchestrator.run_training(
        ctx.store,
        ctx.pipeline,
        ctx.settings,
        batch_size=request.batch_size,
        offset=request.offset,
        clear_first=request.clear_first
    )


ACTIONS: Dict[str, Callable[[ActionContext], Dict[str, Any]]] = {
    "import": _import,
    "count": _count,
    "preview": _preview,
    "store-embeddings": _store_embeddings,
    "embedding-count": _embedding_count,
    "clear-embeddings": _clear_embeddings,
    "recommend": _recommend,
    "train": _train,
}

# Actions that carry a JSON body
BODY_ACTIONS = {"import", "store-embeddings", "recommend", "train"}


@router.api_route("", methods=["GET", "POST"])
def run_action(
    action: str = Query(..., description="One of: " + ", ".join(ACTIONS)),
    limit: int = Query(10, ge=1, le=1000, description="Page size for preview"),
    offset: int = Query(0, ge=0, description="Page offset for preview"),
    payload: Optional[Dict[str, Any]] = Body(None),
    store: RecordStore = Depends(get_record_store),
    pipeline: EmbeddingPipeline = Depends(get_embedding_pipeline),
    settings: Settings = Depends(get_settings)
):
    """
    Dispatch an action. Success responses carry {"success": true, ...}
    (recommend returns {"recommendations": [...]}); errors are {"error": message}.
    """
    handler = ACTIONS.get(action)
    if handler is None:
        raise UnknownActionError(f"Invalid action: {action}")
    if action in BODY_ACTIONS and payload is None and action != "train":
        raise InvalidRequestError(f"Action {action} requires a JSON body")

    logger.info(f"Running action {action}")
    return handler(ActionContext(payload, limit, offset, store, pipeline, settings))
