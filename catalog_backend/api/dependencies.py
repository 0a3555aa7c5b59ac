# FastAPI dependencies: settings, storage and the embedding pipeline handle
from functools import lru_cache

from fastapi import Depends

from catalog_backend.config import Settings, get_settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.database.store_factory import build_record_store
from catalog_backend.services.embedding_service import EmbeddingPipeline, build_embedding_pipeline


@lru_cache(maxsize=1)
def _record_store() -> RecordStore:
    return build_record_store(get_settings())


def get_record_store() -> RecordStore:
    return _record_store()


@lru_cache(maxsize=4)
def _pipeline_for(scheme: str, width: int, transform_enabled: bool, seed: int) -> EmbeddingPipeline:
    settings = Settings(
        vectorizer_scheme=scheme,
        vector_width=width,
        embedding_transform_enabled=transform_enabled,
        embedding_seed=seed,
    )
    return build_embedding_pipeline(settings)


def get_embedding_pipeline(settings: Settings = Depends(get_settings)) -> EmbeddingPipeline:
    """The pipeline is immutable, so one instance per configuration is shared by all requests"""
    return _pipeline_for(
        settings.vectorizer_scheme,
        settings.vector_width,
        settings.embedding_transform_enabled,
        settings.embedding_seed,
    )
