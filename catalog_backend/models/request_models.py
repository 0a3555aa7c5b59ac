# Pydantic models for incoming API requests
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from .embedding_models import EmbeddingRecord


class ImportRequest(BaseModel):
    records: List[Dict[str, Any]]


class StoreEmbeddingsRequest(BaseModel):
    embeddings: List[EmbeddingRecord]


class RecommendRequest(BaseModel):
    embedding: List[float]
    limit: int = Field(10, ge=1)
    type_filter: Optional[str] = None
    genre_filter: Optional[str] = None


class QueryCriteria(BaseModel):
    """Criteria picked by the user; concatenated in field order into the query text"""
    type: Optional[str] = None
    genre: Optional[str] = None
    tone: Optional[str] = None
    duration: Optional[str] = None
    country: Optional[str] = None
    query: Optional[str] = None
    limit: int = Field(10, ge=1)

    def is_empty(self) -> bool:
        values = [self.type, self.genre, self.tone, self.duration, self.country, self.query]
        return not any(v and v.strip() for v in values)


class TrainRequest(BaseModel):
    batch_size: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)
    clear_first: bool = False
