# Pydantic models for outgoing API responses
from pydantic import BaseModel
from typing import List, Optional

from .embedding_models import RankedResult


class BaseResponse(BaseModel):
    """Base response model for API endpoints"""
    success: bool = True
    message: Optional[str] = None


class BatchProgress(BaseModel):
    batch_index: int
    batch_size: int
    processed: int
    total: int
    fraction: float
    percent: int


class ImportSummary(BaseModel):
    processed: int = 0
    total: int = 0
    next_offset: int = 0
    batches: int = 0
    progress: List[BatchProgress] = []


class ImportResponse(BaseResponse):
    imported: int
    total: int
    progress: List[int] = []


class TrainingResponse(BaseResponse):
    processed: int
    total: int
    next_offset: int
    cleared: Optional[bool] = None
    stored: int = 0
    progress: List[int] = []
    execution_time: Optional[float] = None
    pipeline_step: Optional[str] = None


class RecommendationResponse(BaseModel):
    recommendations: List[RankedResult]
    query_text: Optional[str] = None
