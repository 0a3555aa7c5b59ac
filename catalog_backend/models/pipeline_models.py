from typing import Dict, Any, List, Optional
from typing_extensions import TypedDict


class TrainingState(TypedDict, total=False):
    """
    State object for the embedding training pipeline
    Compatible with LangGraph's state handling
    """
    # Input
    batch_size: int
    start_offset: int
    clear_first: bool

    # Pipeline data
    total: int
    offset: int
    processed: int
    batches: int
    last_page_size: int
    progress: List[int]
    cleared: Optional[bool]
    stored: int
    done: bool

    # Pipeline metadata
    pipeline_step: str
    execution_time: Optional[float]


class RecommendationState(TypedDict, total=False):
    """
    State object for the query-to-recommendations pipeline
    """
    # Input
    criteria: Dict[str, Any]
    limit: int
    type_filter: Optional[str]
    genre_filter: Optional[str]

    # Pipeline data
    query_text: str
    query_embedding: Optional[List[float]]
    recommendations: List[Dict[str, Any]]

    # Pipeline metadata
    pipeline_step: str
    execution_time: Optional[float]
