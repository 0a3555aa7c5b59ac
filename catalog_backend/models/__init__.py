# Pipeline models
from .pipeline_models import TrainingState, RecommendationState

# Catalog and embedding models
from .title_models import SourceRecord, TITLE_COLUMNS, VECTORIZED_FIELDS
from .embedding_models import EmbeddingRecord, RankedResult, DISPLAY_FIELDS

# Request/Response models
from .request_models import *
from .response_models import *

__all__ = [
    "TrainingState",
    "RecommendationState",
    "SourceRecord",
    "EmbeddingRecord",
    "RankedResult",
    "TITLE_COLUMNS",
    "VECTORIZED_FIELDS",
    "DISPLAY_FIELDS",
]
