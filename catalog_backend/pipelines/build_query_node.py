from typing import TYPE_CHECKING
import logging
from langsmith import traceable
from catalog_backend.services.text_normalizer import build_query_text

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import RecommendationState

logger = logging.getLogger(__name__)

@traceable(name="build_query")
def build_query_node(state: 'RecommendationState') -> 'RecommendationState':
    """
    Concatenate the selected criteria into the query text
    """
    state["query_text"] = build_query_text(state.get("criteria") or {})
    state["pipeline_step"] = "query_built"

    logger.info(f"Query text built: {state['query_text']!r}")
    return state
