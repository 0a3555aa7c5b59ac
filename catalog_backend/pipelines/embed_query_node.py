from typing import TYPE_CHECKING
import logging
from langchain_core.runnables import RunnableConfig
from langsmith import traceable

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import RecommendationState

logger = logging.getLogger(__name__)

@traceable(name="embed_query")
def embed_query_node(state: 'RecommendationState', config: RunnableConfig) -> 'RecommendationState':
    """
    Embed the query text with the same pipeline handle used at ingestion time
    """
    pipeline = config["configurable"]["pipeline"]

    state["query_embedding"] = pipeline.embed_text(state.get("query_text", ""))
    state["pipeline_step"] = "query_embedded"

    logger.info(f"Query embedded: dimension={len(state['query_embedding'])}")
    return state
