from typing import TYPE_CHECKING
import logging
from langchain_core.runnables import RunnableConfig
from langsmith import traceable
from catalog_backend.services.ranking_service import similarity_ranker

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import RecommendationState

logger = logging.getLogger(__name__)

@traceable(name="rank_candidates")
def rank_candidates_node(state: 'RecommendationState', config: RunnableConfig) -> 'RecommendationState':
    """
    Score the stored embeddings against the query embedding and keep the top results
    """
    store = config["configurable"]["store"]
    table = config["configurable"]["embeddings_table"]

    try:
        results = similarity_ranker.recommend(
            store,
            table,
            state["query_embedding"],
            limit=state["limit"],
            type_filter=state.get("type_filter"),
            genre_filter=state.get("genre_filter")
        )
    except Exception as e:
        logger.error(f"Error in rank_candidates_node: {str(e)}")
        raise

    state["recommendations"] = [r.model_dump() for r in results]
    state["pipeline_step"] = "candidates_ranked"

    logger.info(f"Ranking completed: {len(results)} recommendations")
    return state
