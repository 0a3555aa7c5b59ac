from typing import Dict, Any
from datetime import datetime, timezone
import logging
from langgraph.graph import StateGraph, END

# LangSmith tracing
from langsmith import traceable

from catalog_backend.config import Settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.exceptions import InvalidRequestError
from catalog_backend.models.pipeline_models import RecommendationState
from catalog_backend.models.request_models import QueryCriteria
from catalog_backend.pipelines.build_query_node import build_query_node
from catalog_backend.pipelines.embed_query_node import embed_query_node
from catalog_backend.pipelines.rank_candidates_node import rank_candidates_node
from catalog_backend.services.embedding_service import EmbeddingPipeline

logger = logging.getLogger(__name__)


class RecommendationOrchestrator:
    """
    Orchestrator for criteria-based recommendations:
    1. Build query text (type, genre, tone, duration, country, free text)
    2. Embed the query with the ingestion pipeline handle
    3. Rank stored embeddings (category exact filter + genre substring filter)
    """

    def __init__(self):
        self.graph = None
        self._build_graph()

    def _build_graph(self):
        """Build the recommendation LangGraph workflow"""
        try:
            workflow = StateGraph(RecommendationState)

            workflow.add_node("build_query", build_query_node)
            workflow.add_node("embed_query", embed_query_node)
            workflow.add_node("rank_candidates", rank_candidates_node)

            workflow.set_entry_point("build_query")
            workflow.add_edge("build_query", "embed_query")
            workflow.add_edge("embed_query", "rank_candidates")
            workflow.add_edge("rank_candidates", END)

            self.graph = workflow.compile()
            logger.info("Recommendation LangGraph workflow compiled successfully")

        except Exception as e:
            logger.error(f"Error building recommendation LangGraph workflow: {str(e)}")
            self.graph = None

    @traceable(name="recommendation_pipeline")
    def generate_recommendations(self,
                                 criteria: QueryCriteria,
                                 store: RecordStore,
                                 pipeline: EmbeddingPipeline,
                                 settings: Settings) -> Dict[str, Any]:
        """
        Main entry point for generating recommendations

        Raises:
            InvalidRequestError: no criterion was supplied
        """
        if criteria.is_empty():
            raise InvalidRequestError("Select at least one criterion (type, genre, tone, duration, country or query)")

        start_time = datetime.now(timezone.utc)
        limit = min(criteria.limit, settings.max_recommendation_limit)

        initial_state: RecommendationState = {
            "criteria": criteria.model_dump(exclude={"limit"}),
            "limit": limit,
            "type_filter": criteria.type or None,
            "genre_filter": criteria.genre or None,
            "query_text": "",
            "query_embedding": None,
            "recommendations": [],
            "pipeline_step": "initialized",
            "execution_time": None
        }
        config = {
            "configurable": {
                "store": store,
                "pipeline": pipeline,
                "embeddings_table": settings.embeddings_table,
            }
        }

        if self.graph:
            result = self.graph.invoke(initial_state, config=config)
        else:
            # Sequential execution when LangGraph is not available
            result = build_query_node(initial_state)
            result = embed_query_node(result, config)
            result = rank_candidates_node(result, config)

        execution_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"Recommendation pipeline completed in {execution_time:.2f}s")

        return {
            "recommendations": result.get("recommendations", []),
            "query_text": result.get("query_text", ""),
            "metadata": {
                "execution_time": execution_time,
                "limit": limit,
                "pipeline_step": result.get("pipeline_step", "completed")
            }
        }


# Global orchestrator instance
recommendation_orchestrator = RecommendationOrchestrator()
