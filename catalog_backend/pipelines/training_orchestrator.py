# Embedding Training Orchestrator
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging
from langgraph.graph import StateGraph, END

# LangSmith tracing
from langsmith import traceable

from catalog_backend.config import Settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.models.pipeline_models import TrainingState
from catalog_backend.pipelines.training.clear_embeddings_node import clear_embeddings_node
from catalog_backend.pipelines.training.count_titles_node import count_titles_node
from catalog_backend.pipelines.training.embed_batch_node import embed_batch_node
from catalog_backend.pipelines.training.finalize_training_node import finalize_training_node
from catalog_backend.services.batch_import_service import BatchImporter
from catalog_backend.services.embedding_service import EmbeddingPipeline

logger = logging.getLogger(__name__)


def _next_step(state: TrainingState) -> str:
    return "finalize" if state.get("done") else "embed_batch"


class TrainingOrchestrator:
    """
    Orchestrator for the embedding "training" run: every catalog record goes
    through the fixed embedding pipeline once. No weights are learned.

    Pipeline Flow:
    1. Clear stored embeddings (only when requested; failure does not stop the run)
    2. Count catalog records (declared total)
    3. Embed one batch, loop until a short page or the total is reached
    4. Finalize and report
    """

    def __init__(self):
        self.graph = None
        self._build_graph()

    def _build_graph(self):
        """Build the training LangGraph workflow"""
        try:
            workflow = StateGraph(TrainingState)

            workflow.add_node("clear_embeddings", clear_embeddings_node)
            workflow.add_node("count_titles", count_titles_node)
            workflow.add_node("embed_batch", embed_batch_node)
            workflow.add_node("finalize", finalize_training_node)

            workflow.set_entry_point("clear_embeddings")
            workflow.add_edge("clear_embeddings", "count_titles")
            workflow.add_conditional_edges("count_titles", _next_step, {"embed_batch": "embed_batch", "finalize": "finalize"})
            workflow.add_conditional_edges("embed_batch", _next_step, {"embed_batch": "embed_batch", "finalize": "finalize"})
            workflow.add_edge("finalize", END)

            self.graph = workflow.compile()
            logger.info("Training LangGraph workflow compiled successfully")

        except Exception as e:
            logger.error(f"Error building training LangGraph workflow: {str(e)}")
            self.graph = None

    @traceable(name="embedding_training_pipeline")
    def run_training(self,
                     store: RecordStore,
                     pipeline: EmbeddingPipeline,
                     settings: Settings,
                     batch_size: Optional[int] = None,
                     offset: int = 0,
                     clear_first: bool = False) -> Dict[str, Any]:
        """
        Main entry point for (re)building the embeddings table

        Args:
            store: Storage holding the titles and embeddings tables
            pipeline: Embedding pipeline handle shared with the query path
            settings: Table names and defaults
            batch_size: Records per batch (defaults to EMBEDDING_BATCH_SIZE)
            offset: Resume point; records before it are left as stored
            clear_first: Remove all embeddings before embedding
        Returns:
            Dict with processed/total counts, the next offset and per-batch progress
        Raises:
            BatchImportError: a batch failed; its offset is the resume point
        """
        start_time = datetime.now(timezone.utc)
        batch_size = batch_size or settings.embedding_batch_size
        importer = BatchImporter.from_settings(store, settings, batch_size=batch_size)

        initial_state: TrainingState = {
            "batch_size": batch_size,
            "start_offset": offset,
            "clear_first": clear_first,
            "total": 0,
            "offset": offset,
            "processed": offset,
            "batches": 0,
            "last_page_size": 0,
            "progress": [],
            "cleared": None,
            "stored": 0,
            "done": False,
            "pipeline_step": "initialized",
            "execution_time": None
        }
        config = {
            "configurable": {"importer": importer, "pipeline": pipeline},
            "recursion_limit": settings.max_training_steps,
        }

        logger.info(f"Starting embedding training: batch_size={batch_size}, offset={offset}, clear_first={clear_first}")

        if self.graph:
            result = self.graph.invoke(initial_state, config=config)
        else:
            # Sequential execution when LangGraph is not available
            logger.warning("LangGraph not available, using sequential execution")
            result = clear_embeddings_node(initial_state, config)
            result = count_titles_node(result, config)
            while not result.get("done"):
                result = embed_batch_node(result, config)
            result = finalize_training_node(result, config)

        execution_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        result["execution_time"] = execution_time

        logger.info(f"Embedding training completed in {execution_time:.2f}s")

        return {
            "success": True,
            "processed": result.get("processed", 0),
            "total": result.get("total", 0),
            "next_offset": result.get("offset", offset),
            "cleared": result.get("cleared"),
            "stored": result.get("stored", 0),
            "progress": result.get("progress", []),
            "execution_time": execution_time,
            "pipeline_step": result.get("pipeline_step", "completed")
        }


# Global orchestrator instance
training_orchestrator = TrainingOrchestrator()
