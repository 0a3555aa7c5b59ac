from typing import TYPE_CHECKING
import logging
from langchain_core.runnables import RunnableConfig
from langsmith import traceable

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import TrainingState

logger = logging.getLogger(__name__)

@traceable(name="clear_embeddings")
def clear_embeddings_node(state: 'TrainingState', config: RunnableConfig) -> 'TrainingState':
    """
    Remove every stored embedding before a full retrain.
    A failed clear is recorded in state and the pipeline carries on.
    """
    if not state.get("clear_first"):
        state["cleared"] = None
        state["pipeline_step"] = "clear_skipped"
        return state

    importer = config["configurable"]["importer"]
    state["cleared"] = importer.clear_embeddings()
    state["pipeline_step"] = "embeddings_cleared" if state["cleared"] else "clear_failed"

    if not state["cleared"]:
        logger.warning("Clearing embeddings failed, continuing with upserts over existing rows")

    return state
