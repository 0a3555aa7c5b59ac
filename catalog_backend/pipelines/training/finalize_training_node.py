from typing import TYPE_CHECKING
import logging
from langchain_core.runnables import RunnableConfig

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import TrainingState

logger = logging.getLogger(__name__)

def finalize_training_node(state: 'TrainingState', config: RunnableConfig) -> 'TrainingState':
    """
    Close the run and log a summary
    """
    importer = config["configurable"]["importer"]

    state["stored"] = importer.store.count_records(importer.embeddings_table)
    state["pipeline_step"] = "completed"

    logger.info(f"Training completed: {state.get('processed', 0)}/{state.get('total', 0)} records in "
                f"{state.get('batches', 0)} batches, {state['stored']} embeddings stored")
    return state
