from typing import TYPE_CHECKING
import logging
from langchain_core.runnables import RunnableConfig
from langsmith import traceable

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import TrainingState

logger = logging.getLogger(__name__)

@traceable(name="count_titles")
def count_titles_node(state: 'TrainingState', config: RunnableConfig) -> 'TrainingState':
    """
    Declare the total number of catalog records and position the cursor at the start offset
    """
    importer = config["configurable"]["importer"]

    try:
        total = importer.store.count_records(importer.titles_table)
    except Exception as e:
        logger.error(f"Error in count_titles_node: {str(e)}")
        raise

    start_offset = state.get("start_offset", 0)
    state["total"] = total
    state["offset"] = start_offset
    state["processed"] = start_offset
    state["batches"] = 0
    state["progress"] = []
    state["done"] = start_offset >= total
    state["pipeline_step"] = "titles_counted"

    logger.info(f"Training over {total} catalog records, starting at offset {start_offset}")
    return state
