from typing import TYPE_CHECKING
import logging
from langchain_core.runnables import RunnableConfig
from langsmith import traceable

from catalog_backend.services.batch_import_service import make_progress

if TYPE_CHECKING:
    from catalog_backend.models.pipeline_models import TrainingState

logger = logging.getLogger(__name__)

@traceable(name="embed_batch")
def embed_batch_node(state: 'TrainingState', config: RunnableConfig) -> 'TrainingState':
    """
    Embed and upsert the next page of catalog records.

    Functionality:
    - Fetch one page of titles at the current offset (key order)
    - Run it through the shared embedding pipeline
    - Upsert the embedding rows (one call per batch)
    - Advance the cursor and record progress
    - Mark the run done on a short page or once the declared total is reached
    """
    importer = config["configurable"]["importer"]
    pipeline = config["configurable"]["pipeline"]

    limit = min(importer.batch_size, state["total"] - state["processed"])
    try:
        written, page_size = importer.embed_batch(pipeline, state["offset"], limit)
    except Exception as e:
        logger.error(f"Error in embed_batch_node at offset {state['offset']}: {str(e)}")
        raise

    if page_size == 0:
        state["done"] = True
        state["pipeline_step"] = "batches_exhausted"
        return state

    state["processed"] += page_size
    state["offset"] = state["processed"]
    state["batches"] += 1
    state["last_page_size"] = page_size

    progress = make_progress(state["batches"], written, state["processed"], state["total"])
    state["progress"].append(progress.percent)

    state["done"] = page_size < limit or state["processed"] >= state["total"]
    state["pipeline_step"] = "batch_embedded"

    logger.info(f"Batch {state['batches']}: {state['processed']}/{state['total']} records ({progress.percent}%)")
    return state
