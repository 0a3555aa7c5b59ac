# Embedding Training Pipeline
# Nodes that run every catalog record through the fixed embedding pipeline once

from .clear_embeddings_node import clear_embeddings_node
from .count_titles_node import count_titles_node
from .embed_batch_node import embed_batch_node
from .finalize_training_node import finalize_training_node

__all__ = [
    "clear_embeddings_node",
    "count_titles_node",
    "embed_batch_node",
    "finalize_training_node"
]
