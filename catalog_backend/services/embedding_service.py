"""
Embedding pipeline: text normalizer -> vectorizer -> transform -> L2 normalizer.

The same EmbeddingPipeline handle must produce both stored embeddings and
query embeddings; any divergence between the two paths breaks similarity.
"""
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

import numpy as np

from catalog_backend.config import Settings
from catalog_backend.models.embedding_models import EmbeddingRecord
from catalog_backend.models.title_models import SourceRecord
from catalog_backend.services.embedding_transform import EmbeddingTransform
from catalog_backend.services.text_normalizer import build_query_text, build_record_text, normalize_text
from catalog_backend.services.vectorizer import Vectorizer

logger = logging.getLogger(__name__)


def l2_normalize(vector: Union[np.ndarray, Sequence[float]]) -> np.ndarray:
    """
    Rescale to unit Euclidean norm. The zero vector is returned unchanged
    (no NaN, no error). 2-D input is normalized row by row.
    """
    v = np.asarray(vector, dtype=np.float64)
    if v.ndim == 2:
        if v.shape[0] == 0:
            return v.copy()
        return np.vstack([l2_normalize(row) for row in v])

    norm = np.linalg.norm(v)
    if norm > 0:
        return v / norm
    return v.copy()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of the two normalized vectors; 0.0 when either is zero"""
    return float(np.dot(l2_normalize(a), l2_normalize(b)))


class EmbeddingPipeline:
    """
    Immutable handle over the full text-to-embedding chain.
    Build it once per run and pass it to whatever needs embeddings.
    """

    def __init__(self, vectorizer: Vectorizer, transform: Optional[EmbeddingTransform] = None):
        if transform is not None and transform.input_width != vectorizer.width:
            raise ValueError(f"Transform expects width {transform.input_width}, "
                             f"vectorizer produces {vectorizer.width}")
        self._vectorizer = vectorizer
        self._transform = transform

    @property
    def dimension(self) -> int:
        if self._transform is not None:
            return self._transform.output_width
        return self._vectorizer.width

    @property
    def scheme(self) -> str:
        return self._vectorizer.scheme

    def features(self, text: str) -> np.ndarray:
        """Vectorizer output for raw text (before the transform)"""
        return self._vectorizer.vectorize(normalize_text(text))

    def embed_text(self, text: str) -> List[float]:
        return self.embed_texts([text])[0]

    def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        features = self._vectorizer.vectorize_many([normalize_text(t) for t in texts])
        if self._transform is not None:
            features = self._transform.apply(features)
        return l2_normalize(features).tolist()

    def embed_record(self, record: SourceRecord) -> EmbeddingRecord:
        return self.embed_records([record])[0]

    def embed_records(self, records: Sequence[SourceRecord]) -> List[EmbeddingRecord]:
        vectors = self.embed_texts([build_record_text(r) for r in records])
        return [
            EmbeddingRecord(
                show_id=record.show_id,
                title=record.title,
                type=record.type,
                listed_in=record.listed_in,
                description=record.description,
                embedding=vector,
            )
            for record, vector in zip(records, vectors)
        ]

    def embed_query(self, criteria: Union[Mapping[str, Any], Any]) -> List[float]:
        return self.embed_text(build_query_text(criteria))


def build_embedding_pipeline(settings: Settings) -> EmbeddingPipeline:
    vectorizer = Vectorizer(width=settings.vector_width, scheme=settings.vectorizer_scheme)

    transform = None
    if settings.embedding_transform_enabled:
        layers = [
            (settings.vector_width, 512, "relu"),
            (512, 256, "relu"),
            (256, 128, "sigmoid"),
        ]
        transform = EmbeddingTransform(layers=layers, seed=settings.embedding_seed)

    pipeline = EmbeddingPipeline(vectorizer, transform)
    logger.info(f"Embedding pipeline built: scheme={pipeline.scheme}, dimension={pipeline.dimension}, "
                f"transform={'on' if transform is not None else 'off'}")
    return pipeline
