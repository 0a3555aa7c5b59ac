"""Transform, L2 normalization and the end-to-end embedding pipeline handle."""

import numpy as np
import pytest
from pydantic import ValidationError

from catalog_backend.config import Settings
from catalog_backend.models.embedding_models import EmbeddingRecord
from catalog_backend.models.request_models import QueryCriteria
from catalog_backend.services.embedding_service import (
    EmbeddingPipeline,
    build_embedding_pipeline,
    cosine_similarity,
    l2_normalize,
)
from catalog_backend.services.embedding_transform import EmbeddingTransform
from catalog_backend.services.text_normalizer import build_query_text, build_record_text
from catalog_backend.services.vectorizer import Vectorizer


class TestL2Normalize:
    """Unit-norm rescaling."""

    def test_basic(self):
        assert np.allclose(l2_normalize([3.0, 4.0]), [0.6, 0.8])

    def test_zero_vector_unchanged(self):
        out = l2_normalize(np.zeros(8))
        assert not np.any(out)
        assert not np.any(np.isnan(out))

    def test_unit_norm_and_idempotent(self):
        rng = np.random.RandomState(0)
        for _ in range(20):
            v = l2_normalize(rng.uniform(-1, 1, size=32))
            assert abs(np.linalg.norm(v) - 1.0) < 1e-9
            assert np.allclose(l2_normalize(v), v)

    def test_rows_normalized_independently(self):
        matrix = np.array([[3.0, 4.0], [0.0, 0.0], [0.0, 2.0]])
        out = l2_normalize(matrix)
        assert np.allclose(out, [[0.6, 0.8], [0.0, 0.0], [0.0, 1.0]])


class TestEmbeddingTransform:
    """Fixed seeded projection stack."""

    def test_output_shape_and_range(self):
        transform = EmbeddingTransform(seed=42)
        x = Vectorizer().vectorize("orbit nine pilots defend a station")
        out = transform.apply(x)
        assert out.shape == (128,)
        assert np.all(out > 0.0) and np.all(out < 1.0)

    def test_zero_input_gives_zero_output(self):
        out = EmbeddingTransform().apply(np.zeros(256))
        assert out.shape == (128,)
        assert not np.any(out)

    def test_batch_matches_single(self):
        """A record's embedding does not depend on which batch it is in."""
        transform = EmbeddingTransform()
        vec = Vectorizer()
        batch = vec.vectorize_many(["star drift", "kitchen wars", "", "quiet harbor"])
        projected = transform.apply(batch)
        for i in range(batch.shape[0]):
            assert np.array_equal(projected[i], transform.apply(batch[i]))

    def test_same_seed_same_weights(self):
        x = Vectorizer().vectorize("night shift")
        assert np.array_equal(EmbeddingTransform(seed=7).apply(x), EmbeddingTransform(seed=7).apply(x))
        assert not np.array_equal(EmbeddingTransform(seed=7).apply(x), EmbeddingTransform(seed=8).apply(x))

    def test_width_mismatch(self):
        with pytest.raises(ValueError):
            EmbeddingTransform().apply(np.ones(100))

    def test_inconsistent_layers(self):
        with pytest.raises(ValueError):
            EmbeddingTransform(layers=[(256, 512, "relu"), (256, 128, "sigmoid")])


class TestEmbeddingPipeline:
    """The shared handle used by both ingestion and queries."""

    def test_dimension(self, pipeline):
        assert pipeline.dimension == 128
        disabled = build_embedding_pipeline(Settings(embedding_transform_enabled=False))
        assert disabled.dimension == 256

    def test_embeddings_are_unit_norm(self, pipeline, sample_records):
        for record in pipeline.embed_records(sample_records):
            assert len(record.embedding) == 128
            assert abs(np.linalg.norm(record.embedding) - 1.0) < 1e-6

    def test_empty_text_embeds_to_zero(self, pipeline):
        vector = pipeline.embed_text("")
        assert len(vector) == 128
        assert not any(vector)

    def test_self_similarity(self, pipeline):
        vector = pipeline.embed_text("Movie Sci-Fi Japan")
        assert abs(cosine_similarity(vector, vector) - 1.0) < 1e-6

    def test_query_path_matches_ingestion_path(self, pipeline, sample_records):
        """Same text through either path gives the same vector, bit for bit."""
        batch = pipeline.embed_records(sample_records)
        for record, embedded in zip(sample_records, batch):
            assert embedded.embedding == pipeline.embed_text(build_record_text(record))

        criteria = QueryCriteria(type="Movie", genre="Sci-Fi")
        assert pipeline.embed_query(criteria) == pipeline.embed_text(build_query_text(criteria))

    def test_display_fields_copied(self, pipeline, sample_records):
        embedded = pipeline.embed_record(sample_records[0])
        assert isinstance(embedded, EmbeddingRecord)
        assert embedded.show_id == "s001"
        assert embedded.title == "Star Drift"
        assert embedded.listed_in == "Sci-Fi & Fantasy"

    def test_transform_must_fit_vectorizer(self):
        with pytest.raises(ValueError):
            EmbeddingPipeline(Vectorizer(width=64), EmbeddingTransform())


class TestEmbeddingRecord:
    """Stored vector parsing."""

    def test_parses_text_vectors(self):
        assert EmbeddingRecord(show_id="s1", embedding="[0.5, 0.25]").embedding == [0.5, 0.25]
        assert EmbeddingRecord(show_id="s1", embedding="{0.5,0.25}").embedding == [0.5, 0.25]

    def test_missing_display_fields_blank(self):
        record = EmbeddingRecord(show_id="s1", title=None, embedding=[1.0])
        assert record.title == ""

    def test_malformed_text_is_a_validation_error(self):
        with pytest.raises(ValidationError, match="not a list of numbers"):
            EmbeddingRecord(show_id="s1", embedding="[0.1, 0.2")

    def test_non_numeric_values_rejected(self):
        with pytest.raises(ValidationError):
            EmbeddingRecord(show_id="s1", embedding=["a", "b"])
        with pytest.raises(ValidationError):
            EmbeddingRecord(show_id="s1", embedding="{0.1,abc}")
