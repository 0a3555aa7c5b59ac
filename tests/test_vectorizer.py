"""Character hashing vectorizer."""

import numpy as np
import pytest

from catalog_backend.services.vectorizer import CHAR_HISTOGRAM, POSITIONAL_BIGRAM, Vectorizer


class TestCharHistogram:
    """One count per character at bin ord(c) % width."""

    def test_counts_scaled_by_peak(self):
        v = Vectorizer(width=256, scheme=CHAR_HISTOGRAM).vectorize("aab")
        assert v[97] == 1.0
        assert v[98] == 0.5
        assert v.sum() == 1.5

    def test_whitespace_not_counted(self):
        v = Vectorizer(width=256, scheme=CHAR_HISTOGRAM).vectorize("a b")
        assert v[32] == 0.0
        assert v[97] == 1.0 and v[98] == 1.0

    def test_wraps_on_width(self):
        v = Vectorizer(width=16, scheme=CHAR_HISTOGRAM).vectorize("a")
        assert v[97 % 16] == 1.0


class TestPositionalBigram:
    """Position-weighted unigram bins plus half-weight bigram bins."""

    def test_known_bins(self):
        v = Vectorizer(width=256, scheme=POSITIONAL_BIGRAM).vectorize("ab")
        # a@0 -> (97*31) % 256, pair ab -> (97*98) % 256, b@1 -> (98*31 + 7) % 256
        assert v[191] == 1.0
        assert v[229] == 1.0
        assert v[34] == 0.5
        assert np.count_nonzero(v) == 3

    def test_positions_reset_per_word(self):
        """Repeating a word doubles every bin; scaling cancels it out."""
        vec = Vectorizer(width=256, scheme=POSITIONAL_BIGRAM)
        assert np.array_equal(vec.vectorize("ab ab"), vec.vectorize("ab"))

    def test_word_order_matters_within_word(self):
        vec = Vectorizer(width=256, scheme=POSITIONAL_BIGRAM)
        assert not np.array_equal(vec.vectorize("ab"), vec.vectorize("ba"))


class TestVectorizerContract:
    """Properties shared by both schemes."""

    @pytest.mark.parametrize("scheme", [POSITIONAL_BIGRAM, CHAR_HISTOGRAM])
    def test_deterministic(self, scheme):
        vec = Vectorizer(scheme=scheme)
        text = "movie scifi  fantasy a crew lost between galaxies"
        assert np.array_equal(vec.vectorize(text), Vectorizer(scheme=scheme).vectorize(text))

    @pytest.mark.parametrize("scheme", [POSITIONAL_BIGRAM, CHAR_HISTOGRAM])
    def test_empty_text_is_zero_vector(self, scheme):
        v = Vectorizer(width=256, scheme=scheme).vectorize("")
        assert v.shape == (256,)
        assert not np.any(v)

    @pytest.mark.parametrize("scheme", [POSITIONAL_BIGRAM, CHAR_HISTOGRAM])
    def test_range_and_peak(self, scheme):
        v = Vectorizer(scheme=scheme).vectorize("kitchen wars chefs compete for a restaurant")
        assert v.min() >= 0.0
        assert v.max() == 1.0

    def test_schemes_differ(self):
        text = "quiet harbor"
        a = Vectorizer(scheme=POSITIONAL_BIGRAM).vectorize(text)
        b = Vectorizer(scheme=CHAR_HISTOGRAM).vectorize(text)
        assert not np.array_equal(a, b)

    def test_vectorize_many_stacks_rows(self):
        vec = Vectorizer(width=64)
        matrix = vec.vectorize_many(["one", "two", ""])
        assert matrix.shape == (3, 64)
        assert np.array_equal(matrix[1], vec.vectorize("two"))
        assert vec.vectorize_many([]).shape == (0, 64)

    def test_rejects_unknown_scheme(self):
        with pytest.raises(ValueError):
            Vectorizer(scheme="word2vec")

    def test_rejects_bad_width(self):
        with pytest.raises(ValueError):
            Vectorizer(width=0)
