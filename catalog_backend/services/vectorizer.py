# Bag-of-characters vectorizer: normalized text -> fixed-width feature vector
from typing import List, Sequence

import numpy as np

POSITIONAL_BIGRAM = "positional_bigram"
CHAR_HISTOGRAM = "char_histogram"


class Vectorizer:
    """
    Deterministic character hashing into `width` bins.

    Schemes (pick one per deployment, the two are not interchangeable):
    - char_histogram: bin ord(c) % width += 1 for every character of every word
    - positional_bigram: for char c at position i of a word,
      bin (c*31 + i*7) % width += 1, and with a following char n,
      bin (c*n + i) % width += 0.5

    The accumulated counts are divided by the largest bin (floor of 1).
    """

    def __init__(self, width: int = 256, scheme: str = POSITIONAL_BIGRAM):
        if width < 1:
            raise ValueError(f"Vector width must be positive, got {width}")
        if scheme not in (POSITIONAL_BIGRAM, CHAR_HISTOGRAM):
            raise ValueError(f"Unknown vectorizer scheme: {scheme}")
        self.width = width
        self.scheme = scheme

    def vectorize(self, normalized_text: str) -> np.ndarray:
        vector = np.zeros(self.width, dtype=np.float64)
        words = [w for w in normalized_text.split() if w]

        for word in words:
            if self.scheme == CHAR_HISTOGRAM:
                for ch in word:
                    vector[ord(ch) % self.width] += 1.0
            else:
                self._accumulate_positional(vector, word)

        peak = vector.max() if vector.size else 0.0
        return vector / max(peak, 1.0)

    def vectorize_many(self, normalized_texts: Sequence[str]) -> np.ndarray:
        """Stack vectors for several texts into a (n, width) matrix"""
        if not normalized_texts:
            return np.zeros((0, self.width), dtype=np.float64)
        return np.vstack([self.vectorize(text) for text in normalized_texts])

    def _accumulate_positional(self, vector: np.ndarray, word: str) -> None:
        codes: List[int] = [ord(ch) for ch in word]
        last = len(codes) - 1
        for i, code in enumerate(codes):
            vector[(code * 31 + i * 7) % self.width] += 1.0
            if i < last:
                vector[(code * codes[i + 1] + i) % self.width] += 0.5
