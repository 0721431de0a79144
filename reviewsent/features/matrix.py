from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.sparse import csr_matrix


@dataclass(frozen=True)
class FeatureMatrix:
    """Documents x terms. Row ``i`` belongs to ``doc_ids[i]``; column ``j`` is ``terms[j]``."""

    matrix: csr_matrix
    doc_ids: np.ndarray
    terms: Tuple[str, ...]

    @property
    def n_docs(self) -> int:
        return self.matrix.shape[0]

    @property
    def n_terms(self) -> int:
        return self.matrix.shape[1]

    @property
    def sparsity(self) -> float:
        cells = self.n_docs * self.n_terms
        return 1.0 - self.matrix.nnz / cells if cells else 1.0

    def column(self, term: str) -> np.ndarray:
        """Dense weights of ``term`` across all documents."""
        try:
            j = self.terms.index(term)
        except ValueError:
            raise KeyError(f"Term not in vocabulary: {term!r}") from None
        return self.matrix[:, j].toarray().ravel()


def build_featurizer(cfg, profile=None):
    """Return the feature-building strategy named by ``cfg.feature_strategy``.

    A CorpusProfile built with the same threshold and top-k hands its polarizing
    groups to the tidy strategy so the corpus is not scanned again.
    """
    from reviewsent.features.tfidf import TfidfConfig, TfidfFeaturizer
    from reviewsent.features.tidy import TidyConfig, TidyFeaturizer

    if cfg.feature_strategy == "full":
        return TfidfFeaturizer(TfidfConfig(
            ngram_range=cfg.ngram_range,
            max_sparsity=cfg.max_sparsity,
            noise_tokens=cfg.noise_tokens,
        ))
    if cfg.feature_strategy == "tidy":
        return TidyFeaturizer(TidyConfig(
            positive_label=cfg.positive_label,
            negative_label=cfg.negative_label,
            threshold=cfg.polarity_threshold,
            top_k=cfg.top_k,
        ), polarizing=(profile.top_positive, profile.top_negative) if profile is not None else None)
    raise ValueError(f"Unsupported feature strategy: {cfg.feature_strategy}")
