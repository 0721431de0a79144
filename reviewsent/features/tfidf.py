from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix
from sklearn.feature_extraction.text import TfidfVectorizer

from reviewsent.features.matrix import FeatureMatrix
from reviewsent.features.preprocess import build_stopwords, preprocess_texts
from reviewsent.utils.errors import DataIntegrityError
from reviewsent.utils.logging import get_logger


@dataclass
class TfidfConfig:
    ngram_range: Tuple[int, int] = (1, 3)
    max_sparsity: float = 0.994
    noise_tokens: Tuple[str, ...] = ("br",)
    show_progress: bool = False


def prune_sparse_terms(
    matrix: csr_matrix,
    terms: Sequence[str],
    max_sparsity: float,
) -> Tuple[csr_matrix, Tuple[str, ...], np.ndarray]:
    """Drop every column whose fraction of empty cells exceeds ``max_sparsity``.

    Returns the pruned matrix, the surviving terms and their column indices in
    the input. ``max_sparsity=1`` keeps everything; ``0`` keeps only terms that
    occur in every document.
    """
    if not 0.0 <= max_sparsity <= 1.0:
        raise ValueError(f"max_sparsity must be in [0, 1], got {max_sparsity}")
    n_docs = matrix.shape[0]
    if n_docs == 0:
        raise DataIntegrityError("Cannot prune an empty document-term matrix")
    doc_freq = np.asarray((matrix > 0).sum(axis=0)).ravel()
    sparsity = 1.0 - doc_freq / n_docs
    keep = np.flatnonzero(sparsity <= max_sparsity)
    if keep.size == 0:
        raise DataIntegrityError(
            f"No terms left after pruning at sparsity {max_sparsity} ({len(terms)} terms, {n_docs} documents)"
        )
    return matrix[:, keep].tocsr(), tuple(terms[i] for i in keep), keep


class TfidfFeaturizer:
    """Full path: normalise + stem, n-gram TF-IDF without length normalisation, sparsity pruning."""

    def __init__(self, cfg: TfidfConfig):
        self.cfg = cfg
        self.stopwords = build_stopwords(cfg.noise_tokens)
        self.vectorizer = TfidfVectorizer(
            ngram_range=cfg.ngram_range,
            lowercase=False,
            token_pattern=r"(?u)\b\w+\b",
            norm=None,
        )
        self.kept_columns: Optional[np.ndarray] = None
        self.terms: Tuple[str, ...] = ()

    def _texts(self, corpus: pd.DataFrame):
        return preprocess_texts(corpus["text"], self.stopwords, show_progress=self.cfg.show_progress)

    def fit_transform(self, corpus: pd.DataFrame) -> FeatureMatrix:
        logger = get_logger()
        try:
            X = self.vectorizer.fit_transform(self._texts(corpus))
        except ValueError as exc:
            # sklearn raises ValueError("empty vocabulary ...") when nothing survives preprocessing
            raise DataIntegrityError(f"Could not build a vocabulary: {exc}") from exc
        all_terms = self.vectorizer.get_feature_names_out()
        X, self.terms, self.kept_columns = prune_sparse_terms(X.tocsr(), all_terms, self.cfg.max_sparsity)
        features = FeatureMatrix(matrix=X, doc_ids=corpus["doc_id"].to_numpy(), terms=self.terms)
        logger.info(
            f"TF-IDF vocabulary: {len(all_terms)} terms, {features.n_terms} kept at "
            f"max_sparsity={self.cfg.max_sparsity} (matrix sparsity {features.sparsity:.2%})"
        )
        return features

    def transform(self, corpus: pd.DataFrame) -> FeatureMatrix:
        if self.kept_columns is None:
            raise RuntimeError("TfidfFeaturizer must be fitted before transform")
        X = self.vectorizer.transform(self._texts(corpus))
        return FeatureMatrix(
            matrix=X[:, self.kept_columns].tocsr(),
            doc_ids=corpus["doc_id"].to_numpy(),
            terms=self.terms,
        )
