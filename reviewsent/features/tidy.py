from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer

from reviewsent.features.matrix import FeatureMatrix
from reviewsent.features.tokens import TokenStream, polarity_table, tokenize, top_polarizing
from reviewsent.utils.errors import DataIntegrityError
from reviewsent.utils.logging import get_logger


@dataclass
class TidyConfig:
    positive_label: str = "positive"
    negative_label: str = "negative"
    threshold: int = 50
    top_k: int = 10


class TidyFeaturizer:
    """Per-document counts of the most polarizing unigrams of the fitted corpus."""

    def __init__(self, cfg: TidyConfig, polarizing: Optional[Tuple[pd.DataFrame, pd.DataFrame]] = None):
        self.cfg = cfg
        # (top_positive, top_negative) already ranked by the profiler; computed on fit when absent
        self.polarizing = polarizing
        self.vectorizer: CountVectorizer | None = None
        self.terms: Tuple[str, ...] = ()

    def fit_transform(self, corpus: pd.DataFrame) -> FeatureMatrix:
        if self.polarizing is not None:
            top_pos, top_neg = self.polarizing
        else:
            table = polarity_table(TokenStream(corpus), self.cfg.positive_label, self.cfg.negative_label)
            top_pos, top_neg = top_polarizing(table, threshold=self.cfg.threshold, k=self.cfg.top_k)
        vocabulary = sorted(set(top_pos["token"]) | set(top_neg["token"]))
        if not vocabulary:
            raise DataIntegrityError(
                f"No token occurs more than {self.cfg.threshold} times with a sentiment skew; tidy vocabulary is empty"
            )
        self.vectorizer = CountVectorizer(analyzer=tokenize, vocabulary=vocabulary)
        self.terms = tuple(vocabulary)
        get_logger().info(f"Tidy vocabulary: {len(self.terms)} polarizing terms")
        return self.transform(corpus)

    def transform(self, corpus: pd.DataFrame) -> FeatureMatrix:
        if self.vectorizer is None:
            raise RuntimeError("TidyFeaturizer must be fitted before transform")
        X = self.vectorizer.transform(corpus["text"]).astype(np.float64).tocsr()
        return FeatureMatrix(matrix=X, doc_ids=corpus["doc_id"].to_numpy(), terms=self.terms)
