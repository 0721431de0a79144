from __future__ import annotations

import joblib
from dataclasses import dataclass
from typing import Sequence

import pandas as pd
from sklearn.naive_bayes import MultinomialNB


@dataclass
class NaiveBayesConfig:
    alpha: float = 1.0


class NaiveBayesClassifier:
    name = "naive_bayes"

    def __init__(self, cfg: NaiveBayesConfig):
        self.cfg = cfg
        self.model = MultinomialNB(alpha=cfg.alpha)

    def fit(self, X, y):
        self.model.fit(X, y)
        return self

    def predict(self, X) -> pd.Categorical:
        return pd.Categorical(self.model.predict(X), categories=self.model.classes_)

    def feature_table(self, terms: Sequence[str], term: str) -> pd.Series:
        """Per-class conditional log-probability of ``term``."""
        j = list(terms).index(term)
        return pd.Series(self.model.feature_log_prob_[:, j], index=self.model.classes_, name=term)

    def save(self, path: str):
        joblib.dump(self.model, path)

    def load(self, path: str):
        self.model = joblib.load(path)
