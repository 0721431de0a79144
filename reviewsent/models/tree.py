from __future__ import annotations

import joblib
from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd
from sklearn.tree import DecisionTreeClassifier, export_text


@dataclass
class TreeConfig:
    max_depth: Optional[int] = None
    min_samples_leaf: int = 1
    seed: int = 42


class TreeClassifier:
    name = "tree"

    def __init__(self, cfg: TreeConfig):
        self.cfg = cfg
        self.model = DecisionTreeClassifier(
            max_depth=cfg.max_depth,
            min_samples_leaf=cfg.min_samples_leaf,
            random_state=cfg.seed,
        )

    def fit(self, X, y):
        self.model.fit(X, y)
        return self

    def predict(self, X) -> pd.Categorical:
        return pd.Categorical(self.model.predict(X), categories=self.model.classes_)

    def describe(self, terms: Optional[Sequence[str]] = None) -> str:
        """Text rendering of the fitted splits."""
        names = list(terms) if terms is not None else None
        return export_text(self.model, feature_names=names)

    def save(self, path: str):
        joblib.dump(self.model, path)

    def load(self, path: str):
        self.model = joblib.load(path)
