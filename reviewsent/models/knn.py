from __future__ import annotations

import joblib
from dataclasses import dataclass
from typing import Tuple

import pandas as pd
from sklearn.model_selection import GridSearchCV, RepeatedStratifiedKFold
from sklearn.neighbors import KNeighborsClassifier

from reviewsent.utils.logging import get_logger


@dataclass
class KNNConfig:
    neighbors: Tuple[int, ...] = (5, 7, 9)
    folds: int = 10
    repeats: int = 3
    seed: int = 42


class KNNClassifier:
    """k-NN with ``n_neighbors`` chosen by repeated stratified k-fold search. Slow on large matrices."""

    name = "knn"

    def __init__(self, cfg: KNNConfig):
        self.cfg = cfg
        cv = RepeatedStratifiedKFold(n_splits=cfg.folds, n_repeats=cfg.repeats, random_state=cfg.seed)
        self.model = GridSearchCV(
            KNeighborsClassifier(),
            param_grid={"n_neighbors": list(cfg.neighbors)},
            cv=cv,
            scoring="accuracy",
        )

    @property
    def best_params_(self) -> dict:
        return self.model.best_params_

    def fit(self, X, y):
        self.model.fit(X, y)
        get_logger().info(
            f"k-NN search: best {self.model.best_params_} "
            f"(cv accuracy {self.model.best_score_:.4f}, {self.cfg.folds} folds x {self.cfg.repeats})"
        )
        return self

    def predict(self, X) -> pd.Categorical:
        return pd.Categorical(self.model.predict(X), categories=self.model.classes_)

    def save(self, path: str):
        joblib.dump(self.model, path)

    def load(self, path: str):
        self.model = joblib.load(path)
