from __future__ import annotations

import joblib
from dataclasses import dataclass
from typing import Any

import pandas as pd
from sklearn.svm import SVC


@dataclass
class SVMConfig:
    C: float = 1.0
    gamma: str = "scale"
    class_weight: Any = None
    seed: int = 42


class SVMClassifier:
    name = "svm"

    def __init__(self, cfg: SVMConfig):
        self.cfg = cfg
        # Default RBF kernel, no hyperparameter search.
        self.model = SVC(kernel="rbf", C=cfg.C, gamma=cfg.gamma, class_weight=cfg.class_weight,
                         random_state=cfg.seed)

    def fit(self, X, y):
        self.model.fit(X, y)
        return self

    def predict(self, X) -> pd.Categorical:
        return pd.Categorical(self.model.predict(X), categories=self.model.classes_)

    def save(self, path: str):
        joblib.dump(self.model, path)

    def load(self, path: str):
        self.model = joblib.load(path)
