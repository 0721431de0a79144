from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

FEATURE_STRATEGIES = ("tidy", "full")
CLASSIFIER_NAMES = ("tree", "naive_bayes", "svm", "knn")


@dataclass
class PipelineConfig:
    data_path: str
    text_col: str = "review"
    label_col: str = "sentiment"
    aux_col: str = "id"
    sep: str = "|"
    positive_label: str = "positive"
    negative_label: str = "negative"
    # Loader
    sample_fraction: float = 0.1
    sample_seed: int = 42
    # Profiler
    top_k: int = 10
    polarity_threshold: int = 50
    report_ngram: int = 2
    # Features
    feature_strategy: str = "full"
    ngram_min: int = 1
    ngram_max: int = 3
    max_sparsity: float = 0.994
    noise_tokens: Tuple[str, ...] = ("br",)
    # Split
    train_ratio: float = 0.75
    split_seed: int = 42
    # Models
    classifiers: Tuple[str, ...] = CLASSIFIER_NAMES
    model_seed: int = 42
    svm_C: float = 1.0
    nb_alpha: float = 1.0
    enable_knn: bool = False
    knn_folds: int = 10
    knn_repeats: int = 3
    knn_neighbors: Tuple[int, ...] = (5, 7, 9)
    output_dir: Optional[str] = None

    def __post_init__(self):
        self.noise_tokens = tuple(self.noise_tokens)
        self.classifiers = tuple(self.classifiers)
        self.knn_neighbors = tuple(int(k) for k in self.knn_neighbors)

        if not 0.0 < self.sample_fraction <= 1.0:
            raise ValueError(f"sample_fraction must be in (0, 1], got {self.sample_fraction}")
        if not 0.0 < self.train_ratio < 1.0:
            raise ValueError(f"train_ratio must be in (0, 1), got {self.train_ratio}")
        if not 0.0 <= self.max_sparsity <= 1.0:
            raise ValueError(f"max_sparsity must be in [0, 1], got {self.max_sparsity}")
        if self.feature_strategy not in FEATURE_STRATEGIES:
            raise ValueError(f"feature_strategy must be one of {FEATURE_STRATEGIES}, got {self.feature_strategy!r}")
        if not 1 <= self.ngram_min <= self.ngram_max:
            raise ValueError(f"Invalid n-gram range ({self.ngram_min}, {self.ngram_max})")
        unknown = [name for name in self.classifiers if name not in CLASSIFIER_NAMES]
        if unknown:
            raise ValueError(f"Unknown classifiers {unknown}; choose from {CLASSIFIER_NAMES}")
        if self.knn_folds < 2:
            raise ValueError("knn_folds must be at least 2")
        if self.top_k < 1 or self.report_ngram < 1:
            raise ValueError("top_k and report_ngram must be positive")

    @property
    def ngram_range(self) -> Tuple[int, int]:
        return (self.ngram_min, self.ngram_max)


def load_experiment_config(path: str) -> dict[str, Any]:
    """Load a YAML or JSON config file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in {".yml", ".yaml"}:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return data or {}


def apply_config(namespace: argparse.Namespace, config: Mapping[str, Any]) -> None:
    """Inject config values into the argparse namespace (supports nested dicts)."""

    def _walk(key: str, value: Any):
        if isinstance(value, Mapping):
            for sub_key, sub_val in value.items():
                _walk(sub_key, sub_val)
        elif hasattr(namespace, key):
            setattr(namespace, key, value)

    for top_key, top_val in config.items():
        _walk(top_key, top_val)


def config_from_namespace(namespace: argparse.Namespace) -> PipelineConfig:
    """Build a PipelineConfig from every namespace attribute that names a field and is set."""
    values = {}
    for field in fields(PipelineConfig):
        value = getattr(namespace, field.name, None)
        if value is not None:
            values[field.name] = value
    return PipelineConfig(**values)
