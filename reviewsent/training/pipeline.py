from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import joblib
import pandas as pd

from reviewsent.data.datasets import LabeledSplit, load_reviews, split_features, subsample
from reviewsent.evaluation.metrics import Metrics, evaluate_predictions, format_metrics_report
from reviewsent.features.matrix import FeatureMatrix, build_featurizer
from reviewsent.features.tokens import CorpusProfile, bottom_terms, profile_corpus, top_terms
from reviewsent.models.registry import build_classifier
from reviewsent.utils.config import PipelineConfig
from reviewsent.utils.logging import get_logger


@dataclass(frozen=True)
class PipelineResult:
    corpus: pd.DataFrame
    profile: CorpusProfile
    features: FeatureMatrix
    split: LabeledSplit
    metrics: Dict[str, Metrics]
    predictions: Dict[str, pd.Categorical]
    skipped: Tuple[str, ...]
    featurizer: Any = None


def _log_profile(profile: CorpusProfile, k: int, report_ngram: int):
    logger = get_logger()
    logger.info(f"Top {k} unigrams: {top_terms(profile.unigrams, k)[['token', 'count']].values.tolist()}")
    logger.info(f"Bottom {k} unigrams: {bottom_terms(profile.unigrams, k)[['token', 'count']].values.tolist()}")
    logger.info(f"Top {k} {report_ngram}-grams: {top_terms(profile.ngrams, k)[['token', 'count']].values.tolist()}")
    for side, frame in (("positive", profile.top_positive), ("negative", profile.top_negative)):
        pairs = [(tok, round(float(lr), 3)) for tok, lr in zip(frame["token"], frame["log_ratio"])]
        logger.info(f"Most {side} terms (log2 ratio): {pairs}")


def load_corpus(cfg: PipelineConfig) -> pd.DataFrame:
    corpus = load_reviews(
        cfg.data_path,
        text_col=cfg.text_col,
        label_col=cfg.label_col,
        aux_col=cfg.aux_col,
        sep=cfg.sep,
        allowed_labels=(cfg.positive_label, cfg.negative_label),
    )
    if cfg.sample_fraction < 1.0:
        corpus = subsample(corpus, cfg.sample_fraction, cfg.sample_seed)
    return corpus


def fit_and_evaluate(split: LabeledSplit, cfg: PipelineConfig):
    """Fit every configured classifier on ``split`` and score its own predictions."""
    logger = get_logger()
    models, metrics, predictions, skipped = {}, {}, {}, []
    for name in cfg.classifiers:
        if name == "knn" and not cfg.enable_knn:
            logger.info("Skipping k-NN (enable_knn is off; cross-validated search is expensive)")
            skipped.append(name)
            continue
        logger.info(f"Fitting {name} on {split.X_train.shape[0]} rows x {split.X_train.shape[1]} terms")
        clf = build_classifier(name, cfg)
        clf.fit(split.X_train, split.y_train)
        preds = clf.predict(split.X_test)
        result = evaluate_predictions(preds, split.y_test, cfg.positive_label, cfg.negative_label)
        logger.info(f"{name}: accuracy={result.accuracy:.4f} f1={result.f1:.4f}")
        models[name] = clf
        metrics[name] = result
        predictions[name] = preds
    return models, metrics, predictions, tuple(skipped)


def save_artifacts(output_dir: str, featurizer, models: Dict[str, Any], metrics: Dict[str, Metrics], report: str):
    logger = get_logger()
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    joblib.dump(featurizer, str(out / "featurizer.joblib"))
    for name, clf in models.items():
        clf.save(str(out / f"{name}_model.joblib"))
    with open(out / "metrics.json", "w", encoding="utf-8") as f:
        json.dump({name: m.to_dict() for name, m in metrics.items()}, f, indent=2)
    with open(out / "report.txt", "w", encoding="utf-8") as f:
        f.write(report + "\n")
    logger.info(f"Artifacts saved to {out}")


def run_pipeline(cfg: PipelineConfig) -> PipelineResult:
    logger = get_logger()
    corpus = load_corpus(cfg)

    profile = profile_corpus(
        corpus,
        positive_label=cfg.positive_label,
        negative_label=cfg.negative_label,
        report_ngram=cfg.report_ngram,
        threshold=cfg.polarity_threshold,
        k=cfg.top_k,
    )
    _log_profile(profile, cfg.top_k, cfg.report_ngram)

    logger.info(f"Building features with strategy={cfg.feature_strategy}")
    featurizer = build_featurizer(cfg, profile)
    features = featurizer.fit_transform(corpus)

    split = split_features(features, corpus[["doc_id", "label"]], cfg.train_ratio, cfg.split_seed)
    models, metrics, predictions, skipped = fit_and_evaluate(split, cfg)

    report = format_metrics_report(metrics, skipped)
    if cfg.output_dir:
        save_artifacts(cfg.output_dir, featurizer, models, metrics, report)

    return PipelineResult(
        corpus=corpus,
        profile=profile,
        features=features,
        split=split,
        metrics=metrics,
        predictions=predictions,
        skipped=skipped,
        featurizer=featurizer,
    )
