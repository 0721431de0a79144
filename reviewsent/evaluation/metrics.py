#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Binary classification metrics from a single confusion matrix."""

import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Mapping, Sequence

import numpy as np
from sklearn.metrics import confusion_matrix

from reviewsent.utils.logging import get_logger

METRIC_NAMES = ("accuracy", "precision", "recall", "f1", "sensitivity", "specificity")


@dataclass(frozen=True)
class Metrics:
    accuracy: float
    precision: float
    recall: float
    f1: float
    sensitivity: float
    specificity: float
    confusion: List[List[int]]
    support: int

    def undefined(self) -> List[str]:
        """Names of metrics that came out as NaN."""
        return [name for name in METRIC_NAMES if math.isnan(getattr(self, name))]

    def to_dict(self) -> Dict:
        # JSON has no NaN; undefined metrics serialise as null
        out = asdict(self)
        for name in METRIC_NAMES:
            if math.isnan(out[name]):
                out[name] = None
        return out


def _ratio(num: float, den: float) -> float:
    return float(num) / float(den) if den else float("nan")


def evaluate_predictions(
    predicted: Sequence,
    actual: Sequence,
    positive_label: str = "positive",
    negative_label: str = "negative",
) -> Metrics:
    """
    Compare predicted against actual labels.

    The confusion matrix is laid out with rows = actual, columns = predicted,
    both ordered (negative, positive). Any metric whose denominator is zero is
    NaN, never 0.
    """
    y_pred = np.asarray(predicted, dtype=object)
    y_true = np.asarray(actual, dtype=object)
    if len(y_pred) != len(y_true):
        raise ValueError(f"Length mismatch: {len(y_pred)} predictions vs {len(y_true)} labels")
    if len(y_true) == 0:
        raise ValueError("Cannot evaluate an empty prediction set")
    domain = {positive_label, negative_label}
    stray = (set(y_pred) | set(y_true)) - domain
    if stray:
        raise ValueError(f"Labels outside {sorted(domain)}: {sorted(map(str, stray))}")

    cm = confusion_matrix(y_true, y_pred, labels=[negative_label, positive_label])
    tn, fp, fn, tp = (int(v) for v in cm.ravel())

    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)
    if math.isnan(precision) or math.isnan(recall):
        f1 = float("nan")
    else:
        f1 = _ratio(2 * precision * recall, precision + recall)

    metrics = Metrics(
        accuracy=_ratio(tp + tn, len(y_true)),
        precision=precision,
        recall=recall,
        f1=f1,
        sensitivity=recall,
        specificity=_ratio(tn, tn + fp),
        confusion=cm.tolist(),
        support=int(len(y_true)),
    )
    undefined = metrics.undefined()
    if undefined:
        get_logger().warning(f"Undefined metrics (zero denominator): {', '.join(undefined)}; confusion={cm.tolist()}")
    return metrics


def _fmt(value: float) -> str:
    return "NaN (undefined)" if math.isnan(value) else f"{value:.4f}"


def format_metrics_report(results: Mapping[str, Metrics], skipped: Sequence[str] = ()) -> str:
    """Format per-classifier metrics into a plain-text table."""
    lines = []
    lines.append("=" * 70)
    lines.append("EVALUATION METRICS REPORT")
    lines.append("=" * 70)
    header = f"{'Metric':<14}" + "".join(f"{name:>18}" for name in results)
    lines.append(header)
    lines.append("-" * 70)
    for metric in METRIC_NAMES:
        row = f"{metric:<14}" + "".join(f"{_fmt(getattr(m, metric)):>18}" for m in results.values())
        lines.append(row)
    lines.append("")
    for name, m in results.items():
        lines.append(f"{name}: confusion [[TN, FP], [FN, TP]] = {m.confusion} (n={m.support})")
    for name in skipped:
        lines.append(f"{name}: skipped")
    lines.append("=" * 70)
    return "\n".join(lines)
