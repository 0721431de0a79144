# Metrics computation module
from .metrics import (
    METRIC_NAMES,
    Metrics,
    evaluate_predictions,
    format_metrics_report,
)

__all__ = [
    "METRIC_NAMES",
    "Metrics",
    "evaluate_predictions",
    "format_metrics_report",
]
