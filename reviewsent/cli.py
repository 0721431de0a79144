#!/usr/bin/env python
import argparse
import sys
from dataclasses import fields
from typing import List, Optional

from reviewsent.evaluation.metrics import format_metrics_report
from reviewsent.training.pipeline import run_pipeline
from reviewsent.utils.config import (
    CLASSIFIER_NAMES,
    FEATURE_STRATEGIES,
    PipelineConfig,
    apply_config,
    config_from_namespace,
    load_experiment_config,
)
from reviewsent.utils.errors import DataIntegrityError, InputFormatError
from reviewsent.utils.logging import get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Review sentiment case study: profile, featurize, classify")
    parser.add_argument("--config", type=str, help="Optional config file (YAML/JSON)")
    parser.add_argument("--data", dest="data_path", type=str, help="Pipe-delimited review file")
    parser.add_argument("--text_col", type=str)
    parser.add_argument("--label_col", type=str)
    parser.add_argument("--aux_col", type=str)
    parser.add_argument("--strategy", dest="feature_strategy", choices=FEATURE_STRATEGIES)
    parser.add_argument("--sample_fraction", type=float)
    parser.add_argument("--seed", type=int, help="Shorthand for sample, split and model seeds")
    parser.add_argument("--ngram_min", type=int)
    parser.add_argument("--ngram_max", type=int)
    parser.add_argument("--max_sparsity", type=float)
    parser.add_argument("--train_ratio", type=float)
    parser.add_argument("--top_k", type=int)
    parser.add_argument("--polarity_threshold", type=int)
    parser.add_argument("--classifiers", type=str, help=f"Comma-separated subset of {','.join(CLASSIFIER_NAMES)}")
    parser.add_argument("--enable_knn", action="store_true", default=None)
    parser.add_argument("--knn_folds", type=int)
    parser.add_argument("--knn_repeats", type=int)
    parser.add_argument("--output_dir", type=str)
    # Remaining PipelineConfig fields are reachable through --config
    parser.set_defaults(**{field.name: None for field in fields(PipelineConfig)})
    return parser


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse ``argv`` on top of the optional config file; flags given on the command line win."""
    parser = build_parser()
    known, _ = parser.parse_known_args(argv)
    namespace = None
    if known.config:
        namespace = parser.parse_args([])
        apply_config(namespace, load_experiment_config(known.config))
    args = parser.parse_args(argv, namespace=namespace)

    if not args.data_path:
        parser.error("--data must be provided via CLI or config file")
    if args.seed is not None:
        args.sample_seed = args.split_seed = args.model_seed = args.seed
    if isinstance(args.classifiers, str):
        args.classifiers = tuple(c.strip() for c in args.classifiers.split(",") if c.strip())
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_cli_args(argv)
    logger = get_logger()
    try:
        cfg = config_from_namespace(args)
        result = run_pipeline(cfg)
    except (InputFormatError, DataIntegrityError) as exc:
        logger.error(str(exc))
        return 2

    print(format_metrics_report(result.metrics, result.skipped))
    return 0


if __name__ == "__main__":
    sys.exit(main())
