from __future__ import annotations

import csv
import random
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix

from reviewsent.features.matrix import FeatureMatrix
from reviewsent.utils.errors import DataIntegrityError, InputFormatError
from reviewsent.utils.logging import get_logger

# Typographic symbols that NFKD would otherwise drop or mangle.
ASCII_REPLACEMENTS = {
    "’": "'",
    "‘": "'",
    "´": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "…": "...",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "\u00a0": " ",
    "«": '"',
    "»": '"',
}
_REPLACE_RE = re.compile("|".join(re.escape(k) for k in ASCII_REPLACEMENTS))
_ESCAPED_NEWLINE_RE = re.compile(r"(\\r)?\\n|<br\s*/?>", flags=re.IGNORECASE)


def clean_text(text: str) -> str:
    """Return an ASCII-only version of ``text``.

    Literal ``\\n`` sequences and ``<br />`` remnants become spaces, a fixed set
    of typographic punctuation and currency symbols is mapped to ASCII, and
    whatever is left is transliterated through NFKD with non-ASCII code points
    dropped.
    """
    if not isinstance(text, str):
        return ""
    text = _ESCAPED_NEWLINE_RE.sub(" ", text)
    text = _REPLACE_RE.sub(lambda m: ASCII_REPLACEMENTS[m.group(0)], text)
    text = unicodedata.normalize("NFKD", text)
    return text.encode("ascii", "ignore").decode("ascii")


def load_reviews(
    path: str,
    text_col: str = "review",
    label_col: str = "sentiment",
    aux_col: str = "id",
    sep: str = "|",
    allowed_labels: Sequence[str] = ("positive", "negative"),
) -> pd.DataFrame:
    """Read a delimited review file into a corpus frame with a sequential ``doc_id``."""
    logger = get_logger()
    data_path = Path(path)
    if not data_path.exists():
        raise FileNotFoundError(f"Dataset not found: {data_path}")

    try:
        raw = pd.read_csv(data_path, sep=sep, quoting=csv.QUOTE_NONE, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise InputFormatError(f"Could not parse {data_path} with delimiter {sep!r}: {exc}") from exc

    missing = [col for col in (text_col, label_col, aux_col) if col not in raw.columns]
    if missing:
        raise InputFormatError(
            f"{data_path} is missing column(s) {missing}; found {list(raw.columns)} "
            f"(check the delimiter, expected {sep!r})"
        )

    labels = raw[label_col].str.strip()
    bad = ~labels.isin(allowed_labels)
    if bad.any():
        rows = (np.flatnonzero(bad.to_numpy()) + 1).tolist()[:10]
        raise DataIntegrityError(
            f"{int(bad.sum())} row(s) have no valid label (expected one of {list(allowed_labels)}); first rows: {rows}"
        )

    corpus = pd.DataFrame({
        "doc_id": np.arange(1, len(raw) + 1),
        "text": raw[text_col].map(clean_text),
        "label": labels,
        "aux_id": raw[aux_col],
    })
    logger.info(f"Loaded {len(corpus)} documents from {data_path}")
    return corpus


def subsample(corpus: pd.DataFrame, fraction: float, seed: int = 42) -> pd.DataFrame:
    """Seeded random subset of ``round(len(corpus) * fraction)`` rows, kept in ``doc_id`` order."""
    if not 0.0 < fraction <= 1.0:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")
    sample = corpus.sample(frac=fraction, random_state=seed)
    sample = sample.sort_values("doc_id").reset_index(drop=True)
    get_logger().info(f"Subsampled {len(sample)}/{len(corpus)} documents (fraction={fraction}, seed={seed})")
    return sample


@dataclass(frozen=True)
class LabeledSplit:
    X_train: csr_matrix
    y_train: pd.Series
    X_test: csr_matrix
    y_test: pd.Series
    train_ids: np.ndarray
    test_ids: np.ndarray
    terms: tuple


def _labels_or_fail(doc_ids: np.ndarray, labels: pd.DataFrame) -> np.ndarray:
    if labels["doc_id"].duplicated().any():
        dupes = labels.loc[labels["doc_id"].duplicated(), "doc_id"].tolist()[:10]
        raise DataIntegrityError(f"Documents labeled more than once: {dupes}")
    joined = pd.DataFrame({"doc_id": doc_ids}).merge(labels[["doc_id", "label"]], on="doc_id", how="left")
    unlabeled = joined["label"].isna()
    if unlabeled.any():
        ids = joined.loc[unlabeled, "doc_id"].tolist()[:10]
        raise DataIntegrityError(f"{int(unlabeled.sum())} document(s) have no label, e.g. doc_id {ids}")
    return joined["label"].to_numpy()


def split_features(
    features: FeatureMatrix,
    labels: pd.DataFrame,
    train_ratio: float = 0.75,
    seed: int = 42,
) -> LabeledSplit:
    """Join labels onto feature rows by ``doc_id`` and partition the rows into train/test."""
    if not 0.0 < train_ratio < 1.0:
        raise ValueError(f"train_ratio must be in (0, 1), got {train_ratio}")
    y = _labels_or_fail(features.doc_ids, labels)

    n = features.n_docs
    rng = random.Random(seed)
    indices = list(range(n))
    rng.shuffle(indices)
    n_train = int(n * train_ratio)
    train_idx = np.sort(np.array(indices[:n_train], dtype=int))
    test_idx = np.sort(np.array(indices[n_train:], dtype=int))
    if n_train == 0 or n_train == n:
        raise DataIntegrityError(
            f"Split of {n} documents at train_ratio={train_ratio} (seed={seed}) leaves "
            f"{n_train} training and {n - n_train} test rows"
        )
    train_classes = sorted(set(y[train_idx]))
    if len(train_classes) < 2:
        raise DataIntegrityError(
            f"Training partition holds only {train_classes} (seed={seed}, train_ratio={train_ratio}); "
            f"classifiers need both labels"
        )

    split = LabeledSplit(
        X_train=features.matrix[train_idx],
        y_train=pd.Series(pd.Categorical(y[train_idx]), name="label"),
        X_test=features.matrix[test_idx],
        y_test=pd.Series(pd.Categorical(y[test_idx]), name="label"),
        train_ids=features.doc_ids[train_idx],
        test_ids=features.doc_ids[test_idx],
        terms=features.terms,
    )
    get_logger().info(f"Train={len(train_idx)}, Test={len(test_idx)} (ratio={train_ratio}, seed={seed})")
    return split
