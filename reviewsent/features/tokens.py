"""Token streams and descriptive statistics over a labeled corpus.

Everything here works on ``TokenRecord`` rows, one per (document, token)
occurrence. Streams are lazy and restartable, so a profile can walk the corpus
several times without materialising every token at once.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator, List, NamedTuple, Tuple

import numpy as np
import pandas as pd

_TOKEN_RE = re.compile(r"[a-z0-9]+(?:'[a-z]+)?")


class TokenRecord(NamedTuple):
    doc_id: int
    label: str
    token: str


def tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall(text.lower())


def ngrams(tokens: List[str], n: int) -> Iterator[str]:
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    for i in range(len(tokens) - n + 1):
        yield " ".join(tokens[i:i + n])


class TokenStream:
    """Iterable of TokenRecords over ``corpus``; every ``iter()`` starts from the first document."""

    def __init__(self, corpus: pd.DataFrame, n: int = 1):
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        self.corpus = corpus
        self.n = n

    def __iter__(self) -> Iterator[TokenRecord]:
        for doc_id, label, text in zip(self.corpus["doc_id"], self.corpus["label"], self.corpus["text"]):
            for token in ngrams(tokenize(text), self.n):
                yield TokenRecord(int(doc_id), label, token)


def term_frequencies(records: Iterable[TokenRecord]) -> pd.DataFrame:
    counts = Counter(rec.token for rec in records)
    freq = pd.DataFrame(list(counts.items()), columns=["token", "count"])
    return freq.sort_values(["count", "token"], ascending=[False, True], ignore_index=True)


def top_terms(freq: pd.DataFrame, k: int = 10) -> pd.DataFrame:
    return freq.head(k).reset_index(drop=True)


def bottom_terms(freq: pd.DataFrame, k: int = 10) -> pd.DataFrame:
    return freq.tail(k).iloc[::-1].reset_index(drop=True)


def polarity_table(
    records: Iterable[TokenRecord],
    positive_label: str = "positive",
    negative_label: str = "negative",
) -> pd.DataFrame:
    """Per-token positive/negative counts and ``log2(positive / negative)``.

    A token seen on only one side gets a count of 0 on the other, which makes
    ``log_ratio`` +inf or -inf. Those values are kept as-is.
    """
    positive: Counter = Counter()
    negative: Counter = Counter()
    for rec in records:
        if rec.label == positive_label:
            positive[rec.token] += 1
        elif rec.label == negative_label:
            negative[rec.token] += 1

    tokens = sorted(set(positive) | set(negative))
    table = pd.DataFrame({
        "token": tokens,
        "positive": np.array([positive.get(t, 0) for t in tokens], dtype=np.int64),
        "negative": np.array([negative.get(t, 0) for t in tokens], dtype=np.int64),
    })
    table["total"] = table["positive"] + table["negative"]
    with np.errstate(divide="ignore", invalid="ignore"):
        table["log_ratio"] = np.log2(table["positive"].to_numpy(dtype=float) / table["negative"].to_numpy(dtype=float))
    return table


def _rank(group: pd.DataFrame, k: int) -> pd.DataFrame:
    ranked = group.assign(_abs=group["log_ratio"].abs())
    ranked = ranked.sort_values(["_abs", "total", "token"], ascending=[False, False, True])
    return ranked.drop(columns="_abs").head(k).reset_index(drop=True)


def top_polarizing(table: pd.DataFrame, threshold: int = 50, k: int = 10) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Top-``k`` positive-skewed and negative-skewed tokens among those with ``total > threshold``."""
    eligible = table[table["total"] > threshold]
    eligible = eligible[eligible["log_ratio"].notna()]
    return (
        _rank(eligible[eligible["log_ratio"] > 0], k),
        _rank(eligible[eligible["log_ratio"] < 0], k),
    )


@dataclass(frozen=True)
class CorpusProfile:
    unigrams: pd.DataFrame
    ngrams: pd.DataFrame
    polarity: pd.DataFrame
    top_positive: pd.DataFrame
    top_negative: pd.DataFrame


def profile_corpus(
    corpus: pd.DataFrame,
    positive_label: str = "positive",
    negative_label: str = "negative",
    report_ngram: int = 2,
    threshold: int = 50,
    k: int = 10,
) -> CorpusProfile:
    unigram_stream = TokenStream(corpus, n=1)
    polarity = polarity_table(unigram_stream, positive_label, negative_label)
    top_pos, top_neg = top_polarizing(polarity, threshold=threshold, k=k)
    return CorpusProfile(
        unigrams=term_frequencies(unigram_stream),
        ngrams=term_frequencies(TokenStream(corpus, n=report_ngram)),
        polarity=polarity,
        top_positive=top_pos,
        top_negative=top_neg,
    )
