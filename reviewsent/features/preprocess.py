from __future__ import annotations

import re
import string
from typing import FrozenSet, Iterable, List

from nltk.stem.snowball import SnowballStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS
from tqdm import tqdm

_DIGITS_RE = re.compile(r"\d+")
_SPACES_RE = re.compile(r"\s+")
_PUNCT_TABLE = str.maketrans("", "", string.punctuation)

_stemmer = SnowballStemmer("english")


def build_stopwords(noise_tokens: Iterable[str] = ("br",)) -> FrozenSet[str]:
    return frozenset(ENGLISH_STOP_WORDS) | frozenset(t.lower() for t in noise_tokens)


def stem(token: str) -> str:
    return _stemmer.stem(token)


def preprocess_text(text: str, stopwords: FrozenSet[str]) -> str:
    """
    Normalise a review for the full feature path:
    1. Lowercase
    2. Remove digits
    3. Remove punctuation
    4. Drop stopwords and noise tokens
    5. Stem what remains
    6. Collapse whitespace
    """
    if not isinstance(text, str):
        return ""
    text = text.lower()
    text = _DIGITS_RE.sub("", text)
    text = text.translate(_PUNCT_TABLE)
    tokens = [stem(tok) for tok in text.split() if tok not in stopwords]
    return _SPACES_RE.sub(" ", " ".join(tokens)).strip()


def preprocess_texts(texts: Iterable[str], stopwords: FrozenSet[str], show_progress: bool = False) -> List[str]:
    return [preprocess_text(t, stopwords) for t in tqdm(texts, desc="Preprocessing", disable=not show_progress)]
