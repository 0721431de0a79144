import numpy as np
import pandas as pd
import pytest

TOY_DOCS = [
    ("great acting great story", "positive"),
    ("wonderful film loved it", "positive"),
    ("terrible waste boring plot", "negative"),
    ("awful acting bad story", "negative"),
]

POSITIVE_WORDS = ["great", "wonderful", "loved", "brilliant", "superb"]
NEGATIVE_WORDS = ["terrible", "awful", "boring", "waste", "dull"]
SHARED_WORDS = ["acting", "story", "film", "plot", "cast"]


def write_reviews(path, rows, header=("id", "review", "sentiment"), sep="|"):
    lines = [sep.join(header)]
    for aux_id, text, label in rows:
        lines.append(sep.join([str(aux_id), text, label]))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def synthetic_rows(n_per_class=20):
    rows = []
    for i in range(n_per_class):
        p = POSITIVE_WORDS
        n = NEGATIVE_WORDS
        s = SHARED_WORDS
        rows.append((i // 3, f"{p[i % 5]} {s[i % 5]} and {p[(i + 2) % 5]} {s[(i + 3) % 5]}", "positive"))
        rows.append((i // 3, f"{n[i % 5]} {s[(i + 1) % 5]} with {n[(i + 2) % 5]} {s[(i + 4) % 5]}", "negative"))
    return rows


@pytest.fixture
def toy_corpus():
    return pd.DataFrame({
        "doc_id": np.arange(1, len(TOY_DOCS) + 1),
        "text": [text for text, _ in TOY_DOCS],
        "label": [label for _, label in TOY_DOCS],
        "aux_id": ["a", "a", "b", "c"],
    })


@pytest.fixture
def toy_file(tmp_path):
    rows = [(i, text, label) for i, (text, label) in enumerate(TOY_DOCS)]
    return write_reviews(tmp_path / "toy.txt", rows)


@pytest.fixture
def synthetic_file(tmp_path):
    return write_reviews(tmp_path / "reviews.txt", synthetic_rows())
