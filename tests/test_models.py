import numpy as np
import pandas as pd
import pytest
from scipy.sparse import csr_matrix

from reviewsent.models.knn import KNNClassifier, KNNConfig
from reviewsent.models.naive_bayes import NaiveBayesClassifier, NaiveBayesConfig
from reviewsent.models.registry import build_classifier
from reviewsent.models.svm import SVMClassifier, SVMConfig
from reviewsent.models.tree import TreeClassifier, TreeConfig
from reviewsent.utils.config import PipelineConfig

TERMS = ("good", "bad", "film")


@pytest.fixture
def separable():
    rows, labels = [], []
    for i in range(10):
        rows.append([2.0 + i % 3, 0.0, 1.0])
        labels.append("positive")
        rows.append([0.0, 2.0 + i % 3, 1.0])
        labels.append("negative")
    X = csr_matrix(np.array(rows))
    y = pd.Series(pd.Categorical(labels))
    X_test = csr_matrix(np.array([[3.0, 0.0, 1.0], [0.0, 3.0, 1.0]]))
    return X, y, X_test


@pytest.mark.parametrize("clf", [
    TreeClassifier(TreeConfig(seed=1)),
    NaiveBayesClassifier(NaiveBayesConfig()),
    SVMClassifier(SVMConfig(seed=1)),
    KNNClassifier(KNNConfig(neighbors=(1, 3), folds=2, repeats=1, seed=1)),
])
def test_classifiers_share_fit_predict(clf, separable):
    X, y, X_test = separable
    preds = clf.fit(X, y).predict(X_test)
    assert isinstance(preds, pd.Categorical)
    assert set(preds.categories) == {"positive", "negative"}
    assert list(preds) == ["positive", "negative"]


def test_tree_is_reproducible_and_inspectable(separable):
    X, y, X_test = separable
    a = TreeClassifier(TreeConfig(seed=5)).fit(X, y)
    b = TreeClassifier(TreeConfig(seed=5)).fit(X, y)
    assert list(a.predict(X)) == list(b.predict(X))
    assert "good" in a.describe(TERMS) or "bad" in a.describe(TERMS)


def test_naive_bayes_feature_table(separable):
    X, y, _ = separable
    nb = NaiveBayesClassifier(NaiveBayesConfig(alpha=1.0)).fit(X, y)
    table = nb.feature_table(TERMS, "good")
    assert table["positive"] > table["negative"]


def test_knn_reports_best_params(separable):
    X, y, _ = separable
    knn = KNNClassifier(KNNConfig(neighbors=(1, 3), folds=2, repeats=2, seed=0)).fit(X, y)
    assert knn.best_params_["n_neighbors"] in (1, 3)


def test_save_and_load_roundtrip(separable, tmp_path):
    X, y, X_test = separable
    clf = TreeClassifier(TreeConfig()).fit(X, y)
    path = str(tmp_path / "tree.joblib")
    clf.save(path)
    restored = TreeClassifier(TreeConfig())
    restored.load(path)
    assert list(restored.predict(X_test)) == list(clf.predict(X_test))


def test_registry():
    cfg = PipelineConfig(data_path="x", model_seed=9, knn_folds=4)
    assert isinstance(build_classifier("tree", cfg), TreeClassifier)
    assert isinstance(build_classifier("naive_bayes", cfg), NaiveBayesClassifier)
    assert isinstance(build_classifier("svm", cfg), SVMClassifier)
    knn = build_classifier("knn", cfg)
    assert knn.cfg.folds == 4 and knn.cfg.seed == 9
    with pytest.raises(ValueError):
        build_classifier("forest", cfg)
