from __future__ import annotations

from reviewsent.models.knn import KNNClassifier, KNNConfig
from reviewsent.models.naive_bayes import NaiveBayesClassifier, NaiveBayesConfig
from reviewsent.models.svm import SVMClassifier, SVMConfig
from reviewsent.models.tree import TreeClassifier, TreeConfig


def build_classifier(name: str, cfg):
    """Instantiate the classifier called ``name`` from a PipelineConfig."""
    if name == "tree":
        return TreeClassifier(TreeConfig(seed=cfg.model_seed))
    if name == "naive_bayes":
        return NaiveBayesClassifier(NaiveBayesConfig(alpha=cfg.nb_alpha))
    if name == "svm":
        return SVMClassifier(SVMConfig(C=cfg.svm_C, seed=cfg.model_seed))
    if name == "knn":
        return KNNClassifier(KNNConfig(
            neighbors=cfg.knn_neighbors,
            folds=cfg.knn_folds,
            repeats=cfg.knn_repeats,
            seed=cfg.model_seed,
        ))
    raise ValueError(f"Unsupported classifier: {name}")
