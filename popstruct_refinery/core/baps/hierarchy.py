"""Initial hierarchy over samples used to seed Bayesian merging."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from scipy import sparse
from scipy.cluster.hierarchy import fcluster, linkage
from scipy.spatial.distance import pdist, squareform

from ..multires.dataset import Dataset

logger = logging.getLogger(__name__)


def mismatch_distances(dataset: Dataset) -> np.ndarray:
    """Condensed pairwise count of sites where two samples carry different calls."""
    calls = sparse.csc_matrix(dataset.snp_matrix).T.toarray()
    if calls.shape[1] == 0:
        return np.zeros(calls.shape[0] * (calls.shape[0] - 1) // 2)
    return pdist(calls, metric="hamming") * calls.shape[1]


def _first_seen_order(labels: np.ndarray) -> np.ndarray:
    """Relabel to 0..k-1 in order of first occurrence."""
    _, first, inverse = np.unique(labels, return_index=True, return_inverse=True)
    rank = np.empty(first.size, dtype=np.int64)
    rank[np.argsort(first, kind="stable")] = np.arange(first.size)
    return rank[inverse.reshape(-1)]


def _cached_linkage(dataset: Dataset) -> Optional[np.ndarray]:
    hierarchy = dataset.hierarchy
    if hierarchy is None:
        return None
    hierarchy = np.asarray(hierarchy, dtype=np.float64)
    if hierarchy.shape != (dataset.n_samples - 1, 4):
        logger.warning(
            "Ignoring cached hierarchy with shape %s for %d samples",
            hierarchy.shape, dataset.n_samples,
        )
        return None
    return hierarchy


def initial_partition(
    dataset: Dataset,
    method: str,
    n_clusters: int,
    gini_threshold: float = 0.3,
) -> np.ndarray:
    """Cut an initial hierarchy into at most n_clusters clusters.

    Parameters
    ----------
    dataset : Dataset
        Reduced dataset for one group
    method : str
        'ward' (scipy linkage, reusing a cached hierarchy) or 'genie'
        (genieclust)
    n_clusters : int
        Requested number of clusters
    gini_threshold : float
        Genie Gini index threshold

    Returns
    -------
    np.ndarray
        Labels 0..k-1 in order of first occurrence
    """
    n_samples = dataset.n_samples
    if n_clusters >= n_samples:
        return np.arange(n_samples, dtype=np.int64)
    if n_clusters <= 1:
        return np.zeros(n_samples, dtype=np.int64)

    if method == "ward":
        Z = _cached_linkage(dataset)
        if Z is None:
            Z = linkage(mismatch_distances(dataset), method="ward")
        labels = fcluster(Z, n_clusters, criterion="maxclust")
    elif method == "genie":
        try:
            import genieclust
        except ImportError:
            raise RuntimeError(
                "The genie method requires genieclust. Install with: pip install genieclust"
            )
        distances = squareform(mismatch_distances(dataset))
        model = genieclust.Genie(
            n_clusters=n_clusters,
            gini_threshold=gini_threshold,
            affinity="precomputed",
        )
        labels = model.fit_predict(distances)
    else:
        raise ValueError(f"Unsupported hierarchy method: {method}")

    return _first_seen_order(np.asarray(labels))
