"""BAPS-style partition oracle.

``fit`` seeds clusters by cutting an initial hierarchy, then merges the
pair of clusters with the largest gain in log marginal likelihood until a
single cluster remains, recording the partition score after every merge.
``extract`` replays the merges up to the best-scoring partition.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..multires.dataset import Dataset
from .config import BapsConfig
from .hierarchy import initial_partition
from .likelihood import allele_counts, log_marginal_likelihood


@dataclass
class BapsModel:
    """Fitted merge path for one dataset.

    Attributes
    ----------
    initial_labels : np.ndarray
        Initial cluster of every sample (0..k-1)
    merges : List[Tuple[int, int]]
        Merge sequence; (i, j) folds cluster j into cluster i
    scores : List[float]
        Partition log likelihood before any merge and after each merge
    method : str
        Hierarchy method used for the initial clusters
    """

    initial_labels: np.ndarray
    merges: List[Tuple[int, int]] = field(default_factory=list)
    scores: List[float] = field(default_factory=list)
    method: str = "ward"

    @property
    def best_step(self) -> int:
        """Number of merges giving the highest-scoring partition."""
        return int(np.argmax(self.scores))


class BapsOracle:
    """Default partition oracle.

    Parameters
    ----------
    config : BapsConfig, optional
        Oracle configuration. If None, uses defaults.
    logger : logging.Logger, optional
        Logger instance. If None, creates default logger.
    """

    def __init__(
        self,
        config: Optional[BapsConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or BapsConfig()
        self.logger = logger or logging.getLogger(__name__)

    def default_k(self, n_samples: int) -> int:
        return int(math.ceil(n_samples * self.config.default_k_fraction))

    def fit(
        self,
        dataset: Dataset,
        method: str,
        core_budget: int,
        k_init: Optional[int] = None,
        verbose: bool = False,
    ) -> BapsModel:
        """Fit the merge path for a dataset.

        Raises
        ------
        ValueError
            If the prior has non-positive pseudocounts
        """
        prior = np.asarray(dataset.prior, dtype=np.float64)
        if prior.size and prior.min() <= 0:
            raise ValueError("Prior pseudocounts must be positive")

        n_samples = dataset.n_samples
        k = k_init if k_init is not None else self.default_k(n_samples)
        k = max(1, min(int(k), n_samples))

        initial = initial_partition(
            dataset, method, k, gini_threshold=self.config.genie_gini_threshold
        )
        n_initial = int(initial.max()) + 1 if initial.size else 0
        if verbose:
            self.logger.info(
                "Initial %s hierarchy: %d samples -> %d clusters", method, n_samples, n_initial
            )

        counts = [allele_counts(dataset, np.flatnonzero(initial == c)) for c in range(n_initial)]
        scores = np.array([log_marginal_likelihood(c, prior) for c in counts])
        gains = self._pair_gains(counts, scores, prior, core_budget)
        active = np.ones(n_initial, dtype=bool)

        model = BapsModel(initial_labels=initial, method=method)
        model.scores.append(float(scores.sum()))

        for _ in range(n_initial - 1):
            i, j = np.unravel_index(np.argmax(gains), gains.shape)
            i, j = int(min(i, j)), int(max(i, j))

            counts[i] = counts[i] + counts[j]
            scores[i] = log_marginal_likelihood(counts[i], prior)
            active[j] = False
            gains[j, :] = -np.inf
            gains[:, j] = -np.inf
            for other in np.flatnonzero(active):
                if other == i:
                    continue
                gain = self._merge_gain(counts[i], counts[other], scores[i], scores[other], prior)
                a, b = min(i, other), max(i, other)
                gains[a, b] = gain

            model.merges.append((i, j))
            model.scores.append(float(scores[active].sum()))

        if verbose:
            self.logger.info(
                "Best partition after %d of %d merges (log likelihood %.3f)",
                model.best_step, len(model.merges), model.scores[model.best_step],
            )
        return model

    def extract(self, dataset: Dataset, model: BapsModel, verbose: bool = False) -> np.ndarray:
        """Return labels 1..k of the best partition, numbered by first member.

        Raises
        ------
        ValueError
            If the model was fitted on a different number of samples
        """
        if model.initial_labels.shape[0] != dataset.n_samples:
            raise ValueError(
                f"Model covers {model.initial_labels.shape[0]} samples, "
                f"dataset has {dataset.n_samples}"
            )
        labels = model.initial_labels.copy()
        for i, j in model.merges[: model.best_step]:
            labels[labels == j] = i

        _, first, inverse = np.unique(labels, return_index=True, return_inverse=True)
        rank = np.empty(first.size, dtype=np.int64)
        rank[np.argsort(first, kind="stable")] = np.arange(1, first.size + 1)
        best = rank[inverse.reshape(-1)]
        if verbose:
            self.logger.info("Extracted %d clusters", first.size)
        return best

    @staticmethod
    def _merge_gain(counts_a, counts_b, score_a, score_b, prior) -> float:
        return log_marginal_likelihood(counts_a + counts_b, prior) - score_a - score_b

    def _pair_gains(self, counts, scores, prior, core_budget: int) -> np.ndarray:
        """Upper-triangular matrix of merge gains (-inf elsewhere)."""
        n = len(counts)
        gains = np.full((n, n), -np.inf)

        def row(i: int) -> List[float]:
            return [
                self._merge_gain(counts[i], counts[j], scores[i], scores[j], prior)
                for j in range(i + 1, n)
            ]

        if core_budget > 1 and n > 2:
            from joblib import Parallel, delayed

            rows = Parallel(n_jobs=core_budget, backend="threading")(
                delayed(row)(i) for i in range(n)
            )
        else:
            rows = [row(i) for i in range(n)]

        for i, values in enumerate(rows):
            gains[i, i + 1:] = values
        return gains
