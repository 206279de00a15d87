"""Dirichlet-multinomial marginal likelihood of sample clusters.

Each site of each cluster is scored independently: with allele counts
``n_s`` over states ``s`` and prior pseudocounts ``a_s``,

    log p = lgamma(sum a) - lgamma(sum a + sum n)
            + sum_s [lgamma(a_s + n_s) - lgamma(a_s)]
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from scipy import sparse
from scipy.special import gammaln

from ..multires.dataset import Dataset


def allele_counts(dataset: Dataset, members: Optional[Sequence[int]] = None) -> np.ndarray:
    """Count allele states per site among the given samples.

    Non-zero matrix entries are state codes 1..A. Every other member is
    counted in the consensus state of the site. Codes outside 1..A (for
    example gaps) are not counted.

    Parameters
    ----------
    dataset : Dataset
        Source dataset
    members : Sequence[int], optional
        Sample positions; all samples if None

    Returns
    -------
    np.ndarray
        (A, n_sites) count matrix
    """
    matrix = sparse.csc_matrix(dataset.snp_matrix)
    if members is not None:
        matrix = matrix[:, np.asarray(members, dtype=np.int64)]
    n_members = matrix.shape[1]
    n_states = dataset.n_states

    coo = matrix.tocoo()
    codes = coo.data
    valid = (codes >= 1) & (codes <= n_states) & (np.mod(codes, 1) == 0)
    counts = np.zeros((n_states, matrix.shape[0]), dtype=np.float64)
    np.add.at(counts, (codes[valid].astype(np.int64) - 1, coo.row[valid]), 1.0)

    non_ref = np.asarray((matrix > 0).sum(axis=1)).ravel()
    consensus = np.asarray(dataset.consensus)
    ref_sites = np.flatnonzero((consensus >= 1) & (consensus <= n_states))
    counts[consensus[ref_sites].astype(np.int64) - 1, ref_sites] += (
        n_members - non_ref[ref_sites]
    )
    return counts


def log_marginal_likelihood(counts: np.ndarray, prior: np.ndarray) -> float:
    """Log marginal likelihood of one cluster summed over sites."""
    prior = np.asarray(prior, dtype=np.float64)
    alpha0 = prior.sum(axis=0)
    total = counts.sum(axis=0)
    per_site = gammaln(alpha0) - gammaln(alpha0 + total)
    per_state = gammaln(prior + counts) - gammaln(prior)
    return float(per_site.sum() + per_state.sum())


def partition_log_likelihood(dataset: Dataset, labels: np.ndarray) -> float:
    """Total log marginal likelihood of a partition of all samples."""
    labels = np.asarray(labels)
    return sum(
        log_marginal_likelihood(
            allele_counts(dataset, np.flatnonzero(labels == value)), dataset.prior
        )
        for value in np.unique(labels)
    )
