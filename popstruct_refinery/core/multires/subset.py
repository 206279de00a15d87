"""Reduce a dataset to one group's samples and informative sites."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import sparse

from .dataset import Dataset

# A group needs at least this many informative sites to be re-clustered.
MIN_INFORMATIVE_SITES = 2


def informative_sites(dataset: Dataset, samples: Sequence[int]) -> np.ndarray:
    """Boolean site mask of sites that vary within the given samples.

    A site is informative when its count of non-reference calls among the
    samples is strictly between 0 and the number of samples.

    Parameters
    ----------
    dataset : Dataset
        Source dataset
    samples : Sequence[int]
        Column positions of the group (non-empty)

    Returns
    -------
    np.ndarray
        Boolean mask over sites
    """
    samples = np.asarray(samples, dtype=np.int64)
    if samples.size == 0:
        raise ValueError("Cannot subset an empty group")

    group = sparse.csc_matrix(dataset.snp_matrix)[:, samples]
    non_ref = np.asarray((group > 0).sum(axis=1)).ravel()
    return (non_ref > 0) & (non_ref < samples.size)


@dataclass
class GroupSubset:
    """Outcome of reducing a dataset to one group.

    Attributes
    ----------
    dataset : Dataset, optional
        Reduced dataset, or None when the group is uninformative
    n_informative_sites : int
        Number of sites that vary within the group
    """

    dataset: Optional[Dataset]
    n_informative_sites: int

    @property
    def is_informative(self) -> bool:
        return self.dataset is not None


def subset_group(dataset: Dataset, samples: Sequence[int]) -> GroupSubset:
    """Restrict a dataset to a group, keeping only informative sites.

    Parameters
    ----------
    dataset : Dataset
        Source dataset
    samples : Sequence[int]
        Column positions of the group (non-empty)

    Returns
    -------
    GroupSubset
        Reduced dataset (hierarchy discarded) and informative site count.
        The dataset is None when fewer than MIN_INFORMATIVE_SITES sites are
        informative; such groups must not be sent to the oracle.
    """
    keep = informative_sites(dataset, samples)
    n_informative = int(keep.sum())
    if n_informative < MIN_INFORMATIVE_SITES:
        return GroupSubset(dataset=None, n_informative_sites=n_informative)
    return GroupSubset(
        dataset=dataset.subset(samples=samples, sites=keep),
        n_informative_sites=n_informative,
    )
