"""Immutable SNP dataset record used throughout multi-resolution clustering.

A dataset bundles the sparse sites x samples matrix of non-reference calls
with the per-site consensus vector, the per-site prior matrix and an
optional cached hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse


def _readonly(values: Any) -> Any:
    """Return a read-only view of a numpy array (other objects unchanged)."""
    if isinstance(values, np.ndarray):
        view = values.view()
        view.flags.writeable = False
        return view
    return values


@dataclass(frozen=True)
class Dataset:
    """SNP data for a set of samples.

    Attributes
    ----------
    snp_matrix : scipy.sparse matrix
        Sites x samples matrix. Non-zero entries are allele state codes
        (1..A) of calls that differ from the consensus. Sparse input is
        copied to CSC, so later changes to the caller's matrix are not seen.
    consensus : np.ndarray
        Reference allele state code per site.
    prior : np.ndarray
        Dense (A, n_sites) pseudocount matrix.
    sample_ids : Tuple[str, ...]
        One identifier per matrix column.
    hierarchy : Any, optional
        Cached hierarchy (linkage matrix) for these exact samples.
    """

    snp_matrix: Any
    consensus: Any
    prior: Any
    sample_ids: Tuple[str, ...] = ()
    hierarchy: Optional[Any] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if sparse.issparse(self.snp_matrix):
            object.__setattr__(self, "snp_matrix", sparse.csc_matrix(self.snp_matrix, copy=True))
        object.__setattr__(self, "consensus", _readonly(self.consensus))
        object.__setattr__(self, "prior", _readonly(self.prior))
        sample_ids = () if self.sample_ids is None else tuple(self.sample_ids)
        if len(sample_ids) == 0 and sparse.issparse(self.snp_matrix):
            sample_ids = tuple(f"sample_{i}" for i in range(self.snp_matrix.shape[1]))
        object.__setattr__(self, "sample_ids", tuple(str(s) for s in sample_ids))

    @property
    def n_samples(self) -> int:
        return int(self.snp_matrix.shape[1])

    @property
    def n_sites(self) -> int:
        return int(self.snp_matrix.shape[0])

    @property
    def n_states(self) -> int:
        """Number of allele states described by the prior."""
        return int(np.shape(self.prior)[0])

    def subset(
        self,
        samples: Optional[Sequence[int]] = None,
        sites: Optional[Any] = None,
    ) -> "Dataset":
        """Return a new dataset restricted to samples (columns) and sites (rows).

        The cached hierarchy is always dropped since it no longer matches
        the restricted data.

        Parameters
        ----------
        samples : Sequence[int], optional
            Column positions to keep, in order. All columns if None.
        sites : array-like, optional
            Boolean mask or positions of sites to keep. All sites if None.
        """
        matrix = sparse.csc_matrix(self.snp_matrix)
        sample_ids = self.sample_ids
        if samples is not None:
            samples = np.asarray(samples, dtype=np.int64)
            matrix = matrix[:, samples]
            sample_ids = tuple(self.sample_ids[i] for i in samples)

        consensus = np.asarray(self.consensus)
        prior = np.asarray(self.prior)
        if sites is not None:
            sites = np.asarray(sites)
            matrix = matrix[sites, :]
            consensus = consensus[sites]
            prior = prior[:, sites]

        return Dataset(
            snp_matrix=matrix,
            consensus=consensus,
            prior=prior,
            sample_ids=sample_ids,
            hierarchy=None,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Dataset":
        """Build a dataset from a bundle mapping.

        Accepts both ``snp.matrix``/``hclust`` and ``snp_matrix``/``hierarchy``
        key spellings. Values are passed through unchecked; run
        ``validate_dataset`` before use.
        """
        matrix = data.get("snp_matrix", data.get("snp.matrix"))
        sample_ids = data.get("sample_ids", data.get("samples"))
        return cls(
            snp_matrix=matrix,
            consensus=data.get("consensus"),
            prior=data.get("prior"),
            sample_ids=() if sample_ids is None else tuple(sample_ids),
            hierarchy=data.get("hierarchy", data.get("hclust")),
        )

    @classmethod
    def from_binary(
        cls,
        indicator: Any,
        sample_ids: Optional[Sequence[str]] = None,
    ) -> "Dataset":
        """Build a two-state dataset from a 0/1 non-reference indicator matrix.

        Reference calls become state 1 (via the consensus), non-reference
        calls are coded as state 2, and the prior is a flat matrix of ones.
        """
        matrix = sparse.csc_matrix(indicator)
        coded = (matrix > 0).astype(np.int8) * 2
        n_sites = coded.shape[0]
        return cls(
            snp_matrix=sparse.csc_matrix(coded),
            consensus=np.ones(n_sites, dtype=np.int8),
            prior=np.ones((2, n_sites), dtype=np.float64),
            sample_ids=() if sample_ids is None else tuple(sample_ids),
        )

    def to_dict(self) -> dict:
        """Summarize the dataset (shape information only)."""
        return {
            "n_samples": self.n_samples,
            "n_sites": self.n_sites,
            "n_states": self.n_states,
            "nnz": int(self.snp_matrix.nnz),
            "has_hierarchy": self.hierarchy is not None,
        }
