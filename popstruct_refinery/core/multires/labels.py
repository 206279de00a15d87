"""Combine per-group sub-labels into dense, collision-free level labels.

Each group ``p`` (1-based, ascending previous-label order) owns the raw
code range ``[2*n*p, 2*n*p + n]``. Sub-labels ``s`` from the oracle lie in
``1..g`` with ``g <= n``, so codes ``2*n*p + s`` never collide across groups
and unsplit groups use ``2*n*p`` itself. Compaction then ranks the distinct
raw codes, which keeps the numeric order of groups and sub-labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

import numpy as np


class GroupStatus(Enum):
    """How a group was handled at a level."""

    BYPASSED = "bypassed"
    UNINFORMATIVE = "uninformative"
    REFINED = "refined"


@dataclass
class GroupOutcome:
    """Result of processing one group.

    Attributes
    ----------
    group_index : int
        1-based position in ascending previous-label order
    members : np.ndarray
        Sample positions (0-based) belonging to the group
    status : GroupStatus
        Bypass, uninformative or oracle-refined
    sub_labels : np.ndarray, optional
        Oracle sub-labels (1..k_sub), aligned with members; REFINED only
    n_informative_sites : int
        Informative sites found for the group (0 when bypassed)
    timing_seconds : float
        Wall time spent on the group
    """

    group_index: int
    members: np.ndarray
    status: GroupStatus
    sub_labels: Optional[np.ndarray] = None
    n_informative_sites: int = 0
    timing_seconds: float = 0.0

    @property
    def n_subgroups(self) -> int:
        if self.status is GroupStatus.REFINED and self.sub_labels is not None:
            return int(np.unique(self.sub_labels).size)
        return 1


def check_sub_labels(sub_labels, group_size: int) -> np.ndarray:
    """Validate oracle output for a group and return it as int64.

    Raises
    ------
    ValueError
        If labels are not one integer in 1..group_size per member
    """
    labels = np.asarray(sub_labels)
    if labels.ndim != 1 or labels.shape[0] != group_size:
        raise ValueError(
            f"expected {group_size} sub-labels, got shape {labels.shape}"
        )
    if not np.issubdtype(labels.dtype, np.number):
        raise ValueError(f"sub-labels must be numeric, got dtype {labels.dtype}")
    if not np.all(np.isfinite(labels)) or not np.all(np.equal(np.mod(labels, 1), 0)):
        raise ValueError("sub-labels must be integers")
    labels = labels.astype(np.int64)
    if labels.min() < 1 or labels.max() > group_size:
        raise ValueError(
            f"sub-labels must lie in 1..{group_size}, "
            f"got range {labels.min()}..{labels.max()}"
        )
    return labels


def group_offset(group_index: int, n_samples: int) -> int:
    """Base raw code of a group."""
    return 2 * n_samples * group_index


def encode_raw_codes(outcomes: Iterable[GroupOutcome], n_samples: int) -> np.ndarray:
    """Write every group's raw codes into one vector over all samples.

    Raises
    ------
    RuntimeError
        If a sample is covered by no group or by more than one group
    """
    raw = np.zeros(n_samples, dtype=np.int64)
    written = np.zeros(n_samples, dtype=np.int64)

    for outcome in outcomes:
        base = group_offset(outcome.group_index, n_samples)
        if outcome.status is GroupStatus.REFINED:
            raw[outcome.members] = base + outcome.sub_labels
        else:
            raw[outcome.members] = base
        np.add.at(written, outcome.members, 1)

    if np.any(written != 1):
        missing = int(np.sum(written == 0))
        overlapping = int(np.sum(written > 1))
        raise RuntimeError(
            f"Groups do not partition the samples: {missing} uncovered, "
            f"{overlapping} covered more than once"
        )
    return raw


def compact_labels(raw_codes: np.ndarray) -> np.ndarray:
    """Map distinct raw codes to dense ranks 1..k.

    Distinct values are sorted ascending and each sample receives the rank
    of its code, so the mapping is stable and deterministic.
    """
    _, inverse = np.unique(np.asarray(raw_codes), return_inverse=True)
    return inverse.reshape(-1).astype(np.int64) + 1


def reconcile(outcomes: List[GroupOutcome], n_samples: int) -> np.ndarray:
    """Encode group outcomes and compact them into a level labeling."""
    return compact_labels(encode_raw_codes(outcomes, n_samples))


def is_refinement(coarse: np.ndarray, fine: np.ndarray) -> bool:
    """True when every fine label lies within a single coarse label."""
    pairs = np.unique(np.column_stack([np.asarray(fine), np.asarray(coarse)]), axis=0)
    return np.unique(pairs[:, 0]).size == pairs.shape[0]
