"""
Per-group processing for one refinement level.

Groups within a level are independent, so this module:
1. Splits the previous labeling into groups and prepares a work item per
   group (size bypass and informative-site reduction happen here)
2. Runs the partition oracle for each refinable group, optionally across
   joblib workers
3. Returns outcomes in ascending group order for reconciliation
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .dataset import Dataset
from .labels import GroupOutcome, GroupStatus, check_sub_labels
from .oracle import OracleError, PartitionOracle
from .subset import subset_group

# Groups of this size or smaller are never split.
MAX_BYPASS_SIZE = 4


@dataclass
class GroupWorkItem:
    """Everything a worker needs to process one group.

    ``status`` is already set for bypassed and uninformative groups; it is
    None for groups that go to the oracle, which then carry ``dataset``.
    """

    level: int
    group_index: int
    members: np.ndarray
    status: Optional[GroupStatus] = None
    dataset: Optional[Dataset] = None
    n_informative_sites: int = 0
    k_init: Optional[int] = None

    @property
    def size(self) -> int:
        return int(self.members.size)


def split_groups(labels: np.ndarray) -> List[np.ndarray]:
    """Sample positions per distinct label, in ascending label order."""
    labels = np.asarray(labels)
    return [np.flatnonzero(labels == value) for value in np.unique(labels)]


def extract_work_items(
    dataset: Dataset,
    prev_labels: np.ndarray,
    level: int,
    k_init: Optional[int] = None,
    verbose: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[GroupWorkItem]:
    """Prepare one work item per group of the previous labeling.

    Parameters
    ----------
    dataset : Dataset
        Full input dataset
    prev_labels : np.ndarray
        Labeling from the previous level
    level : int
        Level being computed (1-based)
    k_init : int, optional
        Cluster count hint, forwarded only at level 1
    verbose : bool
        Log degenerate groups at INFO instead of DEBUG
    logger : logging.Logger, optional
        Logger for notices

    Returns
    -------
    List[GroupWorkItem]
        Work items in ascending group order
    """
    _logger = logger or logging.getLogger(__name__)
    notice = _logger.info if verbose else _logger.debug
    hint = k_init if level == 1 else None
    work_items = []

    for group_index, members in enumerate(split_groups(prev_labels), start=1):
        item = GroupWorkItem(
            level=level,
            group_index=group_index,
            members=members,
            k_init=hint,
        )

        if item.size <= MAX_BYPASS_SIZE:
            item.status = GroupStatus.BYPASSED
            notice(
                "Level %d group %d has %d samples (<= %d), kept unsplit",
                level, group_index, item.size, MAX_BYPASS_SIZE,
            )
            work_items.append(item)
            continue

        reduced = subset_group(dataset, members)
        item.n_informative_sites = reduced.n_informative_sites
        if not reduced.is_informative:
            item.status = GroupStatus.UNINFORMATIVE
            notice(
                "Level %d group %d (%d samples) has %d informative sites, kept unsplit",
                level, group_index, item.size, item.n_informative_sites,
            )
        else:
            item.dataset = reduced.dataset
            _logger.debug(
                "Created work item for level %d group %d (%d samples, %d sites)",
                level, group_index, item.size, item.n_informative_sites,
            )
        work_items.append(item)

    return work_items


def worker_refine_group(
    work_item: GroupWorkItem,
    oracle: PartitionOracle,
    method: str,
    core_budget: int,
    verbose: bool = False,
) -> GroupOutcome:
    """Process a single group, calling the oracle when the group is refinable.

    Raises
    ------
    OracleError
        If fitting or extraction fails, or the oracle returns malformed labels
    """
    start_time = time.time()

    if work_item.status is not None:
        return GroupOutcome(
            group_index=work_item.group_index,
            members=work_item.members,
            status=work_item.status,
            n_informative_sites=work_item.n_informative_sites,
            timing_seconds=time.time() - start_time,
        )

    def fail(cause: str) -> OracleError:
        return OracleError(
            level=work_item.level,
            group_index=work_item.group_index,
            group_size=work_item.size,
            cause=cause,
        )

    try:
        if work_item.k_init is not None:
            model = oracle.fit(
                work_item.dataset, method, core_budget,
                k_init=work_item.k_init, verbose=verbose,
            )
        else:
            model = oracle.fit(work_item.dataset, method, core_budget, verbose=verbose)
        raw_labels = oracle.extract(work_item.dataset, model, verbose=verbose)
    except Exception as e:
        raise fail(f"{type(e).__name__}: {e}") from e

    try:
        sub_labels = check_sub_labels(raw_labels, work_item.size)
    except ValueError as e:
        raise fail(f"invalid partition: {e}") from e

    return GroupOutcome(
        group_index=work_item.group_index,
        members=work_item.members,
        status=GroupStatus.REFINED,
        sub_labels=sub_labels,
        n_informative_sites=work_item.n_informative_sites,
        timing_seconds=time.time() - start_time,
    )


def run_groups_parallel(
    work_items: List[GroupWorkItem],
    oracle: PartitionOracle,
    method: str,
    core_budget: int = 1,
    verbose: bool = False,
    n_workers: int = 1,
    backend: str = "loky",
    logger: Optional[logging.Logger] = None,
) -> List[GroupOutcome]:
    """Process all groups of a level and return outcomes in group order.

    Parameters
    ----------
    work_items : List[GroupWorkItem]
        Work items from extract_work_items
    oracle : PartitionOracle
        Partition oracle (must be picklable for process backends)
    method : str
        Hierarchy method forwarded to the oracle
    core_budget : int
        Cores forwarded to each oracle call
    verbose : bool
        Forwarded to the oracle
    n_workers : int
        Number of concurrent workers (1 = sequential)
    backend : str
        joblib backend for n_workers > 1
    logger : logging.Logger, optional
        Logger for progress tracking

    Returns
    -------
    List[GroupOutcome]
        One outcome per work item, same order
    """
    _logger = logger or logging.getLogger(__name__)
    pending = sum(1 for item in work_items if item.status is None)

    start_time = time.time()
    if n_workers == 1 or pending <= 1:
        results = [
            worker_refine_group(item, oracle, method, core_budget, verbose)
            for item in work_items
        ]
    else:
        from joblib import Parallel, delayed

        _logger.info(
            "Processing %d refinable groups with %d workers (%s)",
            pending, n_workers, backend,
        )
        results = Parallel(n_jobs=n_workers, backend=backend)(
            delayed(worker_refine_group)(item, oracle, method, core_budget, verbose)
            for item in work_items
        )

    _logger.debug(
        "Processed %d groups in %.2f seconds", len(work_items), time.time() - start_time
    )
    return list(results)
