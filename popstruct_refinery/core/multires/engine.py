"""Multi-resolution partition engine.

Clusters samples level by level: every group of the previous level is
re-clustered independently on its own informative sites, and the per-group
sub-labels are reconciled into a dense labeling for the new level.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .config import MultiResConfig, RunConfig
from .dataset import Dataset
from .labels import GroupOutcome, GroupStatus, reconcile
from .oracle import PartitionOracle
from .output import assemble_output
from .parallel import extract_work_items, run_groups_parallel
from .validation import validate_dataset, validate_parameters


@dataclass
class LevelSummary:
    """Bookkeeping for one computed level.

    Attributes
    ----------
    level : int
        Level number (1-based)
    n_groups : int
        Groups inherited from the previous level
    n_bypassed : int
        Groups kept unsplit because of their size
    n_uninformative : int
        Groups kept unsplit for lack of informative sites
    n_refined : int
        Groups sent to the partition oracle
    n_clusters : int
        Distinct labels at this level
    max_subgroups : int
        Most sub-clusters produced from a single group
    oracle_seconds : float
        Time spent inside oracle calls, summed over groups
    seconds : float
        Wall time for the level
    """

    level: int
    n_groups: int = 0
    n_bypassed: int = 0
    n_uninformative: int = 0
    n_refined: int = 0
    n_clusters: int = 0
    max_subgroups: int = 0
    oracle_seconds: float = 0.0
    seconds: float = 0.0

    @classmethod
    def from_outcomes(
        cls, level: int, outcomes: List[GroupOutcome], labels: np.ndarray, seconds: float
    ) -> "LevelSummary":
        statuses = [o.status for o in outcomes]
        return cls(
            level=level,
            n_groups=len(outcomes),
            n_bypassed=statuses.count(GroupStatus.BYPASSED),
            n_uninformative=statuses.count(GroupStatus.UNINFORMATIVE),
            n_refined=statuses.count(GroupStatus.REFINED),
            n_clusters=int(np.unique(labels).size),
            max_subgroups=max((o.n_subgroups for o in outcomes), default=0),
            oracle_seconds=sum(
                o.timing_seconds for o in outcomes if o.status is GroupStatus.REFINED
            ),
            seconds=seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "n_groups": self.n_groups,
            "n_bypassed": self.n_bypassed,
            "n_uninformative": self.n_uninformative,
            "n_refined": self.n_refined,
            "n_clusters": self.n_clusters,
            "max_subgroups": self.max_subgroups,
            "oracle_seconds": round(float(self.oracle_seconds), 3),
            "seconds": round(self.seconds, 3),
        }


@dataclass
class MultiResResult:
    """Result from a multi-resolution run.

    Attributes
    ----------
    table : pd.DataFrame
        Identifier column plus one label column per level
    level_labels : List[np.ndarray]
        Dense labelings for levels 1..L
    summaries : List[LevelSummary]
        Per-level bookkeeping
    """

    table: pd.DataFrame
    level_labels: List[np.ndarray] = field(default_factory=list)
    summaries: List[LevelSummary] = field(default_factory=list)

    @property
    def n_levels(self) -> int:
        return len(self.level_labels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_samples": int(self.table.shape[0]),
            "n_levels": self.n_levels,
            "levels": [s.to_dict() for s in self.summaries],
        }


class MultiResEngine:
    """Level-by-level hierarchical refinement of sample clusters.

    Parameters
    ----------
    config : RunConfig, optional
        Run configuration. If None, uses defaults.
    oracle : PartitionOracle, optional
        Partition oracle. If None, a BapsOracle is built from ``config.baps``.
    logger : logging.Logger, optional
        Logger instance. If None, creates default logger.

    Example
    -------
    >>> from popstruct_refinery.core.multires import MultiResEngine, RunConfig
    >>> engine = MultiResEngine(RunConfig())
    >>> result = engine.run(dataset)
    >>> result.table.head()
    """

    def __init__(
        self,
        config: Optional[RunConfig] = None,
        oracle: Optional[PartitionOracle] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or RunConfig()
        self.logger = logger or logging.getLogger(__name__)
        if oracle is None:
            from ..baps import BapsOracle

            oracle = BapsOracle(self.config.baps)
        self.oracle = oracle

    def validate(self, dataset: Any) -> Dataset:
        """Validate inputs and return the dataset record.

        Raises
        ------
        InputValidationError
            If the dataset or any run parameter is invalid
        """
        cfg = self.config.multires
        if isinstance(dataset, Mapping):
            dataset = Dataset.from_mapping(dataset)

        result = validate_dataset(dataset).merge(
            validate_parameters(
                levels=cfg.levels,
                method=cfg.method,
                core_budget=cfg.core_budget,
                k_init=cfg.k_init,
                n_workers=cfg.n_workers,
            )
        )
        result.raise_if_invalid("multi-resolution clustering")
        result.log_warnings(self.logger)
        return dataset

    def run_level(
        self,
        dataset: Dataset,
        prev_labels: np.ndarray,
        level: int,
    ) -> Tuple[np.ndarray, LevelSummary]:
        """Compute one level from the previous labeling.

        Returns
        -------
        Tuple[np.ndarray, LevelSummary]
            Dense labels for the level and its summary
        """
        cfg: MultiResConfig = self.config.multires
        start_time = time.time()

        work_items = extract_work_items(
            dataset,
            prev_labels,
            level,
            k_init=cfg.k_init,
            verbose=cfg.verbose,
            logger=self.logger,
        )
        outcomes = run_groups_parallel(
            work_items,
            self.oracle,
            cfg.method,
            core_budget=cfg.core_budget,
            verbose=cfg.verbose,
            n_workers=cfg.n_workers,
            backend=cfg.backend,
            logger=self.logger,
        )
        labels = reconcile(outcomes, dataset.n_samples)

        summary = LevelSummary.from_outcomes(level, outcomes, labels, time.time() - start_time)
        self.logger.debug(
            "Level %d: %d groups -> %d clusters (%d refined, %d bypassed, %d uninformative)",
            level,
            summary.n_groups,
            summary.n_clusters,
            summary.n_refined,
            summary.n_bypassed,
            summary.n_uninformative,
        )
        return labels, summary

    def run(self, dataset: Any) -> MultiResResult:
        """Run all configured levels.

        Parameters
        ----------
        dataset : Dataset or Mapping
            Input SNP dataset (never modified)

        Returns
        -------
        MultiResResult
            Partition table with per-level summaries

        Raises
        ------
        InputValidationError
            If inputs are invalid (before any clustering work)
        OracleError
            If the partition oracle fails for any group
        """
        cfg = self.config.multires
        dataset = self.validate(dataset)
        n_levels = int(cfg.levels)
        progress = self.logger.info if cfg.verbose else self.logger.debug

        labels = np.ones(dataset.n_samples, dtype=np.int64)
        level_labels: List[np.ndarray] = []
        summaries: List[LevelSummary] = []

        for level in range(1, n_levels + 1):
            progress("Clustering at level %d", level)
            labels, summary = self.run_level(dataset, labels, level)
            level_labels.append(labels)
            summaries.append(summary)

        table = assemble_output(
            dataset.sample_ids,
            level_labels,
            id_column=cfg.id_column,
            level_prefix=cfg.level_prefix,
        )
        self.logger.info(
            "Computed %d levels for %d samples (clusters per level: %s)",
            n_levels,
            dataset.n_samples,
            [s.n_clusters for s in summaries],
        )
        return MultiResResult(table=table, level_labels=level_labels, summaries=summaries)


def multi_res_partition(
    dataset: Any,
    levels: int = 2,
    k_init: Optional[int] = None,
    method: str = "ward",
    core_budget: int = 1,
    verbose: bool = False,
    oracle: Optional[PartitionOracle] = None,
    n_workers: int = 1,
    logger: Optional[logging.Logger] = None,
) -> pd.DataFrame:
    """Cluster samples at multiple resolutions and return the partition table.

    Parameters
    ----------
    dataset : Dataset or Mapping
        Input SNP dataset
    levels : int
        Number of levels (default 2)
    k_init : int, optional
        Initial cluster count hint for level 1
    method : str
        'ward' or 'genie'
    core_budget : int
        Cores for each oracle call
    verbose : bool
        Log per-level progress
    oracle : PartitionOracle, optional
        Partition oracle (default BapsOracle)
    n_workers : int
        Groups processed concurrently per level
    logger : logging.Logger, optional
        Logger instance

    Returns
    -------
    pd.DataFrame
        ``Isolates`` column plus ``Level 1`` .. ``Level L`` label columns
    """
    config = RunConfig(
        multires=MultiResConfig(
            levels=levels,
            k_init=k_init,
            method=method,
            core_budget=core_budget,
            verbose=verbose,
            n_workers=n_workers,
        )
    )
    engine = MultiResEngine(config, oracle=oracle, logger=logger)
    return engine.run(dataset).table
