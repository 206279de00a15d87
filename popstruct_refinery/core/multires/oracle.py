"""Partition oracle interface consumed by the multi-resolution driver.

An oracle fits a hierarchical clustering model on a reduced dataset and
extracts the best partition from it. Any object with matching ``fit`` and
``extract`` methods can be used; ``BapsOracle`` is the default.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

import numpy as np

from .dataset import Dataset


class PartitionOracle(Protocol):
    """Fit and cut a hierarchical clustering model."""

    def fit(
        self,
        dataset: Dataset,
        method: str,
        core_budget: int,
        k_init: Optional[int] = None,
        verbose: bool = False,
    ) -> Any:
        ...

    def extract(self, dataset: Dataset, model: Any, verbose: bool = False) -> np.ndarray:
        ...


class OracleError(RuntimeError):
    """Raised when the partition oracle fails for a group.

    The run is aborted; no partial table is returned.

    Attributes
    ----------
    level : int
        Level being computed (1-based)
    group_index : int
        Position of the group in ascending label order (1-based)
    group_size : int
        Number of samples in the group
    cause : str
        Description of the underlying failure
    """

    def __init__(self, level: int, group_index: int, group_size: int, cause: str):
        super().__init__(level, group_index, group_size, cause)
        self.level = level
        self.group_index = group_index
        self.group_size = group_size
        self.cause = cause

    def __str__(self) -> str:
        return (
            f"Partition oracle failed at level {self.level}, group {self.group_index} "
            f"({self.group_size} samples): {self.cause}"
        )
