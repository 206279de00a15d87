"""Assemble per-level labelings into the final partition table."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
import pandas as pd


def level_column(level: int, prefix: str = "Level ") -> str:
    """Column name for a level (``Level 1``, ``Level 2``, ...)."""
    return f"{prefix}{level}"


def assemble_output(
    sample_ids: Sequence[str],
    level_labels: List[np.ndarray],
    id_column: str = "Isolates",
    level_prefix: str = "Level ",
) -> pd.DataFrame:
    """Build the result table.

    Parameters
    ----------
    sample_ids : Sequence[str]
        Sample identifiers in dataset column order
    level_labels : List[np.ndarray]
        Labelings for levels 1..L (level 0 is not included)
    id_column : str
        Name of the identifier column
    level_prefix : str
        Prefix for level column names

    Returns
    -------
    pd.DataFrame
        One row per sample; identifier column then one integer column per level
    """
    n_samples = len(sample_ids)
    df = pd.DataFrame({id_column: pd.Series(list(sample_ids), dtype=object)})
    for level, labels in enumerate(level_labels, start=1):
        labels = np.asarray(labels, dtype=np.int64)
        if labels.shape != (n_samples,):
            raise ValueError(
                f"Level {level} has {labels.shape[0]} labels for {n_samples} samples"
            )
        df[level_column(level, level_prefix)] = labels
    return df
