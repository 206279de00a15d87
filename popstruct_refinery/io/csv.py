"""CSV I/O utilities for PopStruct-Refinery."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import pandas as pd

PathLike = Union[str, Path]


def ensure_output_dir(path: PathLike) -> Path:
    """Create the directory at path if it does not exist and return it.

    Parameters
    ----------
    path : PathLike
        Directory path to create.

    Returns
    -------
    Path
        The created/existing directory path.
    """
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def write_dataframe(df: pd.DataFrame, path: PathLike, *, index: bool = False) -> Path:
    """Write DataFrame to path ensuring the parent directory exists.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to write.
    path : PathLike
        Output path.
    index : bool
        Whether to write row index (default: False).

    Returns
    -------
    Path
        The output path.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=index)
    return output_path


def read_partition_table(path: PathLike, id_column: str = "Isolates") -> pd.DataFrame:
    """Load a partition table written by write_dataframe.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the identifier column is missing.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Partition table not found: {csv_path}")
    df = pd.read_csv(csv_path, dtype={id_column: str})
    if id_column not in df.columns:
        raise ValueError(f"Partition table missing column: {id_column}")
    return df
