"""I/O utilities for PopStruct-Refinery.

Provides logging, CSV I/O, and dataset bundle loading.
"""

from .logging import get_logger, log_yaml, setup_logging
from .csv import ensure_output_dir, read_partition_table, write_dataframe
from .bundle import load_dataset_bundle, save_dataset_bundle

__all__ = [
    # Logging
    "get_logger",
    "log_yaml",
    "setup_logging",
    # CSV I/O
    "ensure_output_dir",
    "read_partition_table",
    "write_dataframe",
    # Bundles
    "load_dataset_bundle",
    "save_dataset_bundle",
]
