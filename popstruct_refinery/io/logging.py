"""Logging utilities for PopStruct-Refinery.

Console setup for stage runners, timestamped run log files, and YAML run
summaries.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import yaml

PathLike = Union[str, Path]

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _timestamped_log_path(log_path: PathLike) -> Path:
    """Insert the current time between stem and suffix.

    Example: multires.log -> multires_20251209_080530.log
    """
    log_path = Path(log_path)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return log_path.parent / f"{log_path.stem}_{timestamp}{log_path.suffix or '.log'}"


def _attach_file_handler(
    logger: logging.Logger,
    log_path: PathLike,
    level: int,
    timestamped: bool,
) -> Path:
    path = _timestamped_log_path(log_path) if timestamped else Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return path


def get_logger(
    name: str,
    log_path: PathLike,
    level: int = logging.INFO,
    timestamped: bool = True,
) -> Tuple[logging.Logger, Path]:
    """Return a logger that writes only to its own log file.

    Parameters
    ----------
    name : str
        Logger name.
    log_path : PathLike
        Base path for the log file.
    level : int
        Logging level (default: INFO).
    timestamped : bool
        Keep earlier runs by adding a timestamp to the file name.

    Returns
    -------
    Tuple[logging.Logger, Path]
        The logger and the file it writes to.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    return logger, _attach_file_handler(logger, log_path, level, timestamped)


def setup_logging(
    verbose: bool = False,
    log_dir: Optional[Path] = None,
    log_filename: str = "multires.log",
    name: str = "popstruct_refinery",
) -> logging.Logger:
    """Configure a console logger, plus a timestamped log file under log_dir.

    Parameters
    ----------
    verbose : bool
        Log at DEBUG instead of INFO
    log_dir : Optional[Path]
        Directory for the log file (console only if None)
    log_filename : str
        Base log file name
    name : str
        Logger name

    Returns
    -------
    logging.Logger
        Configured logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    if log_dir:
        path = _attach_file_handler(logger, Path(log_dir) / log_filename, level, timestamped=True)
        logger.info(f"Log file: {path}")

    return logger


def log_yaml(
    log_path: PathLike,
    record: dict[str, Any],
    *,
    logger: logging.Logger | None = None,
) -> None:
    """Append record to log_path as one YAML document.

    When a logger is given the document is logged at INFO instead.
    """
    message = yaml.safe_dump(record, sort_keys=False).rstrip("\n") + "\n---"
    if logger is not None:
        logger.info("%s", message)
        return

    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(message + "\n")
