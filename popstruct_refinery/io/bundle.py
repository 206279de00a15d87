"""Dataset bundle I/O.

A bundle is a directory holding one dataset:

    snp_matrix.npz   sparse sites x samples matrix (scipy.sparse.save_npz)
    consensus.npy    consensus state per site
    prior.npy        (states, sites) prior pseudocounts
    samples.txt      one sample identifier per line (optional)
    hierarchy.npy    cached linkage matrix (optional)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
from scipy import sparse

from ..core.multires.dataset import Dataset

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MATRIX_FILE = "snp_matrix.npz"
CONSENSUS_FILE = "consensus.npy"
PRIOR_FILE = "prior.npy"
SAMPLES_FILE = "samples.txt"
HIERARCHY_FILE = "hierarchy.npy"


def load_dataset_bundle(path: PathLike) -> Dataset:
    """Load a dataset bundle directory.

    Parameters
    ----------
    path : PathLike
        Bundle directory

    Returns
    -------
    Dataset
        Loaded dataset (not yet validated)

    Raises
    ------
    FileNotFoundError
        If the directory or a required file is missing
    """
    bundle_dir = Path(path)
    if not bundle_dir.is_dir():
        raise FileNotFoundError(f"Dataset bundle not found: {bundle_dir}")
    for name in (MATRIX_FILE, CONSENSUS_FILE, PRIOR_FILE):
        if not (bundle_dir / name).exists():
            raise FileNotFoundError(f"Dataset bundle missing {name}: {bundle_dir}")

    matrix = sparse.load_npz(bundle_dir / MATRIX_FILE).tocsc()
    consensus = np.load(bundle_dir / CONSENSUS_FILE)
    prior = np.load(bundle_dir / PRIOR_FILE)

    sample_ids = ()
    samples_path = bundle_dir / SAMPLES_FILE
    if samples_path.exists():
        sample_ids = tuple(
            line.strip()
            for line in samples_path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        )

    hierarchy = None
    if (bundle_dir / HIERARCHY_FILE).exists():
        hierarchy = np.load(bundle_dir / HIERARCHY_FILE)

    logger.info(
        "Loaded bundle %s: %d sites x %d samples (nnz=%d)",
        bundle_dir, matrix.shape[0], matrix.shape[1], matrix.nnz,
    )
    return Dataset(
        snp_matrix=matrix,
        consensus=consensus,
        prior=prior,
        sample_ids=sample_ids,
        hierarchy=hierarchy,
    )


def save_dataset_bundle(dataset: Dataset, path: PathLike) -> Path:
    """Write a dataset to a bundle directory and return the directory."""
    bundle_dir = Path(path)
    bundle_dir.mkdir(parents=True, exist_ok=True)

    sparse.save_npz(bundle_dir / MATRIX_FILE, sparse.csc_matrix(dataset.snp_matrix))
    np.save(bundle_dir / CONSENSUS_FILE, np.asarray(dataset.consensus))
    np.save(bundle_dir / PRIOR_FILE, np.asarray(dataset.prior))
    (bundle_dir / SAMPLES_FILE).write_text(
        "\n".join(dataset.sample_ids) + "\n", encoding="utf-8"
    )
    if dataset.hierarchy is not None:
        np.save(bundle_dir / HIERARCHY_FILE, np.asarray(dataset.hierarchy))
    return bundle_dir
