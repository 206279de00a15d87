"""Pytest configuration and shared fixtures for PopStruct-Refinery tests."""

import sys
from pathlib import Path

import pytest
import numpy as np

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fixtures import (
    create_identity_dataset,
    create_random_dataset,
    create_scripted_oracle,
    create_structured_dataset,
)


# ============================================================================
# Dataset Fixtures
# ============================================================================


@pytest.fixture
def identity_dataset():
    """Ten samples, one private site each."""
    return create_identity_dataset(10)


@pytest.fixture
def structured_dataset():
    """Two clearly separated populations of six samples."""
    return create_structured_dataset()


@pytest.fixture
def random_dataset():
    """Thirty samples with three planted populations."""
    return create_random_dataset()


@pytest.fixture
def small_matrix() -> np.ndarray:
    """Five sites x four samples indicator matrix."""
    return np.array([
        [1, 0, 0, 0],
        [1, 1, 0, 0],
        [0, 0, 0, 0],
        [1, 1, 1, 1],
        [0, 1, 0, 1],
    ], dtype=np.int8)


# ============================================================================
# Oracle Fixtures
# ============================================================================


@pytest.fixture
def scripted_oracle():
    """Scripted oracle for the ten-sample identity dataset."""
    return create_scripted_oracle(10)


# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for tests."""
    output_dir = tmp_path / "output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


@pytest.fixture
def bundle_dir(tmp_path: Path, structured_dataset) -> Path:
    """Dataset bundle directory holding the structured dataset."""
    from popstruct_refinery.io import save_dataset_bundle

    return save_dataset_bundle(structured_dataset, tmp_path / "bundle")
