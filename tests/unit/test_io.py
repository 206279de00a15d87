"""Unit tests for I/O utilities."""

import logging

import pytest
import numpy as np
import pandas as pd
import yaml

from popstruct_refinery.core.multires import Dataset
from popstruct_refinery.io import (
    ensure_output_dir,
    get_logger,
    load_dataset_bundle,
    log_yaml,
    read_partition_table,
    save_dataset_bundle,
    write_dataframe,
)


class TestDatasetBundle:
    """Tests for bundle save/load."""

    def test_save_and_load(self, structured_dataset, tmp_path):
        """A saved bundle reloads with the same content."""
        bundle = save_dataset_bundle(structured_dataset, tmp_path / "bundle")
        assert (bundle / "snp_matrix.npz").exists()
        assert (bundle / "samples.txt").exists()
        assert not (bundle / "hierarchy.npy").exists()

        loaded = load_dataset_bundle(bundle)
        assert loaded.sample_ids == structured_dataset.sample_ids
        np.testing.assert_array_equal(
            loaded.snp_matrix.toarray(), structured_dataset.snp_matrix.toarray()
        )
        np.testing.assert_array_equal(loaded.consensus, structured_dataset.consensus)
        np.testing.assert_array_equal(loaded.prior, structured_dataset.prior)
        assert loaded.hierarchy is None

    def test_hierarchy_saved(self, small_matrix, tmp_path):
        """A cached hierarchy is stored alongside the matrix."""
        base = Dataset.from_binary(small_matrix)
        dataset = Dataset(
            snp_matrix=base.snp_matrix,
            consensus=base.consensus,
            prior=base.prior,
            hierarchy=np.arange(12, dtype=float).reshape(3, 4),
        )
        loaded = load_dataset_bundle(save_dataset_bundle(dataset, tmp_path / "b"))
        np.testing.assert_array_equal(loaded.hierarchy, dataset.hierarchy)

    def test_missing_directory(self, tmp_path):
        """Missing bundles raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_dataset_bundle(tmp_path / "nope")

    def test_missing_prior(self, structured_dataset, tmp_path):
        """Every required file must be present."""
        bundle = save_dataset_bundle(structured_dataset, tmp_path / "bundle")
        (bundle / "prior.npy").unlink()
        with pytest.raises(FileNotFoundError, match="prior.npy"):
            load_dataset_bundle(bundle)


class TestCsv:
    """Tests for CSV helpers."""

    def test_ensure_output_dir(self, tmp_path):
        """Nested directories are created."""
        path = ensure_output_dir(tmp_path / "a" / "b")
        assert path.is_dir()

    def test_write_and_read_partition(self, tmp_path):
        """Partition tables keep identifiers as strings."""
        df = pd.DataFrame({"Isolates": ["001", "002"], "Level 1": [1, 2]})
        path = write_dataframe(df, tmp_path / "out" / "partition.csv")
        loaded = read_partition_table(path)
        assert list(loaded["Isolates"]) == ["001", "002"]
        assert list(loaded["Level 1"]) == [1, 2]

    def test_read_missing_column(self, tmp_path):
        """Tables without the identifier column are rejected."""
        path = write_dataframe(pd.DataFrame({"x": [1]}), tmp_path / "t.csv")
        with pytest.raises(ValueError):
            read_partition_table(path)


class TestLogging:
    """Tests for logging helpers."""

    def test_log_yaml_appends(self, tmp_path):
        """Records are appended as separate YAML documents."""
        path = tmp_path / "logs" / "summary.yaml"
        log_yaml(path, {"level": 1})
        log_yaml(path, {"level": 2})
        documents = [d for d in yaml.safe_load_all(path.read_text()) if d is not None]
        assert documents == [{"level": 1}, {"level": 2}]

    def test_get_logger_timestamped(self, tmp_path):
        """Timestamped log files keep the stem and suffix."""
        logger, path = get_logger("test_io_logger", tmp_path / "multires.log")
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert path.name.startswith("multires_")
        assert path.suffix == ".log"
        assert "hello" in path.read_text()
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
