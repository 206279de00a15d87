"""Unit tests for the command-line interfaces."""

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from popstruct_refinery.cli.main import cli
from popstruct_refinery.core.multires.__main__ import main as stage_main, parse_args


class TestClickCli:
    """Tests for the popstruct-refinery command group."""

    def test_run(self, bundle_dir, tmp_path):
        """run writes the partition table and summary."""
        out_dir = tmp_path / "results"
        result = CliRunner().invoke(
            cli, ["run", "--input", str(bundle_dir), "--out", str(out_dir), "--levels", "2"],
            obj={},
        )
        assert result.exit_code == 0, result.output
        assert "Clustering complete: 2 levels" in result.output

        table = pd.read_csv(out_dir / "multires_partition.csv")
        assert list(table.columns) == ["Isolates", "Level 1", "Level 2"]
        assert list(table["Level 1"]) == [1] * 6 + [2] * 6

        summary = next(yaml.safe_load_all((out_dir / "multires_summary.yaml").read_text()))
        assert summary["n_levels"] == 2
        assert summary["config"]["multires"]["levels"] == 2

    def test_run_invalid_parameter(self, bundle_dir, tmp_path):
        """Validation errors exit non-zero."""
        result = CliRunner().invoke(
            cli, ["run", "-i", str(bundle_dir), "-o", str(tmp_path / "r"), "--core-budget", "0"],
            obj={},
        )
        assert result.exit_code == 1
        assert "Invalid value for core_budget!" in result.output

    def test_run_missing_bundle_file(self, bundle_dir, tmp_path):
        """A bundle without its prior exits with an error message."""
        (bundle_dir / "prior.npy").unlink()
        result = CliRunner().invoke(
            cli, ["run", "-i", str(bundle_dir), "-o", str(tmp_path / "r")], obj={},
        )
        assert result.exit_code == 1
        assert "prior.npy" in result.output
        assert not isinstance(result.exception, FileNotFoundError)

    def test_inspect_missing_bundle_file(self, bundle_dir):
        """inspect reports a missing matrix file."""
        (bundle_dir / "snp_matrix.npz").unlink()
        result = CliRunner().invoke(cli, ["inspect", "-i", str(bundle_dir)], obj={})
        assert result.exit_code == 1
        assert "snp_matrix.npz" in result.output

    def test_inspect(self, bundle_dir):
        """inspect prints dimensions and validity."""
        result = CliRunner().invoke(cli, ["inspect", "--input", str(bundle_dir)], obj={})
        assert result.exit_code == 0, result.output
        assert "Samples: 12" in result.output
        assert "Sites: 40" in result.output
        assert "Bundle is valid" in result.output


class TestStageRunner:
    """Tests for python -m popstruct_refinery.core.multires."""

    def test_parse_args(self, tmp_path):
        """Unset options stay None so YAML values apply."""
        args = parse_args(["--input", str(tmp_path), "--output", str(tmp_path / "o")])
        assert args.levels is None
        assert args.method is None
        assert args.verbose is False

    def test_main(self, bundle_dir, tmp_path):
        """The stage runner writes the partition table."""
        out_dir = tmp_path / "stage"
        stage_main(["--input", str(bundle_dir), "--output", str(out_dir), "--levels", "1"])
        table = pd.read_csv(out_dir / "multires_partition.csv")
        assert list(table.columns) == ["Isolates", "Level 1"]

    def test_main_config_file(self, bundle_dir, tmp_path):
        """YAML settings are used when no option overrides them."""
        config_path = tmp_path / "multires.yaml"
        config_path.write_text("multires:\n  levels: 0\n")
        out_dir = tmp_path / "stage"
        stage_main(["-i", str(bundle_dir), "-o", str(out_dir), "-c", str(config_path)])
        table = pd.read_csv(out_dir / "multires_partition.csv")
        assert list(table.columns) == ["Isolates"]

    def test_main_invalid(self, bundle_dir, tmp_path):
        """Invalid parameters exit with status 2."""
        with pytest.raises(SystemExit) as excinfo:
            stage_main(["-i", str(bundle_dir), "-o", str(tmp_path / "x"), "--method", "kmeans"])
        assert excinfo.value.code == 2
