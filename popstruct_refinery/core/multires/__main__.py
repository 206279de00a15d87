"""Multi-resolution clustering CLI runner.

Enables running the level-by-level refinement as:
    python -m popstruct_refinery.core.multires --input <bundle dir> --output <dir>

Usage Examples:
    # Two levels with default settings
    python -m popstruct_refinery.core.multires \\
        --input data/sa_bundle \\
        --output output/multires

    # Three levels, genie hierarchy, 20 initial clusters at level 1
    python -m popstruct_refinery.core.multires \\
        --input data/sa_bundle \\
        --output output/multires \\
        --levels 3 --method genie --k-init 20

    # Parameters from YAML, four groups at a time
    python -m popstruct_refinery.core.multires \\
        --input data/sa_bundle \\
        --output output/multires \\
        --config multires.yaml --n-workers 4
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ...io import (
    ensure_output_dir,
    load_dataset_bundle,
    log_yaml,
    setup_logging,
    write_dataframe,
)
from .config import RunConfig
from .engine import MultiResEngine, MultiResResult
from .validation import InputValidationError

PARTITION_FILE = "multires_partition.csv"
SUMMARY_FILE = "multires_summary.yaml"


def run_multires(
    input_path: Path,
    output_dir: Path,
    config: Optional[RunConfig] = None,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
) -> MultiResResult:
    """Load a dataset bundle, run all levels, and write the outputs.

    Parameters
    ----------
    input_path : Path
        Dataset bundle directory
    output_dir : Path
        Directory for the partition table and run summary
    config : Optional[RunConfig]
        Run configuration
    verbose : bool
        Enable verbose logging
    log_dir : Optional[Path]
        Directory for log file

    Returns
    -------
    MultiResResult
        Partition table and per-level summaries
    """
    logger = setup_logging(verbose, log_dir=log_dir, log_filename="multires.log", name="multires")
    logger.info("Multi-resolution clustering")
    logger.info(f"Input: {input_path}")
    logger.info(f"Output: {output_dir}")

    config = config or RunConfig()
    output_dir = ensure_output_dir(output_dir)

    dataset = load_dataset_bundle(input_path)
    engine = MultiResEngine(config, logger=logger)
    result = engine.run(dataset)

    table_path = write_dataframe(result.table, output_dir / PARTITION_FILE)
    logger.info(f"Saved: {table_path}")

    summary_path = output_dir / SUMMARY_FILE
    summary_path.unlink(missing_ok=True)
    log_yaml(
        summary_path,
        {
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "input": str(input_path),
            "config": config.to_dict(),
            **result.to_dict(),
        },
    )
    logger.info(f"Saved: {summary_path}")
    return result


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Multi-resolution hierarchical refinement of sample clusters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m popstruct_refinery.core.multires \\
      --input data/sa_bundle --output output/multires

  python -m popstruct_refinery.core.multires \\
      --input data/sa_bundle --output output/multires --levels 3 --k-init 20
        """,
    )

    parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Dataset bundle directory (snp_matrix.npz, consensus.npy, prior.npy)",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        required=True,
        help="Output directory",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="YAML configuration file (command line options override it)",
    )
    parser.add_argument(
        "--levels",
        type=int,
        default=None,
        help="Number of levels (default: 2)",
    )
    parser.add_argument(
        "--k-init",
        type=int,
        default=None,
        help="Initial cluster count hint for level 1",
    )
    parser.add_argument(
        "--method",
        type=str,
        default=None,
        help="Initial hierarchy method: ward or genie (default: ward)",
    )
    parser.add_argument(
        "--core-budget",
        type=int,
        default=None,
        help="Cores per partition oracle call (default: 1)",
    )
    parser.add_argument(
        "--n-workers",
        type=int,
        default=None,
        help="Groups processed concurrently per level (default: 1)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-dir", "-l",
        type=Path,
        default=None,
        help="Directory for log file (default: console only)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RunConfig:
    """Merge YAML configuration with command line overrides."""
    config = RunConfig.from_yaml(args.config) if args.config else RunConfig.default()
    cfg = config.multires
    for name in ("levels", "k_init", "method", "core_budget", "n_workers"):
        value = getattr(args, name)
        if value is not None:
            setattr(cfg, name, value)
    if args.verbose:
        cfg.verbose = True
    return config


def main(argv: Optional[Sequence[str]] = None):
    """CLI entry point."""
    args = parse_args(argv)
    config = build_config(args)

    try:
        run_multires(
            input_path=args.input,
            output_dir=args.output,
            config=config,
            verbose=args.verbose,
            log_dir=args.log_dir,
        )
    except InputValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:
        logging.error(f"Multi-resolution clustering failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
