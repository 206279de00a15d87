"""Command-line interface for PopStruct-Refinery.

Provides CLI commands for multi-resolution clustering of sample bundles.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Setup logging for CLI commands."""
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    return logging.getLogger("popstruct_refinery")


@click.group()
@click.version_option(version="0.1.0", prog_name="popstruct-refinery")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """PopStruct-Refinery: multi-resolution population structure.

    Recursively re-clusters each group of samples on the sites that vary
    within it, producing one nested partition per level.

    Examples:

        # Two levels with the default BAPS oracle
        popstruct-refinery run --input bundle/ --out results/

        # Summarize a dataset bundle
        popstruct-refinery inspect --input bundle/
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["logger"] = setup_logging(verbose, debug)


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True),
              help="Dataset bundle directory")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output directory")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Run configuration file (YAML)")
@click.option("--levels", type=int, default=None, help="Number of levels")
@click.option("--k-init", type=int, default=None, help="Initial cluster count hint (level 1)")
@click.option("--method", type=click.Choice(["ward", "genie"]), default=None,
              help="Initial hierarchy method")
@click.option("--core-budget", type=int, default=None, help="Cores per oracle call")
@click.option("--n-workers", type=int, default=None, help="Groups processed concurrently")
@click.pass_context
def run(
    ctx: click.Context,
    input_path: str,
    output_path: str,
    config: Optional[str],
    levels: Optional[int],
    k_init: Optional[int],
    method: Optional[str],
    core_budget: Optional[int],
    n_workers: Optional[int],
) -> None:
    """Run multi-resolution clustering on a dataset bundle.

    Writes multires_partition.csv (Isolates plus one column per level)
    and multires_summary.yaml to the output directory.
    """
    logger = ctx.obj["logger"]
    logger.info(f"Running multi-resolution clustering on: {input_path}")

    from popstruct_refinery.core.multires import (
        InputValidationError,
        MultiResEngine,
        OracleError,
        RunConfig,
    )
    from popstruct_refinery.core.multires.__main__ import PARTITION_FILE, SUMMARY_FILE
    from popstruct_refinery.io import (
        ensure_output_dir,
        load_dataset_bundle,
        log_yaml,
        write_dataframe,
    )

    cfg = RunConfig.from_yaml(Path(config)) if config else RunConfig()
    overrides = {
        "levels": levels,
        "k_init": k_init,
        "method": method,
        "core_budget": core_budget,
        "n_workers": n_workers,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(cfg.multires, name, value)
    if ctx.obj["verbose"]:
        cfg.multires.verbose = True

    out_dir = ensure_output_dir(output_path)

    engine = MultiResEngine(cfg, logger=logger)
    try:
        dataset = load_dataset_bundle(input_path)
        result = engine.run(dataset)
    except (FileNotFoundError, InputValidationError, OracleError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    table_path = write_dataframe(result.table, out_dir / PARTITION_FILE)
    summary_path = out_dir / SUMMARY_FILE
    summary_path.unlink(missing_ok=True)
    log_yaml(summary_path, {"config": cfg.to_dict(), **result.to_dict()})

    clusters = ", ".join(str(s.n_clusters) for s in result.summaries)
    click.echo(f"Clustering complete: {result.n_levels} levels (clusters: {clusters or 'none'})")
    click.echo(f"Output saved to: {table_path}")


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True),
              help="Dataset bundle directory")
@click.pass_context
def inspect(ctx: click.Context, input_path: str) -> None:
    """Validate a dataset bundle and print its dimensions."""
    from popstruct_refinery.core.multires import validate_dataset
    from popstruct_refinery.io import load_dataset_bundle

    try:
        dataset = load_dataset_bundle(input_path)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    result = validate_dataset(dataset)

    click.echo(f"Samples: {dataset.n_samples}")
    click.echo(f"Sites: {dataset.n_sites}")
    click.echo(f"Allele states: {dataset.n_states}")
    click.echo(f"Cached hierarchy: {'yes' if dataset.hierarchy is not None else 'no'}")
    for warning in result.warnings:
        click.echo(f"Warning: {warning}")
    if not result.is_valid:
        for error in result.errors:
            click.echo(str(error), err=True)
        sys.exit(1)
    click.echo("Bundle is valid")


def main() -> None:
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
