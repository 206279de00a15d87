"""Multi-resolution population clustering.

Assigns hierarchical cluster labels to samples over several levels. Each
level re-clusters every group of the previous level on the sites that vary
within it, and reconciles the per-group sub-labels into one dense labeling.

Example Usage
-------------
>>> from popstruct_refinery.core.multires import (
...     Dataset, MultiResEngine, RunConfig, multi_res_partition,
... )
>>> table = multi_res_partition(dataset, levels=2)
>>> # Or with full control
>>> engine = MultiResEngine(RunConfig.from_yaml("multires.yaml"))
>>> result = engine.run(dataset)
"""

__version__ = "1.0.0"

# Configuration classes
from .config import MultiResConfig, RunConfig

# Data model
from .dataset import Dataset

# Subsetting
from .subset import GroupSubset, informative_sites, subset_group

# Oracle interface
from .oracle import OracleError, PartitionOracle

# Label reconciliation
from .labels import (
    GroupOutcome,
    GroupStatus,
    check_sub_labels,
    compact_labels,
    encode_raw_codes,
    is_refinement,
    reconcile,
)

# Validation
from .validation import (
    InputValidationError,
    ValidationIssue,
    ValidationResult,
    validate_dataset,
    validate_parameters,
)

# Output
from .output import assemble_output, level_column

# Engine
from .engine import LevelSummary, MultiResEngine, MultiResResult, multi_res_partition

__all__ = [
    # Version
    "__version__",
    # Config
    "MultiResConfig",
    "RunConfig",
    # Data model
    "Dataset",
    # Subsetting
    "GroupSubset",
    "informative_sites",
    "subset_group",
    # Oracle
    "OracleError",
    "PartitionOracle",
    # Labels
    "GroupOutcome",
    "GroupStatus",
    "check_sub_labels",
    "compact_labels",
    "encode_raw_codes",
    "is_refinement",
    "reconcile",
    # Validation
    "InputValidationError",
    "ValidationIssue",
    "ValidationResult",
    "validate_dataset",
    "validate_parameters",
    # Output
    "assemble_output",
    "level_column",
    # Engine
    "LevelSummary",
    "MultiResEngine",
    "MultiResResult",
    "multi_res_partition",
]
