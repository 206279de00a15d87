"""Configuration classes for multi-resolution clustering.

All run parameters can be set in code or loaded from a YAML file.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..baps.config import BapsConfig


@dataclass
class MultiResConfig:
    """Configuration for the level-by-level partition driver.

    Attributes
    ----------
    levels : int
        Number of refinement levels to compute
    k_init : int, optional
        Initial cluster count hint, used only for the level-1 population
    method : str
        Initial hierarchy method ('ward' or 'genie')
    core_budget : int
        Cores handed to each partition oracle call
    verbose : bool
        Log per-level progress and degenerate group notices at INFO
    n_workers : int
        Groups processed concurrently within a level
    backend : str
        joblib backend used when n_workers > 1
    id_column : str
        Name of the sample identifier column in the output table
    level_prefix : str
        Prefix of the level column names ("Level 1", "Level 2", ...)
    """

    levels: int = 2
    k_init: Optional[int] = None
    method: str = "ward"
    core_budget: int = 1
    verbose: bool = False
    n_workers: int = 1
    backend: str = "loky"
    id_column: str = "Isolates"
    level_prefix: str = "Level "


@dataclass
class RunConfig:
    """Master configuration for a multi-resolution run.

    Attributes
    ----------
    multires : MultiResConfig
        Driver configuration
    baps : BapsConfig
        Default partition oracle configuration
    """

    multires: MultiResConfig = field(default_factory=MultiResConfig)
    baps: BapsConfig = field(default_factory=BapsConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "RunConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(
            multires=MultiResConfig(**data.get("multires", {})),
            baps=BapsConfig(**data.get("baps", {})),
        )

    @classmethod
    def default(cls) -> "RunConfig":
        """Create default configuration."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "multires": {
                "levels": self.multires.levels,
                "k_init": self.multires.k_init,
                "method": self.multires.method,
                "core_budget": self.multires.core_budget,
                "verbose": self.multires.verbose,
                "n_workers": self.multires.n_workers,
                "backend": self.multires.backend,
                "id_column": self.multires.id_column,
                "level_prefix": self.multires.level_prefix,
            },
            "baps": {
                "genie_gini_threshold": self.baps.genie_gini_threshold,
                "default_k_fraction": self.baps.default_k_fraction,
            },
        }
