"""Configuration for the default BAPS-style partition oracle."""

from dataclasses import dataclass


@dataclass
class BapsConfig:
    """Configuration for BapsOracle.

    Attributes
    ----------
    genie_gini_threshold : float
        Gini index threshold passed to the Genie algorithm
    default_k_fraction : float
        Initial cluster count as a fraction of the sample count when no
        k_init hint is supplied
    """

    genie_gini_threshold: float = 0.3
    default_k_fraction: float = 0.25
