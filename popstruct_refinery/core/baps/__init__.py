"""Default BAPS-style partition oracle.

Seeds clusters from a ward (scipy) or Genie (genieclust) hierarchy over
pairwise allele mismatches, then merges them by Dirichlet-multinomial
marginal likelihood and extracts the best-scoring partition.

Example Usage
-------------
>>> from popstruct_refinery.core.baps import BapsOracle
>>> oracle = BapsOracle()
>>> model = oracle.fit(dataset, "ward", core_budget=1)
>>> labels = oracle.extract(dataset, model)
"""

from .config import BapsConfig
from .hierarchy import initial_partition, mismatch_distances
from .likelihood import allele_counts, log_marginal_likelihood, partition_log_likelihood
from .oracle import BapsModel, BapsOracle

__all__ = [
    # Config
    "BapsConfig",
    # Hierarchy
    "initial_partition",
    "mismatch_distances",
    # Likelihood
    "allele_counts",
    "log_marginal_likelihood",
    "partition_log_likelihood",
    # Oracle
    "BapsModel",
    "BapsOracle",
]
