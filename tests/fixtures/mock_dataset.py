"""Mock SNP datasets and partition oracles for testing.

Provides small deterministic datasets and a scripted oracle so the
multi-resolution driver can be tested without running BAPS.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from popstruct_refinery.core.multires import Dataset

# Level-1 and level-2 sub-labels for the ten-sample scripted scenario.
SCRIPTED_LEVEL1 = [1, 1, 2, 2, 1, 2, 1, 1, 2, 2]
SCRIPTED_LEVEL2 = {
    ("s0", "s1", "s4", "s6", "s7"): [1, 2, 1, 2, 1],
    ("s2", "s3", "s5", "s8", "s9"): [1, 1, 2, 1, 2],
}
EXPECTED_LEVEL2 = [1, 2, 3, 3, 1, 4, 2, 1, 3, 4]


def sample_names(n_samples: int) -> List[str]:
    return [f"s{i}" for i in range(n_samples)]


def create_identity_dataset(n_samples: int = 10) -> Dataset:
    """Dataset where every sample carries one private non-reference site.

    Every group of two or more samples has as many informative sites as
    members.
    """
    return Dataset.from_binary(np.eye(n_samples, dtype=np.int8), sample_ids=sample_names(n_samples))


def create_structured_dataset(
    n_per_population: int = 6,
    n_sites_per_population: int = 20,
) -> Dataset:
    """Two populations with disjoint sets of non-reference sites.

    Samples 0..n-1 carry state 2 on the first block of sites, samples
    n..2n-1 on the second block. Samples within a population are identical.
    """
    n_samples = 2 * n_per_population
    n_sites = 2 * n_sites_per_population
    indicator = np.zeros((n_sites, n_samples), dtype=np.int8)
    indicator[:n_sites_per_population, :n_per_population] = 1
    indicator[n_sites_per_population:, n_per_population:] = 1
    return Dataset.from_binary(indicator, sample_ids=sample_names(n_samples))


def create_random_dataset(
    n_samples: int = 30,
    n_sites: int = 60,
    n_populations: int = 3,
    noise: float = 0.05,
    seed: int = 42,
) -> Dataset:
    """Random two-state dataset with planted population structure."""
    rng = np.random.default_rng(seed)
    populations = np.arange(n_samples) % n_populations
    frequencies = rng.uniform(0.0, 1.0, size=(n_sites, n_populations)) > 0.5
    indicator = frequencies[:, populations].astype(np.int8)
    flips = rng.uniform(size=indicator.shape) < noise
    indicator = np.where(flips, 1 - indicator, indicator)
    return Dataset.from_binary(indicator, sample_ids=sample_names(n_samples))


class ScriptedOracle:
    """Partition oracle that returns pre-scripted sub-labels.

    Groups are looked up by their tuple of sample identifiers. Every call
    is recorded as (sample_ids, method, core_budget, k_init).
    """

    def __init__(self, script: Dict[Tuple[str, ...], Sequence[int]]):
        self.script = {tuple(k): list(v) for k, v in script.items()}
        self.calls: List[Tuple[Tuple[str, ...], str, int, Optional[int]]] = []

    def fit(self, dataset, method, core_budget, k_init=None, verbose=False):
        key = tuple(dataset.sample_ids)
        self.calls.append((key, method, core_budget, k_init))
        return key

    def extract(self, dataset, model, verbose=False):
        return np.asarray(self.script[model])


class FailingOracle:
    """Oracle that raises for one sample group and scripts the rest."""

    def __init__(self, script, fail_on: Tuple[str, ...]):
        self.inner = ScriptedOracle(script)
        self.fail_on = tuple(fail_on)

    def fit(self, dataset, method, core_budget, k_init=None, verbose=False):
        if tuple(dataset.sample_ids) == self.fail_on:
            raise ArithmeticError("likelihood diverged")
        return self.inner.fit(dataset, method, core_budget, k_init=k_init, verbose=verbose)

    def extract(self, dataset, model, verbose=False):
        return self.inner.extract(dataset, model, verbose=verbose)


def create_scripted_oracle(n_samples: int = 10) -> ScriptedOracle:
    """Scripted oracle for the ten-sample identity dataset."""
    script = {tuple(sample_names(n_samples)): SCRIPTED_LEVEL1}
    script.update(SCRIPTED_LEVEL2)
    return ScriptedOracle(script)
