"""Test fixtures for PopStruct-Refinery.

Provides mock dataset generators and scripted partition oracles.
"""

from .mock_dataset import (
    EXPECTED_LEVEL2,
    SCRIPTED_LEVEL1,
    SCRIPTED_LEVEL2,
    FailingOracle,
    ScriptedOracle,
    create_identity_dataset,
    create_random_dataset,
    create_scripted_oracle,
    create_structured_dataset,
    sample_names,
)

__all__ = [
    "EXPECTED_LEVEL2",
    "SCRIPTED_LEVEL1",
    "SCRIPTED_LEVEL2",
    "FailingOracle",
    "ScriptedOracle",
    "create_identity_dataset",
    "create_random_dataset",
    "create_scripted_oracle",
    "create_structured_dataset",
    "sample_names",
]
