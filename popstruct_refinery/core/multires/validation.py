"""
Validation errors with actionable diagnostics for multi-resolution clustering.

Diagnostics describe what was wrong, what was expected and how to fix it.
Error codes enable programmatic handling.

Error Codes:
    E101_DATASET_TYPE: Input is not a Dataset (or convertible mapping)
    E102_MATRIX_TYPE: SNP matrix is not a sparse numeric matrix
    E103_CONSENSUS_TYPE: Consensus is not a numeric vector
    E104_PRIOR_TYPE: Prior is not a dense numeric matrix
    E105_SHAPE_MISMATCH: Consensus/prior/matrix sites disagree
    E106_SAMPLE_IDS: Sample identifiers do not match matrix columns
    E201_CORE_BUDGET: core_budget is not a positive integer
    E202_LEVELS: levels is not a non-negative integer
    E203_METHOD: Unsupported hierarchy method
    E204_K_INIT: k_init is not a positive integer
    E205_N_WORKERS: n_workers is not a positive integer
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any, Dict, List, Optional

import numpy as np
from scipy import sparse

from .dataset import Dataset

SUPPORTED_METHODS = ("ward", "genie")


class InputValidationError(ValueError):
    """Raised when the dataset or run configuration is invalid.

    Attributes
    ----------
    issues : List[ValidationIssue]
        Every diagnostic found during validation.
    """

    def __init__(self, message: str, issues: Optional[List["ValidationIssue"]] = None):
        super().__init__(message)
        self.issues = list(issues or [])

    @property
    def error_codes(self) -> List[str]:
        return [issue.error_code for issue in self.issues]


@dataclass
class ValidationIssue:
    """Base class for validation diagnostics.

    Attributes
    ----------
    message : str
        Human-readable error description
    error_code : str
        Machine-readable error code for programmatic handling
    expected : Any
        What the validator expected to find
    found : Any
        What was actually found
    suggestion : str
        Actionable suggestion for fixing the error
    context : Dict[str, Any]
        Additional context for debugging
    """

    message: str
    error_code: str = "E000_UNKNOWN"
    expected: Any = None
    found: Any = None
    suggestion: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error as human-readable multi-line string."""
        parts = [f"[{self.error_code}] {self.message}"]
        if self.expected is not None:
            parts.append(f"  Expected: {self.expected}")
        if self.found is not None:
            parts.append(f"  Found: {self.found}")
        if self.suggestion:
            parts.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "expected": str(self.expected) if self.expected is not None else None,
            "found": str(self.found) if self.found is not None else None,
            "suggestion": self.suggestion,
            "context": self.context,
        }


@dataclass
class DatasetFieldError(ValidationIssue):
    """Error for a malformed dataset field."""

    error_code: str = "E101_DATASET_TYPE"
    field_name: str = ""

    def __post_init__(self):
        if not self.suggestion:
            self.suggestion = (
                f"Rebuild '{self.field_name or 'dataset'}' with Dataset.from_mapping "
                "or load it with load_dataset_bundle."
            )


@dataclass
class ShapeMismatchError(ValidationIssue):
    """Error for misaligned matrix, consensus and prior dimensions."""

    error_code: str = "E105_SHAPE_MISMATCH"


@dataclass
class ParameterError(ValidationIssue):
    """Error for an invalid run parameter."""

    parameter: str = ""


@dataclass
class UnsupportedMethodError(ParameterError):
    """Error for an unknown hierarchy method.

    Suggests the closest supported method name using difflib.
    """

    error_code: str = "E203_METHOD"
    parameter: str = "method"

    def __post_init__(self):
        if not self.suggestion and isinstance(self.found, str):
            matches = get_close_matches(self.found, SUPPORTED_METHODS, n=1, cutoff=0.4)
            if matches:
                self.suggestion = f"Did you mean: {matches[0]}?"
        if not self.suggestion:
            self.suggestion = f"Use one of: {', '.join(SUPPORTED_METHODS)}"


@dataclass
class ValidationResult:
    """Result of validation with errors and warnings.

    Attributes
    ----------
    is_valid : bool
        True if validation passed (no errors)
    errors : List[ValidationIssue]
        List of validation errors (empty if valid)
    warnings : List[str]
        Non-fatal warnings
    """

    is_valid: bool = True
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add(self, issue: ValidationIssue) -> None:
        self.errors.append(issue)
        self.is_valid = False

    def raise_if_invalid(self, context: str = "") -> None:
        """Raise InputValidationError if validation failed.

        Parameters
        ----------
        context : str
            Additional context for the error message

        Raises
        ------
        InputValidationError
            If validation failed, with formatted error details
        """
        if not self.is_valid:
            error_msgs = [str(e) for e in self.errors]
            context_str = f" for {context}" if context else ""
            msg = f"Validation failed{context_str}:\n\n" + "\n\n".join(error_msgs)
            raise InputValidationError(msg, self.errors)

    def log_warnings(self, logger: logging.Logger) -> None:
        for warning in self.warnings:
            logger.warning(warning)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another ValidationResult into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
        }


def _is_numeric_array(values: Any) -> bool:
    return isinstance(values, np.ndarray) and (
        np.issubdtype(values.dtype, np.number) or values.dtype == np.bool_
    )


def _is_positive_int(value: Any) -> bool:
    return (
        isinstance(value, numbers.Integral)
        and not isinstance(value, bool)
        and value >= 1
    )


def validate_dataset(dataset: Any) -> ValidationResult:
    """Check that a dataset exposes correctly typed and aligned fields."""
    result = ValidationResult()

    if not isinstance(dataset, Dataset):
        result.add(DatasetFieldError(
            message="Invalid dataset: expected a Dataset record",
            expected="Dataset",
            found=type(dataset).__name__,
        ))
        return result

    matrix = dataset.snp_matrix
    matrix_ok = sparse.issparse(matrix) and (
        np.issubdtype(matrix.dtype, np.number) or matrix.dtype == np.bool_
    )
    if not matrix_ok:
        result.add(DatasetFieldError(
            message="Invalid snp_matrix: expected a sparse numeric matrix",
            error_code="E102_MATRIX_TYPE",
            field_name="snp_matrix",
            expected="scipy.sparse matrix (numeric)",
            found=type(matrix).__name__,
        ))

    consensus = dataset.consensus
    consensus_ok = _is_numeric_array(consensus) and consensus.ndim == 1
    if not consensus_ok:
        result.add(DatasetFieldError(
            message="Invalid consensus: expected a numeric vector",
            error_code="E103_CONSENSUS_TYPE",
            field_name="consensus",
            expected="1-D numeric numpy array",
            found=type(consensus).__name__,
        ))

    prior = dataset.prior
    prior_ok = _is_numeric_array(prior) and prior.ndim == 2
    if not prior_ok:
        result.add(DatasetFieldError(
            message="Invalid prior: expected a dense numeric matrix",
            error_code="E104_PRIOR_TYPE",
            field_name="prior",
            expected="2-D numeric numpy array",
            found=type(prior).__name__,
        ))

    if not result.is_valid:
        return result

    n_sites, n_samples = matrix.shape
    if consensus.shape[0] != n_sites:
        result.add(ShapeMismatchError(
            message="Consensus length does not match the number of sites",
            expected=n_sites,
            found=consensus.shape[0],
        ))
    if prior.shape[1] != n_sites:
        result.add(ShapeMismatchError(
            message="Prior column count does not match the number of sites",
            expected=n_sites,
            found=prior.shape[1],
        ))
    if len(dataset.sample_ids) != n_samples:
        result.add(DatasetFieldError(
            message="Sample identifiers do not match the matrix columns",
            error_code="E106_SAMPLE_IDS",
            field_name="sample_ids",
            expected=n_samples,
            found=len(dataset.sample_ids),
        ))
    elif len(set(dataset.sample_ids)) != n_samples:
        result.warnings.append("Sample identifiers are not unique")

    return result


def validate_parameters(
    levels: Any,
    method: Any,
    core_budget: Any,
    k_init: Any = None,
    n_workers: Any = 1,
) -> ValidationResult:
    """Check run parameters before any clustering work starts."""
    result = ValidationResult()

    if not _is_positive_int(core_budget):
        result.add(ParameterError(
            message="Invalid value for core_budget!",
            error_code="E201_CORE_BUDGET",
            parameter="core_budget",
            expected="integer >= 1",
            found=core_budget,
        ))

    levels_ok = (
        isinstance(levels, numbers.Real)
        and not isinstance(levels, bool)
        and levels >= 0
        and float(levels).is_integer()
    )
    if not levels_ok:
        result.add(ParameterError(
            message="Invalid value for levels!",
            error_code="E202_LEVELS",
            parameter="levels",
            expected="non-negative integer",
            found=levels,
        ))

    if method not in SUPPORTED_METHODS:
        result.add(UnsupportedMethodError(
            message="Invalid method!",
            expected=list(SUPPORTED_METHODS),
            found=method,
        ))

    if k_init is not None and not _is_positive_int(k_init):
        result.add(ParameterError(
            message="Invalid value for k_init!",
            error_code="E204_K_INIT",
            parameter="k_init",
            expected="positive integer or None",
            found=k_init,
        ))

    if not _is_positive_int(n_workers):
        result.add(ParameterError(
            message="Invalid value for n_workers!",
            error_code="E205_N_WORKERS",
            parameter="n_workers",
            expected="integer >= 1",
            found=n_workers,
        ))

    return result
