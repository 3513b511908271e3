"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages and
defines the error taxonomy used across ``iodastats``.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Statistics handle science edge cases (empty valid sets, missing values)
"""

from iodastats.contracts.failure import (
    ContractViolation,
    ConfigurationError,
    DimensionMismatch,
    UnsupportedStatistic,
    OutputFileError,
    FailurePolicy,
)
from iodastats.contracts.base import require
from iodastats.contracts.arrays import assert_aligned, assert_mask
from iodastats.contracts.obs_space import assert_obs_space_consistent

__all__ = [
    "ContractViolation",
    "ConfigurationError",
    "DimensionMismatch",
    "UnsupportedStatistic",
    "OutputFileError",
    "FailurePolicy",
    "require",
    "assert_aligned",
    "assert_mask",
    "assert_obs_space_consistent",
]
