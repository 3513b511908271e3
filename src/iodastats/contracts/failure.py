"""Centralized failure policy and error taxonomy.

Contracts fail fast, loud, and once. Every error the pipeline raises on
purpose is defined here so callers can tell configuration problems,
array-shape bugs, unsupported requests and output failures apart.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """How the orchestrator reacts to a failing observation space.

    FAIL_FAST: Raise immediately and abort the run
    SKIP_SOURCE (default): Log the failure, continue with the next obs space
    """
    FAIL_FAST = "fail_fast"
    SKIP_SOURCE = "skip_source"


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic or inconsistent input arrays,
    not bad user configuration. It means a stage did not receive or
    produce the invariants it promised.

    Key distinction:
    - ValidationError: Malformed config (handled by Pydantic)
    - ConfigurationError: Well-formed config with inconsistent lists
    - ContractViolation: Pipeline/array invariant broken
    """
    pass


class ConfigurationError(ValueError):
    """Obs space configuration is internally inconsistent.

    Raised before any observation I/O, e.g. channels combined with more
    than one variable, or groups and QC groups of different lengths.
    """
    pass


class DimensionMismatch(ContractViolation):
    """Data, QC flag and mask arrays do not have aligned lengths."""
    pass


class UnsupportedStatistic(ValueError):
    """Statistic name outside the supported set (count, mean, RMS).

    Non-fatal: the orchestrator logs it and leaves the output slot at
    its fill value.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} not supported")


class OutputFileError(OSError):
    """Statistics file cannot be created, or a write targets an undeclared
    slot or an out-of-range index."""
    pass
