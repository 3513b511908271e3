"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces semantic invariants of the pipeline, not input sanitizing.
"""

from typing import Type

from iodastats.contracts.failure import ContractViolation


def require(condition: bool, message: str,
            error: Type[Exception] = ContractViolation) -> None:
    """Enforce a pipeline contract.

    This is called at stage boundaries to verify inputs carry the
    guaranteed invariants. It is fail-fast: no recovery, no fallback,
    no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ``error`` is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    error : type, optional
        Exception class to raise (default: ContractViolation).

    Raises
    ------
    ContractViolation
        Or the given ``error`` type, if condition is False.

    Examples
    --------
    >>> require(data.shape == qcflags.shape, "QC flags misaligned", DimensionMismatch)
    >>> require(len(groups) == len(qc_groups), "group lists differ", ConfigurationError)
    """
    if not condition:
        raise error(message)
