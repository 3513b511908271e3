"""Array alignment contracts.

Enforces that the value, QC flag and mask arrays handed to the mask and
statistics engines describe the same set of observation locations.
"""

import numpy as np

from iodastats.contracts.base import require
from iodastats.contracts.failure import DimensionMismatch


def assert_mask(mask: np.ndarray, nlocs: int) -> None:
    """Enforce mask contract: one integer flag per location."""
    require(
        mask.ndim == 1,
        f"Mask contract violated: mask has {mask.ndim} dims, expected 1",
        DimensionMismatch,
    )
    require(
        mask.shape[0] == nlocs,
        f"Mask contract violated: mask has {mask.shape[0]} locations, expected {nlocs}",
        DimensionMismatch,
    )


def assert_aligned(data: np.ndarray, qcflags: np.ndarray, mask: np.ndarray,
                   nchans: int = 0) -> None:
    """Enforce statistics input contract.

    Parameters
    ----------
    data : np.ndarray
        Observation values, shape (nlocs,) or (nlocs, nchans)
    qcflags : np.ndarray
        QC flags, same shape as data
    mask : np.ndarray
        Domain mask, shape (nlocs,)
    nchans : int, optional
        Number of selected channels; 0 means a scalar series.

    Raises
    ------
    DimensionMismatch
        If any shape disagrees.
    """
    expected_ndim = 2 if nchans else 1
    require(
        data.ndim == expected_ndim,
        f"Statistics contract violated: data has {data.ndim} dims, expected {expected_ndim}",
        DimensionMismatch,
    )
    require(
        qcflags.shape == data.shape,
        f"Statistics contract violated: qc flags shape {qcflags.shape} != data shape {data.shape}",
        DimensionMismatch,
    )
    if nchans:
        require(
            data.shape[1] == nchans,
            f"Statistics contract violated: data has {data.shape[1]} channels, expected {nchans}",
            DimensionMismatch,
        )
    assert_mask(mask, data.shape[0])
