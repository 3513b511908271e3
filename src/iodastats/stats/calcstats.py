"""Observation statistics: count, mean and RMS of valid records.

A record is valid when its value is not the missing-value sentinel (nor
NaN/inf), its QC flag is 0 and its domain mask flag is 0. Statistics are
computed over valid records only, either as a single aggregate or per
channel when a channel selection is given.

Empty valid sets give count 0 and mean/RMS 0.0 (not NaN). Downstream
readers rely on this; note that it makes "no data" indistinguishable
from a true zero mean, so always read mean/RMS together with count.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Sequence, Union

import numpy as np

from iodastats.contracts import UnsupportedStatistic, assert_aligned
from iodastats.schemas.param import IODA_FLOAT_MISSING, IODA_INT_MISSING

__all__ = ['Statistic', 'ObsStats', 'valid_mask', 'slot_dtype']

logger = logging.getLogger(__name__)


def _count(values: np.ndarray, valid: np.ndarray) -> np.ndarray:
    return valid.sum(axis=0).astype(np.int32)


def _mean(values: np.ndarray, valid: np.ndarray) -> np.ndarray:
    n = valid.sum(axis=0)
    total = np.where(valid, values, 0.0).sum(axis=0)
    return np.divide(total, n, out=np.zeros(total.shape, dtype=np.float64), where=n > 0)


def _rms(values: np.ndarray, valid: np.ndarray) -> np.ndarray:
    n = valid.sum(axis=0)
    total = np.where(valid, values * values, 0.0).sum(axis=0)
    mean_square = np.divide(total, n, out=np.zeros(total.shape, dtype=np.float64), where=n > 0)
    return np.sqrt(mean_square)


class Statistic(str, Enum):
    """Supported statistics.

    Each variant knows its netCDF output type and its reduction, so the
    statistics engine and the output file never branch on names.
    """
    COUNT = "count"
    MEAN = "mean"
    RMS = "RMS"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None

    @classmethod
    def parse(cls, name: Union[str, "Statistic"]) -> "Statistic":
        """Look up a statistic by name, case-insensitively.

        Raises
        ------
        UnsupportedStatistic
            If the name is not count, mean or RMS.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedStatistic(str(name)) from None

    @property
    def dtype(self) -> str:
        """netCDF type code of the output slot."""
        return "i4" if self is Statistic.COUNT else "f4"

    @property
    def reduce(self) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
        return _REDUCERS[self]


_REDUCERS = {
    Statistic.COUNT: _count,
    Statistic.MEAN: _mean,
    Statistic.RMS: _rms,
}


def slot_dtype(name: str) -> str:
    """Output type for a configured statistic name.

    Unsupported names still get a (real typed) slot that stays at its
    fill value.
    """
    try:
        return Statistic.parse(name).dtype
    except UnsupportedStatistic:
        return "f4"


def valid_mask(data: np.ndarray, qcflags: np.ndarray, mask: np.ndarray,
               missing_value: float = IODA_FLOAT_MISSING,
               int_missing_value: int = IODA_INT_MISSING) -> np.ndarray:
    """Boolean array of valid records, same shape as ``data``.

    ``mask`` has one flag per location and is broadcast across channels.
    Float data is checked against ``missing_value`` in the data's own
    dtype, so a float32 file value matches the float32 rounding of the
    sentinel. Integer data is checked against ``int_missing_value``.
    """
    data = np.asarray(data)
    if np.issubdtype(data.dtype, np.floating):
        sentinel = np.asarray(missing_value).astype(data.dtype)
        present = (data != sentinel) & np.isfinite(data)
    elif np.issubdtype(data.dtype, np.integer):
        present = data != int_missing_value
    else:
        present = np.ones(data.shape, dtype=bool)
    loc_mask = np.asarray(mask)
    if data.ndim == 2:
        loc_mask = loc_mask[:, np.newaxis]
    return present & (np.asarray(qcflags) == 0) & (loc_mask == 0)


class ObsStats:
    """Compute count / mean / RMS of valid observations.

    Stateless apart from the missing-value sentinels; instances are cheap
    and may be created per call.

    Parameters
    ----------
    missing_value : float, optional
        Sentinel marking absent data (default: IODA float missing value).
    int_missing_value : int, optional
        Sentinel marking absent integer data (default: IODA int missing value).

    Examples
    --------
    >>> stats = ObsStats()
    >>> stats.get_mean([1, 2, 100, 4], [0, 0, 1, 0], [], [0, 0, 0, 0])
    array([2.33333333])
    """

    def __init__(self, missing_value: float = IODA_FLOAT_MISSING,
                 int_missing_value: int = IODA_INT_MISSING):
        self.missing_value = missing_value
        self.int_missing_value = int_missing_value

    def compute(self, statistic: Union[str, Statistic], data, qcflags,
                channels: Optional[Sequence[int]], mask) -> np.ndarray:
        """Compute one statistic.

        Parameters
        ----------
        statistic : str or Statistic
            Statistic name (count, mean, RMS).
        data : array-like
            Values, shape (nlocs,) or (nlocs, len(channels)).
        qcflags : array-like
            QC flags, same shape as data. 0 = accepted.
        channels : sequence of int or None
            Channel selection. Empty/None gives one aggregate value.
        mask : array-like
            Domain mask, shape (nlocs,). 0 = included.

        Returns
        -------
        np.ndarray
            One value per channel, or a length-1 array without channels.
            int32 for count, float64 otherwise.

        Raises
        ------
        UnsupportedStatistic
            For names other than count, mean, RMS.
        DimensionMismatch
            If data, qcflags and mask shapes disagree.
        """
        stat = Statistic.parse(statistic)
        data = np.asarray(data)
        qcflags = np.asarray(qcflags)
        mask = np.asarray(mask)
        nchans = len(channels) if channels else 0
        assert_aligned(data, qcflags, mask, nchans)

        valid = valid_mask(data, qcflags, mask, self.missing_value, self.int_missing_value)
        values = data.astype(np.float64)
        result = stat.reduce(values, valid)
        return np.atleast_1d(result)

    def get_obs_count(self, data, qcflags, channels, mask) -> np.ndarray:
        """Number of valid records (per channel)."""
        return self.compute(Statistic.COUNT, data, qcflags, channels, mask)

    def get_mean(self, data, qcflags, channels, mask) -> np.ndarray:
        """Mean of valid records (per channel); 0.0 when none are valid."""
        return self.compute(Statistic.MEAN, data, qcflags, channels, mask)

    def get_rms(self, data, qcflags, channels, mask) -> np.ndarray:
        """Root mean square of valid records (per channel); 0.0 when none are valid."""
        return self.compute(Statistic.RMS, data, qcflags, channels, mask)
