"""Read observation values, QC flags and metadata from IODA files.

IODA files are hierarchical netCDF4/HDF5 files: one group per kind of
quantity (``MetaData``, ``ObsValue``, ``ObsError``, ``EffectiveQC``,
``ombg``, ...) each holding one variable per observed quantity, all on a
shared ``Location`` dimension and, for radiances, a ``Channel`` dimension.

Groups are opened lazily with xarray and cached for the lifetime of the
reader. Values are returned raw (no fill-value masking or scaling) so the
statistics engine sees the IODA missing-value sentinel untouched.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import xarray as xr

__all__ = ['ObsSource', 'IodaObsSpace']

logger = logging.getLogger(__name__)


@runtime_checkable
class ObsSource(Protocol):
    """What the orchestrator needs from an observation store."""

    @property
    def nlocs(self) -> int:
        ...

    def get(self, group: str, variable: str,
            channels: Optional[Sequence[int]] = None) -> np.ndarray:
        ...

    def close(self) -> None:
        ...


class IodaObsSpace:
    """Read-only access to one IODA observation file.

    Parameters
    ----------
    path : str or Path
        IODA file to read.
    location_dim : str, optional
        Name of the location dimension (IODA v3: "Location", v1: "nlocs").
    channel_var : str, optional
        Name of the channel dimension / channel-number variable
        (IODA v3: "Channel", v1: "nchans").

    Raises
    ------
    FileNotFoundError
        If the file does not exist.

    Examples
    --------
    >>> with IodaObsSpace("amsua_n19.nc") as obs:
    ...     tb = obs.get("ObsValue", "brightnessTemperature", channels=[5, 6])
    ...     tb.shape
    (nlocs, 2)
    """

    def __init__(self, path, location_dim: str = "Location", channel_var: str = "Channel"):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Observation file not found: {self.path}")
        self.location_dim = location_dim
        self.channel_var = channel_var

        self._root = xr.open_dataset(self.path, mask_and_scale=False, decode_times=False)
        self._groups = {}
        self._nlocs = None
        logger.debug("Opened observation file: %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def nlocs(self) -> int:
        """Number of observation locations in the file."""
        if self._nlocs is None:
            if self.location_dim in self._root.sizes:
                self._nlocs = int(self._root.sizes[self.location_dim])
            else:
                # Dimension only declared inside groups
                for name in ("MetaData", "ObsValue"):
                    sizes = self._group(name).sizes
                    if self.location_dim in sizes:
                        self._nlocs = int(sizes[self.location_dim])
                        break
                else:
                    raise KeyError(f"No '{self.location_dim}' dimension in {self.path}")
        return self._nlocs

    def _group(self, group: str) -> xr.Dataset:
        if group not in self._groups:
            try:
                self._groups[group] = xr.open_dataset(
                    self.path, group=group, mask_and_scale=False, decode_times=False
                )
            except OSError as e:
                raise KeyError(f"Group '{group}' not found in {self.path}") from e
        return self._groups[group]

    def _channel_index(self, channels: Sequence[int]) -> list:
        if self.channel_var not in self._root.variables:
            raise KeyError(f"No '{self.channel_var}' variable in {self.path}")
        numbers = [int(c) for c in self._root[self.channel_var].values]
        position = {number: i for i, number in enumerate(numbers)}
        missing = [c for c in channels if c not in position]
        if missing:
            raise KeyError(f"Channels {missing} not found in {self.path}")
        return [position[c] for c in channels]

    def get(self, group: str, variable: str,
            channels: Optional[Sequence[int]] = None) -> np.ndarray:
        """Fetch one variable of one group.

        Parameters
        ----------
        group : str
            IODA group name, e.g. "ObsValue" or "EffectiveQC".
        variable : str
            Variable name within the group.
        channels : sequence of int, optional
            Channel numbers to select. When given, the result has shape
            (nlocs, len(channels)) with columns in the requested order.

        Returns
        -------
        np.ndarray
            Raw values.

        Raises
        ------
        KeyError
            If the group, variable or a requested channel does not exist.
        ValueError
            If channels are requested for a variable without a channel axis.
        """
        ds = self._group(group)
        if variable not in ds.variables:
            raise KeyError(f"Variable '{group}/{variable}' not found in {self.path}")
        da = ds[variable]

        if not channels:
            return np.asarray(da.values)

        if self.channel_var not in da.dims:
            raise ValueError(
                f"'{group}/{variable}' has dims {da.dims}, no '{self.channel_var}' axis to select"
            )
        index = self._channel_index(channels)
        selected = da.isel({self.channel_var: index})
        location_dim = da.dims[0] if self.location_dim not in da.dims else self.location_dim
        return np.asarray(selected.transpose(location_dim, self.channel_var).values)

    def close(self) -> None:
        """Close the root dataset and every opened group. Safe to call twice."""
        for ds in self._groups.values():
            ds.close()
        self._groups.clear()
        if self._root is not None:
            self._root.close()
            self._root = None
