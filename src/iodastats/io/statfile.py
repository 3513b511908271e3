"""Statistics output file.

Layout of one statistics file (netCDF4)::

    dimensions:
        analysisCycle = UNLIMITED      (currently 1)
        statisticDomain = ndomains + 1
        Channel = nchannels            (only with channels)
    variables:
        string validTime(analysisCycle)            time window midpoint
        string statisticDomain(statisticDomain)    "Global", domain names...
        int    Channel(Channel)                    channel numbers
    group /<group>/<variable>:
        int   count(analysisCycle, statisticDomain[, Channel])
        float mean(analysisCycle, statisticDomain[, Channel])
        float RMS(analysisCycle, statisticDomain[, Channel])

The layout is declared once by :meth:`StatFile.initialize` and holds a
single analysis cycle. ``analysisCycle`` is a record dimension so files
from successive cycles can be concatenated along time. Statistics are
then filled in with :meth:`StatFile.write` through the same open handle.
Slots that are never written keep the netCDF default fill value.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np
import netCDF4

from iodastats.contracts import OutputFileError, require
from iodastats.stats.calcstats import slot_dtype
from iodastats.stats.mask import GLOBAL_DOMAIN

if TYPE_CHECKING:
    from iodastats.schemas.internal import InternalTimeWindowConfig

__all__ = ['StatFile', 'read_statfile', 'format_valid_time']

logger = logging.getLogger(__name__)

TIME_DIM = "analysisCycle"
DOMAIN_DIM = "statisticDomain"
CHANNEL_DIM = "Channel"
VALID_TIME_VAR = "validTime"


def format_valid_time(t: datetime) -> str:
    """Format an analysis time as ``YYYY-MM-DDThh:mm:ssZ``."""
    return t.strftime("%Y-%m-%dT%H:%M:%SZ")


class StatFile:
    """Writer for one statistics file, holding a single open handle.

    Use as a context manager so the file is closed on every exit path::

        with StatFile("stats_sst.nc") as statfile:
            statfile.initialize(time_window, ["seaSurfaceTemperature"], [],
                                ["ObsValue", "ombg"], ["count", "mean", "RMS"],
                                ["TropicalOcean"])
            statfile.write("ObsValue", "seaSurfaceTemperature", "count", 0, [1234])

    Parameters
    ----------
    path : str or Path
        Destination file. Replaced if it exists.
    file_format : str, optional
        netCDF4 data model. Groups and string variables need "NETCDF4".
    """

    def __init__(self, path, file_format: str = "NETCDF4"):
        self.path = Path(path)
        self.file_format = file_format
        self._nc: Optional[netCDF4.Dataset] = None
        self._ndomains = 0
        self._nchannels = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_open(self) -> bool:
        return self._nc is not None and self._nc.isopen()

    def initialize(self, time_window: "InternalTimeWindowConfig",
                   variables: Sequence[str], channels: Sequence[int],
                   groups: Sequence[str], statistics: Sequence[str],
                   domain_names: Sequence[str]) -> None:
        """Create the file and declare every dimension and output slot.

        Parameters
        ----------
        time_window : InternalTimeWindowConfig
            Its midpoint is stored in ``validTime``.
        variables, groups, statistics : sequence of str
            One slot is created per (group, variable, statistic).
        channels : sequence of int
            Channel numbers; empty means no channel dimension.
        domain_names : sequence of str
            Configured domains; "Global" is prepended.

        Raises
        ------
        OutputFileError
            If called twice, or the file cannot be created.
        """
        require(self._nc is None,
                f"{self.path}: statistics file already initialized", OutputFileError)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._nc = netCDF4.Dataset(self.path, "w", format=self.file_format)
        except (OSError, ValueError) as e:
            raise OutputFileError(f"Cannot create statistics file {self.path}: {e}") from e
        logger.info("Opening %s for writing...", self.path)

        try:
            self._declare(time_window, variables, channels, groups, statistics, domain_names)
        except Exception:
            self.close()
            raise

    def _declare(self, time_window, variables, channels, groups, statistics, domain_names):
        nc = self._nc
        domains = [GLOBAL_DOMAIN] + list(domain_names)
        self._ndomains = len(domains)
        self._nchannels = len(channels)

        nc.createDimension(TIME_DIM, None)
        nc.createDimension(DOMAIN_DIM, self._ndomains)
        dims = (TIME_DIM, DOMAIN_DIM)
        if channels:
            nc.createDimension(CHANNEL_DIM, self._nchannels)
            dims = dims + (CHANNEL_DIM,)
            vchan = nc.createVariable(CHANNEL_DIM, "i4", (CHANNEL_DIM,))
            vchan[:] = np.asarray(channels, dtype="i4")

        vtime = nc.createVariable(VALID_TIME_VAR, str, (TIME_DIM,))
        vtime.long_name = "analysis time (time window midpoint)"
        vtime[0] = format_valid_time(time_window.midpoint())

        vdom = nc.createVariable(DOMAIN_DIM, str, (DOMAIN_DIM,))
        vdom.long_name = "statistic domain; Global is unmasked"
        for i, name in enumerate(domains):
            vdom[i] = name

        # /group/variable/statistic
        for group in groups:
            ncgroup = nc.groups.get(group) or nc.createGroup(group)
            for variable in variables:
                ncvar_group = ncgroup.groups.get(variable) or ncgroup.createGroup(variable)
                for stat in statistics:
                    if stat in ncvar_group.variables:
                        continue
                    ncvar_group.createVariable(stat, slot_dtype(stat), dims)

        nc.sync()
        logger.debug("Declared %d groups x %d variables x %d statistics on %s",
                     len(groups), len(variables), len(statistics), dims)

    def write(self, group: str, variable: str, statistic: str,
              domain_index: int, values) -> None:
        """Write one statistic result at (time 0, domain_index[, :]).

        Parameters
        ----------
        group, variable, statistic : str
            Slot declared by :meth:`initialize`.
        domain_index : int
            0 for Global, i + 1 for the i-th configured domain.
        values : array-like
            One value, or one per channel.

        Raises
        ------
        OutputFileError
            Before initialization, after close, for undeclared slots,
            out-of-range domain indices or a wrong number of values.
        """
        require(self.is_open,
                f"{self.path}: write before initialize or after close", OutputFileError)

        path = f"/{group}/{variable}/{statistic}"
        try:
            ncvar = self._nc[path]
        except (IndexError, KeyError) as e:
            raise OutputFileError(f"{self.path}: undeclared slot {path}") from e
        require(isinstance(ncvar, netCDF4.Variable),
                f"{self.path}: {path} is not a variable", OutputFileError)

        require(0 <= domain_index < self._ndomains,
                f"{self.path}: domain index {domain_index} out of range [0, {self._ndomains})",
                OutputFileError)

        values = np.atleast_1d(np.asarray(values))
        expected = self._nchannels if self._nchannels else 1
        require(values.shape == (expected,),
                f"{self.path}: {path} expects {expected} values, got {values.size}",
                OutputFileError)

        if self._nchannels:
            ncvar[0, domain_index, :] = values.astype(ncvar.dtype)
        else:
            ncvar[0, domain_index] = values[0].astype(ncvar.dtype)

    def close(self) -> None:
        """Flush and close the file. Safe to call multiple times."""
        if self._nc is not None:
            if self._nc.isopen():
                self._nc.close()
                logger.debug("Closed %s", self.path)
            self._nc = None


def read_statfile(path) -> dict:
    """Read a statistics file back into plain Python / numpy objects.

    Returns
    -------
    dict
        ``valid_time`` (str), ``domains`` (list of str), ``channels``
        (list of int, empty without channels) and ``slots`` mapping
        "group/variable/statistic" to a masked array of shape
        (analysisCycle, statisticDomain[, Channel]).
    """
    with netCDF4.Dataset(path, "r") as nc:
        result = {
            "valid_time": str(nc[VALID_TIME_VAR][0]),
            "domains": [str(d) for d in nc[DOMAIN_DIM][:]],
            "channels": [int(c) for c in nc[CHANNEL_DIM][:]] if CHANNEL_DIM in nc.variables else [],
            "slots": {},
        }
        for group_name, group in nc.groups.items():
            for var_name, var_group in group.groups.items():
                for stat_name, ncvar in var_group.variables.items():
                    result["slots"][f"{group_name}/{var_name}/{stat_name}"] = ncvar[:]
    return result
