"""File I/O modules.

- obs_space: Read IODA observation files
- statfile: Write statistics files
"""

from iodastats.io.obs_space import ObsSource, IodaObsSpace
from iodastats.io.statfile import StatFile, read_statfile, format_valid_time

__all__ = [
    "ObsSource",
    "IodaObsSpace",
    "StatFile",
    "read_statfile",
    "format_valid_time",
]
