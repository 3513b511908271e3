"""`iodastats` - observation-space statistics for data assimilation runs.

Reads IODA observation files, computes count / mean / RMS per group,
variable, domain and channel, and writes them to a small netCDF file
stamped with the analysis time for later concatenation and plotting.

Subpackages:
- stats: Mask and statistics engines
- io: Observation source reader and statistics file writer
- pipeline: Run orchestrator
- schemas: Configuration models
- contracts: Invariant enforcement and error types
- cli: Command-line entry point
"""

__version__ = "0.1.0"
