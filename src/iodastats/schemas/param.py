"""ParamConfig: Expert defaults for iodastats.

This module defines the complete default configuration. ALL tunable
parameters that are not specific to one run must have defaults here.
No runtime code should define fallback values - this is the single
source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field
from iodastats.schemas.base import IodaStatsBaseModel


# IODA/oops missing value for 32-bit floats (util::missingValue<float>())
IODA_FLOAT_MISSING = -3.3687953e+38
# IODA/oops missing value for 32-bit integers (util::missingValue<int>())
IODA_INT_MISSING = -2147483647


# =============================================================================
# Nested Configuration Models
# =============================================================================

class ReaderConfig(IodaStatsBaseModel):
    """Observation file reader configuration."""
    location_dim: str = Field("Location", description="Location dimension name (IODA v1: nlocs)")
    channel_var: str = Field("Channel", description="Channel number variable (IODA v1: nchans)")
    metadata_group: str = Field("MetaData", description="Group used for unqualified mask variables")


class OutputConfig(IodaStatsBaseModel):
    """Statistics file output configuration."""
    file_format: Literal["NETCDF4"] = "NETCDF4"


class LoggingConfig(IodaStatsBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(IodaStatsBaseModel):
    """Expert configuration with complete defaults.

    Run-specific content (time window, obs spaces) is not defined here;
    it comes from the user configuration file.
    """

    missing_value: float = IODA_FLOAT_MISSING
    int_missing_value: int = IODA_INT_MISSING
    failure_policy: Literal["fail_fast", "skip_source"] = "skip_source"
    reader: ReaderConfig = Field(default_factory=ReaderConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
