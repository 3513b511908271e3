"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, ConfigDict, field_validator, model_validator
from iodastats.schemas.base import IodaStatsBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalTimeWindowConfig(IodaStatsBaseModel):
    """Runtime assimilation time window (UTC)."""
    begin: datetime
    end: datetime

    @field_validator("begin", "end")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive datetimes are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.begin:
            raise ValueError(f"time window end {self.end} is before begin {self.begin}")
        return self

    def midpoint(self) -> datetime:
        """Analysis time: halfway between begin and end."""
        return self.begin + (self.end - self.begin) / 2


class InternalMaskConstraint(IodaStatsBaseModel):
    """One metadata range constraint of a domain.

    An empty ``variable`` means the constraint slot is not configured.
    """
    variable: str
    range: tuple[float, float]


class InternalDomainConfig(IodaStatsBaseModel):
    """Runtime domain definition."""
    name: str = Field(min_length=1)
    masks: list[InternalMaskConstraint] = Field(default_factory=list, max_length=3)


class InternalObsSpaceConfig(IodaStatsBaseModel):
    """Runtime configuration for one observation space.

    Cross-list invariants (channels vs. variables, groups vs. qc groups)
    are NOT validated here; the orchestrator checks them per obs space.
    """
    name: str
    obsfile: str
    variables: list[str] = Field(min_length=1)
    channels: list[int] = Field(default_factory=list)
    groups: list[str] = Field(min_length=1)
    qc_groups: list[str]
    statistics: list[str] = Field(min_length=1)
    domains: list[InternalDomainConfig] = Field(default_factory=list)
    output_file: str

    @property
    def domain_names(self) -> list[str]:
        return [d.name for d in self.domains]


class InternalReaderConfig(IodaStatsBaseModel):
    """Runtime reader configuration."""
    location_dim: str
    channel_var: str
    metadata_group: str


class InternalOutputConfig(IodaStatsBaseModel):
    """Runtime output configuration."""
    file_format: Literal["NETCDF4"]


class InternalLoggingConfig(IodaStatsBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_file: Optional[str]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(IodaStatsBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.missing_value = config.missing_value  # NOT .get()
            self.midpoint = config.time_window.midpoint()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO type checking

    All of that happens during config resolution, not in runtime code.
    """

    time_window: InternalTimeWindowConfig
    obs_spaces: list[InternalObsSpaceConfig] = Field(min_length=1)
    missing_value: float
    int_missing_value: int
    failure_policy: Literal["fail_fast", "skip_source"]
    reader: InternalReaderConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )

    @model_validator(mode="after")
    def check_unique_obs_spaces(self):
        """Obs space names key the run summary; output files must not collide."""
        names = [obs.name for obs in self.obs_spaces]
        dup_names = _duplicates(names)
        if dup_names:
            raise ValueError(f"duplicate obs space names: {', '.join(dup_names)}")

        outputs = [str(Path(obs.output_file).resolve()) for obs in self.obs_spaces]
        dup_outputs = _duplicates(outputs)
        if dup_outputs:
            raise ValueError(f"duplicate output files: {', '.join(dup_outputs)}")
        return self


def _duplicates(items: list[str]) -> list[str]:
    return [item for item, n in Counter(items).items() if n > 1]
