"""UserConfig: Forgiving user-facing configuration.

This schema accepts the run configuration the way JEDI applications write
it in YAML: keys with spaces ("obs spaces", "groups to process"), optional
"obs space" / "domain" wrapper mappings, the observation file nested under
"obsdatain.engine.obsfile", and channel lists written as range strings
("1-5, 7").

UserConfig is converted to internal overrides during resolution; it never
reaches runtime code.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Literal, Optional, Any
from pydantic import ConfigDict, Field, field_validator, model_validator
from iodastats.schemas.base import IodaStatsBaseModel


_MASK_SLOTS = ("first", "second", "third")


def parse_channels(value: Any) -> list[int]:
    """Parse a channel selection into a list of ints, keeping its order.

    Accepts a list of ints, a single int, or a comma separated string of
    numbers and inclusive ranges.

    Examples
    --------
    >>> parse_channels("1-3, 7")
    [1, 2, 3, 7]
    >>> parse_channels([5, 9])
    [5, 9]
    """
    if value is None:
        return []
    if isinstance(value, int):
        return [value]
    if isinstance(value, str):
        channels = []
        for token in value.split(","):
            token = token.strip()
            if not token:
                continue
            if "-" in token:
                lo, hi = (int(t) for t in token.split("-", 1))
                if hi < lo:
                    raise ValueError(f"Invalid channel range: {token}")
                channels.extend(range(lo, hi + 1))
            else:
                channels.append(int(token))
        return channels
    return [int(c) for c in value]


class _UserModel(IodaStatsBaseModel):
    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )


class UserTimeWindowConfig(_UserModel):
    """Time window given as begin + end, or begin + ISO-8601 length.

    ``bound to include`` is accepted so JEDI run YAML validates unchanged,
    but it is ignored: only the window midpoint is used, and that does not
    depend on which bound is inclusive.
    """
    begin: datetime
    end: Optional[datetime] = None
    length: Optional[timedelta] = None
    # ignored, see class docstring
    bound_to_include: Optional[Literal["begin", "end"]] = Field(None, alias="bound to include")

    @model_validator(mode="after")
    def require_end_or_length(self):
        if (self.end is None) == (self.length is None):
            raise ValueError("time window needs exactly one of 'end' or 'length'")
        return self

    def resolved_end(self) -> datetime:
        return self.end if self.end is not None else self.begin + self.length


class UserDomainConfig(_UserModel):
    """User-facing domain definition with up to three mask constraints."""
    name: str
    first_mask_variable: Optional[str] = Field(None, alias="first mask variable")
    first_mask_range: Optional[tuple[float, float]] = Field(None, alias="first mask range")
    second_mask_variable: Optional[str] = Field(None, alias="second mask variable")
    second_mask_range: Optional[tuple[float, float]] = Field(None, alias="second mask range")
    third_mask_variable: Optional[str] = Field(None, alias="third mask variable")
    third_mask_range: Optional[tuple[float, float]] = Field(None, alias="third mask range")

    @model_validator(mode="before")
    @classmethod
    def unwrap_domain(cls, data):
        """Accept ``{"domain": {...}}`` as written in JEDI YAML."""
        if isinstance(data, dict) and set(data) == {"domain"}:
            return data["domain"]
        return data

    @model_validator(mode="after")
    def check_ranges(self):
        for slot in _MASK_SLOTS:
            variable = getattr(self, f"{slot}_mask_variable")
            bounds = getattr(self, f"{slot}_mask_range")
            if not variable:
                continue
            if bounds is None:
                raise ValueError(f"domain {self.name}: '{slot} mask variable' needs '{slot} mask range'")
            if bounds[0] > bounds[1]:
                raise ValueError(f"domain {self.name}: {slot} mask range min {bounds[0]} > max {bounds[1]}")
        return self

    def to_internal(self) -> dict:
        """Convert to the InternalDomainConfig structure.

        Unconfigured slots (no variable or empty name) are dropped.
        """
        masks = []
        for slot in _MASK_SLOTS:
            variable = getattr(self, f"{slot}_mask_variable")
            if variable:
                masks.append({"variable": variable,
                              "range": getattr(self, f"{slot}_mask_range")})
        return {"name": self.name, "masks": masks}


class UserObsSpaceConfig(_UserModel):
    """User-facing obs space entry of the "obs spaces" list."""
    name: Optional[str] = None
    obsfile: str
    variables: list[str]
    channels: list[int] = Field(default_factory=list)
    groups: list[str] = Field(alias="groups to process")
    qc_groups: list[str] = Field(alias="qc groups")
    statistics: list[str] = Field(alias="statistics to compute")
    domains: list[UserDomainConfig] = Field(default_factory=list, alias="domains to process")
    output_file: str = Field(alias="output file")

    @model_validator(mode="before")
    @classmethod
    def unwrap_obs_space(cls, data):
        """Flatten the JEDI "obs space" block.

        ``obs space.name`` and ``obs space.obsdatain.engine.obsfile`` are
        lifted to the top level; other keys in the block (simulated
        variables, engine type, ...) are not used here.
        """
        if not isinstance(data, dict) or "obs space" not in data:
            return data
        data = dict(data)
        block = data.pop("obs space") or {}
        if "name" in block:
            data.setdefault("name", block["name"])
        engine = block.get("obsdatain", {}).get("engine", {})
        if "obsfile" in engine:
            data.setdefault("obsfile", engine["obsfile"])
        return data

    @field_validator("channels", mode="before")
    @classmethod
    def coerce_channels(cls, v):
        """Accept range strings like "1-5, 7"."""
        return parse_channels(v)

    @field_validator("variables", "groups", "qc_groups", "statistics", mode="before")
    @classmethod
    def coerce_str_list(cls, v):
        """Accept a single name where a list is expected."""
        if isinstance(v, str):
            return [v]
        return v

    def to_internal(self) -> dict:
        return {
            "name": self.name or Path(self.obsfile).stem,
            "obsfile": self.obsfile,
            "variables": list(self.variables),
            "channels": list(self.channels),
            "groups": list(self.groups),
            "qc_groups": list(self.qc_groups),
            "statistics": list(self.statistics),
            "domains": [d.to_internal() for d in self.domains],
            "output_file": self.output_file,
        }


class UserLoggingConfig(_UserModel):
    """User-facing logging config."""
    level: Optional[str] = None
    log_file: Optional[str] = Field(None, alias="log file")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Normalize level names to uppercase."""
        if isinstance(v, str):
            return v.upper().strip()
        return v


class UserConfig(_UserModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig.model_validate(yaml.safe_load(open("stats.yaml")))
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    time_window: Optional[UserTimeWindowConfig] = Field(None, alias="time window")
    obs_spaces: list[UserObsSpaceConfig] = Field(default_factory=list, alias="obs spaces")
    missing_value: Optional[float] = Field(None, alias="missing value")
    int_missing_value: Optional[int] = Field(None, alias="int missing value")
    failure_policy: Optional[Literal["fail_fast", "skip_source"]] = Field(None, alias="failure policy")
    logging: Optional[UserLoggingConfig] = None

    def to_internal_overrides(self) -> dict:
        """Convert user config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.time_window is not None:
            overrides["time_window"] = {
                "begin": self.time_window.begin,
                "end": self.time_window.resolved_end(),
            }

        if self.obs_spaces:
            overrides["obs_spaces"] = [o.to_internal() for o in self.obs_spaces]

        if self.missing_value is not None:
            overrides["missing_value"] = self.missing_value

        if self.int_missing_value is not None:
            overrides["int_missing_value"] = self.int_missing_value

        if self.failure_policy is not None:
            overrides["failure_policy"] = self.failure_policy

        if self.logging is not None:
            logging_overrides = {}
            if self.logging.level is not None:
                logging_overrides["level"] = self.logging.level
            if self.logging.log_file is not None:
                logging_overrides["log_file"] = self.logging.log_file
            if logging_overrides:
                overrides["logging"] = logging_overrides

        return overrides
