"""Pydantic configuration schemas for iodastats.

This module provides strictly typed configuration models. All
configuration validation, coercion, and normalization happens at schema
validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (JEDI-style YAML keys)
CLIConfig : class
    Command-line operational overrides
"""

from iodastats.schemas.resolve import resolve_config
from iodastats.schemas.internal import (
    InternalConfig,
    InternalDomainConfig,
    InternalMaskConstraint,
    InternalObsSpaceConfig,
    InternalTimeWindowConfig,
)
from iodastats.schemas.param import ParamConfig
from iodastats.schemas.user import UserConfig
from iodastats.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'InternalDomainConfig',
    'InternalMaskConstraint',
    'InternalObsSpaceConfig',
    'InternalTimeWindowConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
