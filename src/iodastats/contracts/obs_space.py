"""Obs space configuration contract.

Cross-list invariants that Pydantic cannot see field by field. Checked by
the orchestrator before the observation file is opened, so a failing obs
space never touches its input.
"""

from typing import TYPE_CHECKING

from iodastats.contracts.base import require
from iodastats.contracts.failure import ConfigurationError

if TYPE_CHECKING:
    from iodastats.schemas.internal import InternalObsSpaceConfig


def assert_obs_space_consistent(obs_space: "InternalObsSpaceConfig") -> None:
    """Enforce obs space configuration contract.

    Raises
    ------
    ConfigurationError
        If channels are combined with several variables, or if the
        groups and QC groups lists have different lengths.
    """
    require(
        not (obs_space.channels and len(obs_space.variables) > 1),
        f"{obs_space.name}: cannot use channels with multiple variables "
        f"({len(obs_space.variables)} variables, {len(obs_space.channels)} channels)",
        ConfigurationError,
    )
    require(
        len(obs_space.groups) == len(obs_space.qc_groups),
        f"{obs_space.name}: groups to process ({len(obs_space.groups)}) and "
        f"qc groups ({len(obs_space.qc_groups)}) must have the same length",
        ConfigurationError,
    )
