"""Root-level pytest fixtures for the iodastats test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configurations through these fixtures (or
UserConfig) instead of constructing InternalConfig dicts by hand.
"""

import logging
import pytest
from pathlib import Path
import tempfile
import shutil

from iodastats.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def time_window():
    """Six-hour window centred on 2020-12-15T00Z, in user-file form."""
    return {"begin": "2020-12-14T21:00:00Z", "end": "2020-12-15T03:00:00Z"}


@pytest.fixture
def make_obs_space(temp_dir):
    """Factory for one user-form "obs spaces" entry.

    Examples
    --------
    >>> def test_something(make_obs_space):
    ...     obs = make_obs_space("sst.nc4", variables=["seaSurfaceTemperature"])
    """
    def _make(obsfile, **overrides):
        entry = {
            "obsfile": str(obsfile),
            "variables": ["airTemperature"],
            "groups to process": ["ObsValue"],
            "qc groups": ["EffectiveQC"],
            "statistics to compute": ["count", "mean", "RMS"],
            "output file": str(temp_dir / "out" / f"{Path(obsfile).stem}_stats.nc4"),
        }
        entry.update(overrides)
        return entry

    return _make


@pytest.fixture
def make_config(param_config, time_window):
    """Factory fixture for creating InternalConfig from user-form obs spaces.

    Examples
    --------
    >>> def test_run(make_config, make_obs_space):
    ...     config = make_config([make_obs_space("a.nc4")], failure_policy="fail_fast")
    ...     assert config.failure_policy == "fail_fast"
    """
    def _make(obs_spaces, **user_overrides):
        """Create InternalConfig with user overrides."""
        user = UserConfig.model_validate({
            "time window": time_window,
            "obs spaces": obs_spaces,
            **user_overrides,
        })
        return resolve_config(param_config, user, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def restore_root_logging():
    """Undo setup_logging() handler replacement after a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
