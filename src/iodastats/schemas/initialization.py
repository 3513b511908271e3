"""Complete runtime initialization for iodastats.

This module handles loading the user configuration file and resolving it,
together with command-line overrides, into the InternalConfig the
orchestrator runs on.

Configuration files may be YAML (the JEDI way of writing run
configurations) or Python files defining a ``CONFIG`` dict.
"""

import importlib.util
from pathlib import Path

import yaml

from iodastats.schemas.resolve import resolve_config
from iodastats.schemas.param import ParamConfig
from iodastats.schemas.user import UserConfig
from iodastats.schemas.cli import CLIConfig
from iodastats.schemas.internal import InternalConfig


def _load_python_config(path: Path) -> dict:
    """Load CONFIG dict from a Python file."""
    spec = importlib.util.spec_from_file_location("config_module", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def load_user_config_dict(config_path: str) -> dict:
    """Load the raw user config dict, before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to a YAML file (.yaml / .yml) or a Python file containing
        a CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If the file does not hold a mapping / CONFIG dict.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    if path.suffix == ".py":
        return _load_python_config(path)

    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must contain a mapping at the top level")
    return data


def init_runtime_config(args) -> InternalConfig:
    """Resolve the runtime configuration from parsed command-line args.

    Parameters
    ----------
    args : argparse.Namespace
        Command line arguments with ``config`` path and optional
        ``log_level``, ``log_file``, ``fail_fast``, ``verbose``.

    Returns
    -------
    InternalConfig
        Fully validated, ready-to-use runtime configuration.

    Examples
    --------
    >>> args = parser.parse_args()
    >>> config = init_runtime_config(args)
    >>> IodaStatsOrchestrator(config).run()
    """
    config_path = getattr(args, 'config', None)
    if not config_path:
        raise ValueError("Config path required in args.config")

    param_cfg = ParamConfig()
    user_cfg = UserConfig.model_validate(load_user_config_dict(config_path))

    log_level = getattr(args, 'log_level', None)
    if getattr(args, 'verbose', False):
        log_level = "DEBUG"

    cli_args = {
        k: v
        for k, v in {
            "log_level": log_level,
            "log_file": getattr(args, 'log_file', None),
            "fail_fast": True if getattr(args, 'fail_fast', False) else None,
        }.items()
        if v is not None
    }
    cli_cfg = CLIConfig.model_validate(cli_args)

    return resolve_config(param_cfg, user_cfg, cli_cfg)
