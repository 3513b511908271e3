"""Core iodastats execution logic.

This module contains the actual runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.

Exit codes of :func:`main`:

- 0: every obs space succeeded
- 1: at least one obs space failed
- 2: the configuration could not be loaded or validated
"""

import sys
import json
import argparse
import logging
from argparse import Namespace
from typing import Optional, Dict, Any, List

import yaml
from pydantic import ValidationError

from iodastats.pipeline.orchestrator import (
    SOURCE_ERRORS,
    IodaStatsOrchestrator,
    RunSummary,
    setup_logging,
)
from iodastats.schemas.initialization import init_runtime_config
from iodastats.schemas.internal import InternalConfig


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SOURCE_FAILED = 1
EXIT_CONFIG_ERROR = 2

CONFIG_ERRORS = (ValidationError, FileNotFoundError, ImportError, ValueError, yaml.YAMLError)


def _execute(config: InternalConfig, config_path: str, verbose: bool = False) -> RunSummary:
    setup_logging(config.logging.level, config.logging.log_file)

    print(f"\n{'='*60}")
    print("IODA-Stats: observation statistics")
    print('='*60)
    print(f"Config:      {config_path}")
    print(f"Window:      {config.time_window.begin.isoformat()} .. {config.time_window.end.isoformat()}")
    print(f"Obs spaces:  {', '.join(o.name for o in config.obs_spaces)}")
    print(f"On failure:  {config.failure_policy}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        print('='*60)

    return IodaStatsOrchestrator(config).run()


def run_iodastats(
    config_path: str,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False
) -> RunSummary:
    """Compute statistics for every obs space of a configuration file.

    This is the core execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Configures logging
    3. Runs the orchestrator over all obs spaces

    Parameters
    ----------
    config_path : str
        Path to the run configuration (YAML, or Python file with CONFIG dict).
    cli_args : dict, optional
        Overrides. Keys: log_level, log_file, fail_fast. All optional.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    RunSummary
        Succeeded and failed obs spaces.

    Raises
    ------
    FileNotFoundError
        If config_path does not exist.
    ValueError
        If configuration validation fails.

    Examples
    --------
    Run with defaults::

        run_iodastats("config/stats.yaml")

    Abort on the first failing obs space::

        run_iodastats("config/stats.yaml", cli_args={"fail_fast": True})
    """
    args = Namespace(config=config_path, verbose=verbose, **(cli_args or {}))
    config = init_runtime_config(args)
    return _execute(config, config_path, verbose)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iodastats",
        description="Compute domain-resolved statistics of IODA observation files",
    )
    parser.add_argument("config", help="Path to run configuration (YAML or Python with CONFIG dict)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override log level")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--fail-fast", action="store_true",
                        help="Abort on the first failing obs space")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = init_runtime_config(args)
    except CONFIG_ERRORS as e:
        print(f"iodastats: invalid configuration {args.config}: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        summary = _execute(config, args.config, args.verbose)
    except SOURCE_ERRORS:
        logger.exception("Run aborted (fail fast)")
        return EXIT_SOURCE_FAILED

    return EXIT_OK if summary.ok else EXIT_SOURCE_FAILED


if __name__ == "__main__":
    sys.exit(main())
