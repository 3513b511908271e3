"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: verbosity, log destination, failure policy.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from iodastats.schemas.base import IodaStatsBaseModel


class CLIConfig(IodaStatsBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(log_level="DEBUG", log_file="logs/stats.log")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_file: Optional[str] = None
    fail_fast: Optional[bool] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        logging_overrides = {}
        if self.log_level is not None:
            logging_overrides["level"] = self.log_level
        if self.log_file is not None:
            logging_overrides["log_file"] = str(self.log_file)
        if logging_overrides:
            overrides["logging"] = logging_overrides

        if self.fail_fast is not None:
            overrides["failure_policy"] = "fail_fast" if self.fail_fast else "skip_source"

        return overrides
