"""Run orchestration: obs spaces x variables x groups x domains x statistics.

For each configured observation space, in order:

1. Check the obs space configuration (before touching any file)
2. Open the observation file
3. Build every domain mask once (Global + configured domains)
4. Create the statistics file and declare its layout
5. For each variable x group: fetch values and QC flags
6. For each domain x statistic: compute, log and write the result

Obs spaces are processed serially. A failing obs space is logged and
recorded in the run summary, and the next one is processed, unless the
failure policy is fail_fast.
"""

import logging
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from iodastats.contracts import (
    ContractViolation,
    FailurePolicy,
    UnsupportedStatistic,
    assert_obs_space_consistent,
)
from iodastats.io.obs_space import IodaObsSpace, ObsSource
from iodastats.io.statfile import StatFile
from iodastats.stats.calcstats import ObsStats, Statistic
from iodastats.stats.mask import DomainMasks, build_domain_masks
from iodastats.schemas import InternalConfig, InternalObsSpaceConfig

__all__ = ['IodaStatsOrchestrator', 'RunSummary', 'setup_logging']

logger = logging.getLogger(__name__)

# Errors that abort one obs space but not the run
SOURCE_ERRORS = (ContractViolation, OSError, KeyError, ValueError)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure root logger with console and optional file handlers.

    Existing root handlers are replaced, so call this once from the
    command-line entry point, not from library code.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_file)


@dataclass
class RunSummary:
    """Outcome of one run: obs spaces that succeeded and failed."""
    succeeded: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def log(self) -> None:
        logger.info("=" * 60)
        logger.info("Obs spaces processed: %d succeeded, %d failed",
                    len(self.succeeded), len(self.failed))
        for name, reason in self.failed.items():
            logger.error("  FAILED %s: %s", name, reason)
        logger.info("=" * 60)


class IodaStatsOrchestrator:
    """Drives statistics computation for every configured obs space.

    Parameters
    ----------
    config : InternalConfig
        Fully validated runtime configuration.
    source_factory : callable, optional
        Called with an obs space config, returns an open
        :class:`~iodastats.io.obs_space.ObsSource`. Defaults to opening
        the obs space's IODA file with :class:`IodaObsSpace`.

    Examples
    --------
    >>> config = resolve_config(ParamConfig(), user_cfg)
    >>> summary = IodaStatsOrchestrator(config).run()
    >>> summary.ok
    True
    """

    def __init__(self, config: InternalConfig,
                 source_factory: Optional[Callable[[InternalObsSpaceConfig], ObsSource]] = None):
        self.config = config
        self.source_factory = source_factory or self._open_ioda

    def _open_ioda(self, obs_space: InternalObsSpaceConfig) -> IodaObsSpace:
        return IodaObsSpace(
            obs_space.obsfile,
            location_dim=self.config.reader.location_dim,
            channel_var=self.config.reader.channel_var,
        )

    def run(self) -> RunSummary:
        """Process every obs space and return the run summary.

        Raises
        ------
        Exception
            Only with failure_policy fail_fast: the first obs space error.
        """
        logger.info("=" * 60)
        logger.info("IODA-Stats: %d obs space(s), analysis time %s",
                    len(self.config.obs_spaces), self.config.time_window.midpoint().isoformat())
        logger.info("=" * 60)

        summary = RunSummary()
        # Serial for now; obs spaces share no state, so they could run in parallel
        for obs_space in self.config.obs_spaces:
            try:
                self.process_obs_space(obs_space)
            except SOURCE_ERRORS as e:
                if self.config.failure_policy == FailurePolicy.FAIL_FAST.value:
                    raise
                logger.exception("%s: processing failed", obs_space.name)
                summary.failed[obs_space.name] = f"{type(e).__name__}: {e}"
            else:
                summary.succeeded.append(obs_space.name)

        summary.log()
        return summary

    def process_obs_space(self, obs_space: InternalObsSpaceConfig) -> None:
        """Compute and write all statistics of one obs space.

        Raises
        ------
        ConfigurationError
            Before any I/O, for inconsistent channel/variable or group lists.
        DimensionMismatch
            If fetched arrays do not line up.
        OutputFileError
            If the statistics file cannot be created or written.
        """
        assert_obs_space_consistent(obs_space)
        statistics = self._supported_statistics(obs_space)

        logger.info("IODA-Stats: Processing %s", obs_space.obsfile)
        with closing(self.source_factory(obs_space)) as source:
            nlocs = source.nlocs
            logger.info("%s: nlocs = %d", obs_space.obsfile, nlocs)

            masks = build_domain_masks(source, obs_space.domains, nlocs,
                                       self.config.reader.metadata_group)

            with StatFile(obs_space.output_file, self.config.output.file_format) as statfile:
                statfile.initialize(
                    self.config.time_window,
                    obs_space.variables,
                    obs_space.channels,
                    obs_space.groups,
                    obs_space.statistics,
                    obs_space.domain_names,
                )
                for variable in obs_space.variables:
                    for group, qc_group in zip(obs_space.groups, obs_space.qc_groups):
                        self._process_group_variable(
                            source, statfile, obs_space, group, qc_group, variable,
                            masks, statistics,
                        )

        logger.info("%s: wrote %s", obs_space.name, obs_space.output_file)

    def _supported_statistics(self, obs_space: InternalObsSpaceConfig) -> list:
        """Pair configured names with Statistic variants, dropping unknown ones."""
        supported = []
        for name in obs_space.statistics:
            try:
                supported.append((name, Statistic.parse(name)))
            except UnsupportedStatistic:
                logger.warning("%s: %s not supported. Skipping.", obs_space.name, name)
        return supported

    def _process_group_variable(self, source: ObsSource, statfile: StatFile,
                                obs_space: InternalObsSpaceConfig, group: str,
                                qc_group: str, variable: str, masks: DomainMasks,
                                statistics: list) -> None:
        """Domain-major, statistic-minor loop for one group/variable."""
        logger.info("%s: Now processing %s/%s", obs_space.obsfile, group, variable)

        channels = obs_space.channels or None
        data = source.get(group, variable, channels)
        qcflag = source.get(qc_group, variable, channels)

        obstat = ObsStats(self.config.missing_value, self.config.int_missing_value)
        for index, domain_name, mask in masks:
            for name, stat in statistics:
                values = obstat.compute(stat, data, qcflag, obs_space.channels, mask)
                logger.info("%s/%s [%s] %s: %s", group, variable, domain_name, name,
                            values.tolist())
                statfile.write(group, variable, name, index, values)
