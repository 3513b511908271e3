"""Pipeline modules.

- orchestrator: Obs space loop, mask/statistics/output wiring
"""

from iodastats.pipeline.orchestrator import IodaStatsOrchestrator, RunSummary, setup_logging

__all__ = [
    "IodaStatsOrchestrator",
    "RunSummary",
    "setup_logging",
]
