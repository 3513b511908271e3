"""Statistics modules.

- mask: Domain masks from metadata range constraints
- calcstats: count / mean / RMS of valid observations
"""

from iodastats.stats.mask import (
    GLOBAL_DOMAIN,
    DomainMasks,
    update_mask,
    build_domain_mask,
    build_domain_masks,
)
from iodastats.stats.calcstats import Statistic, ObsStats, valid_mask, slot_dtype

__all__ = [
    "GLOBAL_DOMAIN",
    "DomainMasks",
    "update_mask",
    "build_domain_mask",
    "build_domain_masks",
    "Statistic",
    "ObsStats",
    "valid_mask",
    "slot_dtype",
]
