"""Domain masks built from metadata range constraints.

A domain is a named subset of observation locations. Each domain carries
up to three constraints of the form "metadata field within [min, max]";
a location is excluded (mask flag 1) as soon as any constraint fails.

Masks are computed once per obs space, before any statistics, and kept in
a read-only :class:`DomainMasks` arena indexed by domain position
(0 = Global, the unmasked aggregate).
"""

import logging
from typing import TYPE_CHECKING, Sequence

import numpy as np

from iodastats.contracts import DimensionMismatch, require

if TYPE_CHECKING:
    from iodastats.io.obs_space import ObsSource
    from iodastats.schemas.internal import InternalDomainConfig

__all__ = [
    'GLOBAL_DOMAIN',
    'DomainMasks',
    'update_mask',
    'build_domain_mask',
    'build_domain_masks',
    'split_variable',
]

logger = logging.getLogger(__name__)

GLOBAL_DOMAIN = "Global"

MASK_DTYPE = np.int8


def split_variable(name: str, default_group: str) -> tuple[str, str]:
    """Split ``"Group/variable"`` into its parts.

    Unqualified names are looked up in ``default_group``.

    >>> split_variable("MetaData/latitude", "MetaData")
    ('MetaData', 'latitude')
    >>> split_variable("sea_area_fraction", "MetaData")
    ('MetaData', 'sea_area_fraction')
    """
    if "/" in name:
        group, variable = name.rsplit("/", 1)
        return group.strip("/"), variable
    return default_group, name


def update_mask(values, vmin: float, vmax: float, previous_mask) -> np.ndarray:
    """Apply one range constraint to a mask.

    Locations whose value lies outside ``[vmin, vmax]`` are set to 1;
    all others keep their previous flag, so a location once excluded
    stays excluded.

    Parameters
    ----------
    values : array-like
        Metadata field values, one per location.
    vmin, vmax : float
        Closed interval of accepted values.
    previous_mask : array-like
        Current mask, one int flag per location. Not modified.

    Returns
    -------
    np.ndarray
        New int8 mask.

    Raises
    ------
    DimensionMismatch
        If ``values`` and ``previous_mask`` differ in length.

    Examples
    --------
    >>> update_mask([5, 15], 0, 10, [0, 0])
    array([0, 1], dtype=int8)
    >>> update_mask([1, 1], 0, 10, [0, 1])
    array([0, 1], dtype=int8)
    """
    values = np.asarray(values)
    previous = np.asarray(previous_mask)
    require(
        values.shape == previous.shape,
        f"Mask contract violated: {values.shape[0] if values.ndim else 0} values "
        f"for a mask of {previous.shape[0] if previous.ndim else 0} locations",
        DimensionMismatch,
    )

    out_of_range = (values < vmin) | (values > vmax)
    return np.where(out_of_range, 1, previous).astype(MASK_DTYPE)


def build_domain_mask(source: "ObsSource", domain: "InternalDomainConfig",
                      nlocs: int, metadata_group: str = "MetaData") -> np.ndarray:
    """Thread a zero mask through every configured constraint of a domain."""
    mask = np.zeros(nlocs, dtype=MASK_DTYPE)
    for constraint in domain.masks:
        if not constraint.variable:
            continue
        group, variable = split_variable(constraint.variable, metadata_group)
        values = source.get(group, variable)
        vmin, vmax = constraint.range
        mask = update_mask(values, vmin, vmax, mask)
        logger.debug("Domain %s: %s/%s in [%s, %s] -> %d excluded",
                     domain.name, group, variable, vmin, vmax, int(mask.sum()))
    return mask


class DomainMasks:
    """Read-only arena of per-domain masks for one obs space.

    Index 0 is always the Global domain (all zeros); configured domains
    follow in declared order.
    """

    def __init__(self, names: Sequence[str], masks: Sequence[np.ndarray]):
        require(len(names) == len(masks),
                f"DomainMasks: {len(names)} names for {len(masks)} masks")
        self.names = list(names)
        self._masks = []
        for mask in masks:
            frozen = np.array(mask, dtype=MASK_DTYPE, copy=True)
            frozen.flags.writeable = False
            self._masks.append(frozen)

    def __len__(self) -> int:
        return len(self._masks)

    def __getitem__(self, index: int) -> np.ndarray:
        return self._masks[index]

    def __iter__(self):
        return iter(zip(range(len(self._masks)), self.names, self._masks))

    def included(self, index: int) -> int:
        """Number of locations a domain keeps."""
        return int((self._masks[index] == 0).sum())


def build_domain_masks(source: "ObsSource", domains: Sequence["InternalDomainConfig"],
                       nlocs: int, metadata_group: str = "MetaData") -> DomainMasks:
    """Precompute Global + every configured domain mask for an obs space.

    Each domain starts from its own zero mask, so constraints of one
    domain never leak into another.
    """
    names = [GLOBAL_DOMAIN]
    masks = [np.zeros(nlocs, dtype=MASK_DTYPE)]
    for domain in domains:
        names.append(domain.name)
        masks.append(build_domain_mask(source, domain, nlocs, metadata_group))

    domain_masks = DomainMasks(names, masks)
    for index, name, _ in domain_masks:
        logger.info("Domain %d (%s): %d/%d locations included",
                    index, name, domain_masks.included(index), nlocs)
    return domain_masks
