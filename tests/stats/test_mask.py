"""Tests for domain mask construction."""

import numpy as np
import pytest

from iodastats.contracts import DimensionMismatch
from iodastats.schemas import InternalDomainConfig
from iodastats.stats.mask import (
    GLOBAL_DOMAIN,
    DomainMasks,
    build_domain_mask,
    build_domain_masks,
    split_variable,
    update_mask,
)

pytestmark = pytest.mark.unit


class DictSource:
    """In-memory observation source keyed by (group, variable)."""

    def __init__(self, fields, nlocs):
        self.fields = fields
        self.nlocs = nlocs
        self.requests = []

    def get(self, group, variable, channels=None):
        self.requests.append((group, variable))
        return np.asarray(self.fields[(group, variable)])

    def close(self):
        pass


def make_domain(name, *constraints):
    return InternalDomainConfig(
        name=name,
        masks=[{"variable": v, "range": r} for v, r in constraints],
    )


class TestUpdateMask:
    """Single range constraint application."""

    def test_out_of_range_positions_are_excluded(self):
        result = update_mask([5, 15], 0, 10, [0, 0])
        np.testing.assert_array_equal(result, [0, 1])

    def test_mask_is_monotonic(self):
        """A position once excluded stays excluded, even if in range later."""
        first = update_mask([5, 15], 0, 10, [0, 0])
        second = update_mask([1, 1], 0, 10, first)
        np.testing.assert_array_equal(second, [0, 1])

    def test_bounds_are_inclusive(self):
        result = update_mask([0.0, 10.0, -0.1, 10.1], 0.0, 10.0, [0, 0, 0, 0])
        np.testing.assert_array_equal(result, [0, 0, 1, 1])

    def test_previous_mask_not_modified(self):
        previous = np.zeros(3, dtype=np.int8)
        update_mask([100, 100, 100], 0, 1, previous)
        assert previous.sum() == 0

    def test_result_dtype_is_int8(self):
        assert update_mask([1], 0, 2, [0]).dtype == np.int8

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatch, match="3 values for a mask of 2"):
            update_mask([1, 2, 3], 0, 10, [0, 0])


class TestSplitVariable:

    def test_qualified_name(self):
        assert split_variable("MetaData/latitude", "MetaData") == ("MetaData", "latitude")

    def test_unqualified_name_uses_default_group(self):
        assert split_variable("latitude", "MetaData") == ("MetaData", "latitude")

    def test_leading_slash(self):
        assert split_variable("/GeoVaLs/sea_area_fraction", "MetaData") == ("GeoVaLs", "sea_area_fraction")


class TestBuildDomainMask:
    """Constraint threading for one domain."""

    def test_two_constraints_accumulate(self):
        source = DictSource({
            ("MetaData", "latitude"): [-40.0, -10.0, 0.0, 10.0],
            ("MetaData", "surfaceQualifier"): [0, 0, 1, 0],
        }, nlocs=4)
        domain = make_domain(
            "TropicalOcean",
            ("latitude", (-30.0, 30.0)),
            ("MetaData/surfaceQualifier", (0.0, 0.0)),
        )

        mask = build_domain_mask(source, domain, 4)

        np.testing.assert_array_equal(mask, [1, 0, 1, 0])

    def test_domain_without_constraints_keeps_everything(self):
        source = DictSource({}, nlocs=3)
        mask = build_domain_mask(source, make_domain("All"), 3)

        np.testing.assert_array_equal(mask, [0, 0, 0])
        assert source.requests == []

    def test_empty_variable_slot_is_skipped(self):
        source = DictSource({("MetaData", "latitude"): [0.0, 50.0]}, nlocs=2)
        domain = make_domain("Tropics", ("", (0.0, 0.0)), ("latitude", (-30.0, 30.0)))

        mask = build_domain_mask(source, domain, 2)

        np.testing.assert_array_equal(mask, [0, 1])
        assert source.requests == [("MetaData", "latitude")]

    def test_metadata_length_mismatch_raises(self):
        source = DictSource({("MetaData", "latitude"): [0.0, 1.0, 2.0]}, nlocs=2)
        domain = make_domain("Bad", ("latitude", (-1.0, 1.0)))

        with pytest.raises(DimensionMismatch):
            build_domain_mask(source, domain, 2)


class TestBuildDomainMasks:
    """Arena of Global + configured domains."""

    @pytest.fixture
    def source(self):
        return DictSource({
            ("MetaData", "latitude"): [-60.0, -10.0, 10.0, 60.0],
            ("MetaData", "pressure"): [100.0, 500.0, 900.0, 1000.0],
        }, nlocs=4)

    def test_global_is_first_and_unmasked(self, source):
        masks = build_domain_masks(source, [make_domain("Tropics", ("latitude", (-30.0, 30.0)))], 4)

        assert masks.names[0] == GLOBAL_DOMAIN
        np.testing.assert_array_equal(masks[0], [0, 0, 0, 0])
        assert len(masks) == 2

    def test_domains_are_independent(self, source):
        """Constraints of one domain never leak into the next."""
        domains = [
            make_domain("Tropics", ("latitude", (-30.0, 30.0))),
            make_domain("Lower", ("pressure", (800.0, 1100.0))),
        ]
        masks = build_domain_masks(source, domains, 4)

        np.testing.assert_array_equal(masks[1], [1, 0, 0, 1])
        np.testing.assert_array_equal(masks[2], [1, 1, 0, 0])

    def test_masks_follow_declared_order(self, source):
        domains = [
            make_domain("Lower", ("pressure", (800.0, 1100.0))),
            make_domain("Tropics", ("latitude", (-30.0, 30.0))),
        ]
        masks = build_domain_masks(source, domains, 4)

        assert masks.names == [GLOBAL_DOMAIN, "Lower", "Tropics"]
        assert [name for _, name, _ in masks] == masks.names

    def test_masks_are_read_only(self, source):
        masks = build_domain_masks(source, [make_domain("Tropics", ("latitude", (-30.0, 30.0)))], 4)

        with pytest.raises(ValueError):
            masks[1][0] = 0

    def test_included_counts(self, source):
        masks = build_domain_masks(source, [make_domain("Tropics", ("latitude", (-30.0, 30.0)))], 4)

        assert masks.included(0) == 4
        assert masks.included(1) == 2


class TestDomainMasks:

    def test_input_arrays_are_copied(self):
        raw = np.zeros(2, dtype=np.int8)
        masks = DomainMasks([GLOBAL_DOMAIN], [raw])
        raw[0] = 1

        assert masks[0][0] == 0

    def test_name_count_must_match(self):
        from iodastats.contracts import ContractViolation
        with pytest.raises(ContractViolation):
            DomainMasks(["Global", "Extra"], [np.zeros(2)])
