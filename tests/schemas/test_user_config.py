"""Tests for UserConfig parsing of JEDI-style run configurations."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from iodastats.schemas.user import (
    UserConfig,
    UserDomainConfig,
    UserObsSpaceConfig,
    UserTimeWindowConfig,
    parse_channels,
)

pytestmark = pytest.mark.unit


def jedi_obs_space(**overrides):
    raw = {
        "obs space": {
            "name": "AMSU-A NOAA-19",
            "obsdatain": {"engine": {"type": "H5File", "obsfile": "data/amsua_n19.nc4"}},
            "simulated variables": ["brightnessTemperature"],
        },
        "variables": ["brightnessTemperature"],
        "channels": "1-3, 7",
        "groups to process": ["ObsValue", "ombg"],
        "qc groups": ["EffectiveQC", "EffectiveQC"],
        "statistics to compute": ["count", "mean", "RMS"],
        "output file": "out/amsua_stats.nc4",
    }
    raw.update(overrides)
    return raw


class TestParseChannels:

    @pytest.mark.parametrize("raw, expected", [
        ("1-3, 7", [1, 2, 3, 7]),
        ("5", [5]),
        ("", []),
        (None, []),
        (4, [4]),
        ([9, 2], [9, 2]),
    ])
    def test_forms(self, raw, expected):
        assert parse_channels(raw) == expected

    def test_descending_range_rejected(self):
        with pytest.raises(ValueError, match="Invalid channel range"):
            parse_channels("7-3")


class TestObsSpace:

    def test_obs_space_block_is_unwrapped(self):
        obs = UserObsSpaceConfig.model_validate(jedi_obs_space())

        assert obs.name == "AMSU-A NOAA-19"
        assert obs.obsfile == "data/amsua_n19.nc4"
        assert obs.channels == [1, 2, 3, 7]
        assert obs.groups == ["ObsValue", "ombg"]
        assert obs.qc_groups == ["EffectiveQC", "EffectiveQC"]

    def test_flat_form(self):
        obs = UserObsSpaceConfig.model_validate({
            "obsfile": "sondes.nc4",
            "variables": "airTemperature",
            "groups to process": "ObsValue",
            "qc groups": "EffectiveQC",
            "statistics to compute": "count",
            "output file": "sondes_stats.nc4",
        })

        assert obs.variables == ["airTemperature"]
        assert obs.statistics == ["count"]
        assert obs.channels == []

    def test_name_defaults_to_file_stem(self):
        obs = UserObsSpaceConfig.model_validate({
            "obsfile": "data/sondes_obs_2020121500_m.nc4",
            "variables": ["airTemperature"],
            "groups to process": ["ObsValue"],
            "qc groups": ["EffectiveQC"],
            "statistics to compute": ["count"],
            "output file": "out.nc4",
        })

        assert obs.to_internal()["name"] == "sondes_obs_2020121500_m"

    def test_missing_output_file_rejected(self):
        raw = jedi_obs_space()
        del raw["output file"]
        with pytest.raises(ValidationError):
            UserObsSpaceConfig.model_validate(raw)

    def test_mismatched_lists_are_accepted_here(self):
        """Cross-list checks happen per obs space at run time."""
        obs = UserObsSpaceConfig.model_validate(
            jedi_obs_space(variables=["a", "b"], **{"qc groups": ["EffectiveQC"]})
        )
        assert obs.variables == ["a", "b"]


class TestDomain:

    def test_domain_wrapper_and_empty_slots(self):
        domain = UserDomainConfig.model_validate({
            "domain": {
                "name": "TropicalOcean",
                "first mask variable": "latitude",
                "first mask range": [-30.0, 30.0],
                "second mask variable": "",
                "third mask variable": "MetaData/surfaceQualifier",
                "third mask range": [0, 0],
            }
        })

        assert domain.to_internal() == {
            "name": "TropicalOcean",
            "masks": [
                {"variable": "latitude", "range": (-30.0, 30.0)},
                {"variable": "MetaData/surfaceQualifier", "range": (0.0, 0.0)},
            ],
        }

    def test_variable_without_range_rejected(self):
        with pytest.raises(ValidationError, match="needs 'first mask range'"):
            UserDomainConfig.model_validate({"name": "Tropics", "first mask variable": "latitude"})

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError, match="min 30.0 > max -30.0"):
            UserDomainConfig.model_validate({
                "name": "Tropics",
                "first mask variable": "latitude",
                "first mask range": [30.0, -30.0],
            })


class TestTimeWindow:

    def test_length_form(self):
        window = UserTimeWindowConfig.model_validate({"begin": "2020-12-14T21:00:00Z", "length": "PT6H"})
        assert window.resolved_end() - window.begin == timedelta(hours=6)

    def test_end_form(self):
        window = UserTimeWindowConfig.model_validate({
            "begin": "2020-12-14T21:00:00Z",
            "end": "2020-12-15T03:00:00Z",
            "bound to include": "begin",
        })
        assert window.resolved_end() == window.end

    def test_bound_to_include_accepted_and_ignored(self):
        raw = {"begin": "2020-12-14T21:00:00Z", "end": "2020-12-15T03:00:00Z"}
        plain = UserConfig.model_validate({"time window": raw})
        with_bound = UserConfig.model_validate({"time window": {**raw, "bound to include": "end"}})

        assert with_bound.time_window.bound_to_include == "end"
        assert with_bound.to_internal_overrides() == plain.to_internal_overrides()
        assert set(with_bound.to_internal_overrides()["time_window"]) == {"begin", "end"}

    def test_unknown_bound_rejected(self):
        with pytest.raises(ValidationError):
            UserTimeWindowConfig.model_validate({
                "begin": "2020-12-14T21:00:00Z",
                "length": "PT6H",
                "bound to include": "middle",
            })

    def test_end_and_length_rejected(self):
        with pytest.raises(ValidationError, match="exactly one"):
            UserTimeWindowConfig.model_validate({
                "begin": "2020-12-14T21:00:00Z",
                "end": "2020-12-15T03:00:00Z",
                "length": "PT6H",
            })


class TestUserConfig:

    def test_unknown_top_level_key_rejected(self):
        with pytest.raises(ValidationError):
            UserConfig.model_validate({"obs spacez": []})

    def test_logging_level_normalized(self):
        user = UserConfig.model_validate({"logging": {"level": " debug ", "log file": "run.log"}})

        assert user.to_internal_overrides()["logging"] == {"level": "DEBUG", "log_file": "run.log"}

    def test_overrides_only_include_given_fields(self):
        user = UserConfig.model_validate({"failure policy": "fail_fast"})

        assert user.to_internal_overrides() == {"failure_policy": "fail_fast"}
