import pytest

from tests.helpers.fake_ioda import write_fake_radiance_obs, write_fake_sst_obs


@pytest.fixture
def sst_file(temp_dir):
    return write_fake_sst_obs(temp_dir / "data" / "sst_obs.nc4")


@pytest.fixture
def radiance_file(temp_dir):
    return write_fake_radiance_obs(temp_dir / "data" / "amsua_obs.nc4", channels=(1, 2, 3))


@pytest.fixture
def sst_obs_space(make_obs_space, sst_file):
    """SST obs space with a tropical and a tropical-ocean domain."""
    return make_obs_space(
        sst_file,
        name="SST",
        variables=["seaSurfaceTemperature"],
        **{
            "groups to process": ["ObsValue", "ombg"],
            "qc groups": ["EffectiveQC", "EffectiveQC"],
            "domains to process": [
                {"domain": {"name": "Tropics",
                            "first mask variable": "latitude",
                            "first mask range": [-30.0, 30.0]}},
                {"domain": {"name": "TropicalOcean",
                            "first mask variable": "latitude",
                            "first mask range": [-30.0, 30.0],
                            "second mask variable": "MetaData/surfaceQualifier",
                            "second mask range": [0, 0]}},
            ],
        },
    )


@pytest.fixture
def radiance_obs_space(make_obs_space, radiance_file):
    """Radiance obs space with per-channel statistics."""
    return make_obs_space(
        radiance_file,
        name="AMSU-A",
        variables=["brightnessTemperature"],
        channels="1-3",
        **{
            "domains to process": [
                {"domain": {"name": "Southern",
                            "first mask variable": "latitude",
                            "first mask range": [-90.0, 0.0]}},
            ],
        },
    )
