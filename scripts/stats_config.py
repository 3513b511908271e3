"""iodastats run configuration as a Python CONFIG dict.

Same content as stats_config.yaml, for setups that generate
configurations programmatically.

Usage:
    python scripts/run_iodastats.py scripts/stats_config.py
"""

CONFIG = {
    # ========================================================================
    # TIME WINDOW
    # ========================================================================
    "time window": {
        "begin": "2020-12-14T21:00:00Z",
        "end": "2020-12-15T03:00:00Z",
    },

    # ========================================================================
    # OBS SPACES
    # ========================================================================
    "obs spaces": [
        {
            "name": "AMSU-A NOAA-19",
            "obsfile": "data/amsua_n19_obs_2020121500_m.nc4",
            "variables": ["brightnessTemperature"],
            "channels": "1-10, 15",
            "groups to process": ["ObsValue", "hofx"],
            "qc groups": ["EffectiveQC", "EffectiveQC"],
            "statistics to compute": ["count", "mean", "RMS"],
            "domains to process": [
                {"name": "Tropics",
                 "first mask variable": "latitude",
                 "first mask range": [-30.0, 30.0]},
            ],
            "output file": "out/amsua_n19_stats_2020121500.nc4",
        },
    ],

    # ========================================================================
    # RUN BEHAVIOUR
    # ========================================================================
    "failure policy": "skip_source",   # or "fail_fast"
    "logging": {"level": "INFO", "log file": None},
}
