#!/usr/bin/env python3
"""``iodastats`` runner.

Usage:
    python scripts/run_iodastats.py scripts/stats_config.yaml
    python scripts/run_iodastats.py scripts/stats_config.py --log-level DEBUG
    python scripts/run_iodastats.py scripts/stats_config.yaml --fail-fast --log-file logs/stats.log

Note: run configuration in scripts/stats_config.yaml (or .py), expert
defaults in src/iodastats/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from iodastats.cli.run_stats import main


if __name__ == "__main__":
    sys.exit(main())
