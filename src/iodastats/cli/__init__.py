"""Command-line interface modules for iodastats execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from iodastats.cli.run_stats import main, run_iodastats

__all__ = ['main', 'run_iodastats']
