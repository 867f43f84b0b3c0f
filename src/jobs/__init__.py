"""
Background jobs for VoidBox.
"""

from src.jobs.cleanup import run_cleanup, periodic_cleanup

__all__ = [
    "run_cleanup",
    "periodic_cleanup",
]
