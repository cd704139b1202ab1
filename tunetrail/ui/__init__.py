"""User interface package for TuneTrail."""

from .main import TuneTrailApp, main, run
from .toolkit import TuneTrailUI

__all__ = [
    "TuneTrailApp",
    "TuneTrailUI",
    "main",
    "run",
]
