"""Hoop Rivals statistics engine.

A Python application for tracking pickup basketball matches among friends:
recording per-player stat lines per quarter or per game, aggregating them into
performance reports, and ranking free throw challenge results.

Example:
    >>> from hoop_rivals.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.db_path)
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Hoop Rivals Team"

# Public API exports
from hoop_rivals.config import Settings, get_settings

__all__ = [
    "Settings",
    "__author__",
    "__version__",
    "get_settings",
]
