"""
DeutschTagebuch

A bilingual learning journal: write entries in English and German, mine the
German for vocabulary and keep track of daily progress and streaks.
"""

from . import db
from . import text
from . import vocabulary
from . import progress
from . import journal
from . import plugin

__version__ = "0.1.0"
__all__ = ["db", "text", "vocabulary", "progress", "journal", "plugin"]
