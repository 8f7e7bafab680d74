"""
Domain layer for storescm.

Contains pure domain objects with no I/O or side effects:
- PundleSpec/PundleType: A monitored Package or Bundle
- MonitorConfig: What to watch in one Store repository
- StoreScript: Named path to the StoreCI script
- RevisionState: Parsed snapshot of a repository's pundle versions
- BuildRecord/BuildHistory: Immutable build records indexed by number
"""

from .pundle import PundleSpec, PundleType
from .monitor import (
    MonitorConfig,
    StoreScript,
    BLESSING_LEVELS,
    DISPLAY_NAME,
)
from .revision_state import RevisionState, PundleVersion
from .build import BuildRecord, BuildHistory

__all__ = [
    'PundleSpec',
    'PundleType',
    'MonitorConfig',
    'StoreScript',
    'BLESSING_LEVELS',
    'DISPLAY_NAME',
    'RevisionState',
    'PundleVersion',
    'BuildRecord',
    'BuildHistory',
]
