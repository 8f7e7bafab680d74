"""
Infrastructure layer for storescm.

Contains abstractions for external systems:
- StoreCommandRunner: Store script execution
- ScriptRegistry: Process-wide named Store scripts
- FileStore: JSON file persistence
- HistoryStore: Per-job build history persistence

These provide clean interfaces that can be mocked for testing.
"""

from .command_runner import StoreCommandRunner
from .script_registry import ScriptRegistry, get_registry, set_registry
from .file_store import FileStore
from .history_store import HistoryStore

__all__ = [
    'StoreCommandRunner',
    'ScriptRegistry',
    'get_registry',
    'set_registry',
    'FileStore',
    'HistoryStore',
]
