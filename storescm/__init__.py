"""
storescm - Visualworks Smalltalk Store change detection for CI.

storescm lets a CI controller ask whether a Store repository has new,
relevantly-versioned changes since the last build, and check those
changes out together with the change log written by the StoreCI script.

Quick Start:
    import storescm

    monitor = storescm.MonitorConfig(
        script_name="vw77",
        repository_name="psql_public_cst",
        pundles=(storescm.PundleSpec("MyApplication", storescm.PundleType.BUNDLE),),
    )
    registry = storescm.ScriptRegistry([storescm.StoreScript("vw77", "/opt/vw/storeci.sh")])
    scm = storescm.StoreSCM(monitor, registry)

    # Poll
    result = scm.compare_remote_revision_with(history, baseline)
    if result.has_changes():
        ...

    # Checkout into a new build
    build = scm.checkout(history, build, workspace, "changelog.xml")

Domain Objects:
    MonitorConfig - What to watch in one Store repository
    PundleSpec - A monitored Package or Bundle
    RevisionState - Parsed snapshot of a repository's pundle versions
    BuildRecord, BuildHistory - Immutable build records indexed by number

Services:
    StoreSCM - Polling decision and checkout
    find_correct_baseline - Baseline resolution across repositories
"""

__version__ = "0.3.0"

from .domain import (
    PundleSpec,
    PundleType,
    MonitorConfig,
    StoreScript,
    BLESSING_LEVELS,
    RevisionState,
    PundleVersion,
    BuildRecord,
    BuildHistory,
)

from .errors import (
    StoreSCMError,
    ExternalToolFailure,
    ParseFailure,
    ConfigurationError,
    RepositoryMismatch,
    AbortError,
)

from .infra import StoreCommandRunner, ScriptRegistry, HistoryStore, get_registry

from .services import (
    StoreSCM,
    PollingResult,
    Change,
    find_correct_baseline,
    build_polling_command,
    build_checkout_command,
)

from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain objects
    "PundleSpec",
    "PundleType",
    "MonitorConfig",
    "StoreScript",
    "BLESSING_LEVELS",
    "RevisionState",
    "PundleVersion",
    "BuildRecord",
    "BuildHistory",
    # Errors
    "StoreSCMError",
    "ExternalToolFailure",
    "ParseFailure",
    "ConfigurationError",
    "RepositoryMismatch",
    "AbortError",
    # Infrastructure
    "StoreCommandRunner",
    "ScriptRegistry",
    "HistoryStore",
    "get_registry",
    # Services
    "StoreSCM",
    "PollingResult",
    "Change",
    "find_correct_baseline",
    "build_polling_command",
    "build_checkout_command",
    # Configuration
    "load_config",
    "save_config",
]
