"""
Store script command lines for storescm.

Both command forms share a fixed prefix:

    <script> -repository <name> (-<type> <pundle>)* -versionRegex <re> -blessedAtLeast <level>

Checkout appends ``-since``, ``-now`` and ``-changelog`` and, when enabled,
``-parcelBuilderFile``. Timestamps are always rendered in UTC so that the
Store script compares them unambiguously against the repository's clock.

These are pure functions: no I/O, same input gives the same list.
"""

from datetime import datetime, timezone
from typing import List, Optional

from ..domain import MonitorConfig

TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M:%S"


def format_timestamp(value: datetime) -> str:
    """
    Format a timestamp as ``MM/dd/yyyy HH:mm:ss.SSS`` in UTC.

    Naive datetimes are taken to be UTC already.

    Examples:
        2013-05-01 10:00-05:00  -> "05/01/2013 15:00:00.000"
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return f"{utc.strftime(TIMESTAMP_FORMAT)}.{utc.microsecond // 1000:03d}"


def midnight_utc(now: Optional[datetime] = None) -> datetime:
    """Start of the current UTC day, the 'since' time for a first build."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def _common_arguments(config: MonitorConfig, script_path: str) -> List[str]:
    args = [str(script_path), "-repository", config.repository_name]
    for pundle in config.pundles:
        args.extend(pundle.to_args())
    args.extend(["-versionRegex", config.version_regex])
    args.extend(["-blessedAtLeast", config.minimum_blessing_level])
    return args


def build_polling_command(config: MonitorConfig, script_path: str) -> List[str]:
    """
    Build the command that reports the repository's current state.

    Args:
        config: Monitor configuration
        script_path: Path of the Store script

    Returns:
        Argument list, script path first
    """
    return _common_arguments(config, script_path)


def build_checkout_command(
    config: MonitorConfig,
    script_path: str,
    since: datetime,
    now: datetime,
    changelog_path: str
) -> List[str]:
    """
    Build the command that checks out changes made between since and now.

    Args:
        config: Monitor configuration
        script_path: Path of the Store script
        since: Timestamp of the previous build
        now: Timestamp of the current build
        changelog_path: Where the script writes its XML change log

    Returns:
        Argument list, script path first
    """
    args = _common_arguments(config, script_path)
    args.extend(["-since", format_timestamp(since)])
    args.extend(["-now", format_timestamp(now)])
    args.extend(["-changelog", str(changelog_path)])

    if config.generate_parcel_builder_input_file:
        args.extend(["-parcelBuilderFile", config.parcel_builder_input_filename])

    return args
