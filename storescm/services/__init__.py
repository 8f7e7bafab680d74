"""
Service layer for storescm.

- command_builder: Polling and checkout command lines
- baseline: Locating the right baseline in a build history
- scm: StoreSCM polling decision and checkout
"""

from .command_builder import (
    build_polling_command,
    build_checkout_command,
    format_timestamp,
    midnight_utc,
)
from .baseline import find_correct_baseline, is_relevant
from .scm import StoreSCM, PollingResult, Change, EMPTY_CHANGELOG

__all__ = [
    'build_polling_command',
    'build_checkout_command',
    'format_timestamp',
    'midnight_utc',
    'find_correct_baseline',
    'is_relevant',
    'StoreSCM',
    'PollingResult',
    'Change',
    'EMPTY_CHANGELOG',
]
