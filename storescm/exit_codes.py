"""
Exit codes for storescm commands.

0-2 follow POSIX shell conventions. storescm's own failures use the
64-113 range so a CI script can tell a broken Store script from a bad
configuration or an aborted build.
"""

import sys
from typing import Optional

SUCCESS = 0
GENERAL_ERROR = 1        # Also: poll --exit-status found nothing to build
USAGE_ERROR = 2          # Wrong arguments (reported by click)

TOOL_ERROR = 65          # Store script failed or could not be started
CONFIG_ERROR = 66        # Unknown job, unregistered script, unreadable config
PERMISSION_ERROR = 67
DATA_ERROR = 70          # Unparseable script output or corrupt history file
BUILD_ABORTED = 72       # Checkout stopped the build
INTERRUPTED = 130        # Ctrl+C

# Matched by class name along the exception's MRO, most specific first
EXCEPTION_EXIT_CODES = {
    'AbortError': BUILD_ABORTED,
    'ConfigurationError': CONFIG_ERROR,
    'ExternalToolFailure': TOOL_ERROR,
    'ParseFailure': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'ValueError': DATA_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


class CommandError(Exception):
    """Raised by a command to fail with a specific exit code."""

    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(exc: BaseException) -> int:
    """
    Exit code for an exception.

    CommandError carries its own code. Other exceptions are looked up by
    class name along their MRO, so a JSONDecodeError maps to DATA_ERROR
    and an unlisted OSError to GENERAL_ERROR.
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    for cls in type(exc).__mro__:
        code = EXCEPTION_EXIT_CODES.get(cls.__name__)
        if code is not None:
            return code
    return GENERAL_ERROR


def exit_with_code(code: int, message: Optional[str] = None):
    """Exit the process, printing message to stderr first if given."""
    if message:
        print(message, file=sys.stderr)
    sys.exit(code)
