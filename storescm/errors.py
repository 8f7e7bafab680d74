"""
Error kinds for storescm.

Polling recovers from ExternalToolFailure, ParseFailure and
ConfigurationError by reporting "no changes"; checkout turns them into
an AbortError (or lets ConfigurationError through) so the build stops.
"""

from typing import Optional


class StoreSCMError(Exception):
    """Base exception for all storescm errors."""
    pass


class ExternalToolFailure(StoreSCMError):
    """The Store script ran (or failed to start) and reported an error."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        detail = message
        if returncode is not None:
            detail = f"{detail} (exit status {returncode})"
        if stderr:
            detail = f"{detail}: {stderr.strip()}"
        super().__init__(detail)


class ParseFailure(StoreSCMError):
    """The Store script succeeded but its output could not be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ConfigurationError(StoreSCMError):
    """Invalid or incomplete configuration, e.g. an unregistered script name."""
    pass


class RepositoryMismatch(StoreSCMError):
    """Two revision states from different repositories were compared."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Cannot compare revision state of repository {actual!r} "
            f"with one of repository {expected!r}"
        )


class AbortError(StoreSCMError):
    """Checkout cannot continue; the build must be aborted."""
    pass
