"""
Monitor configuration for storescm.

MonitorConfig is the durable description of one Store repository to
watch: which script runs the StoreCI tooling, which repository and
pundles to look at, and which versions count. It is immutable; editing
a job replaces the whole object.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple
import logging

from ..errors import ConfigurationError
from .pundle import PundleSpec

logger = logging.getLogger(__name__)

DISPLAY_NAME = "Visualworks Store"

# Standard Store blessing levels, lowest to highest
BLESSING_LEVELS = (
    "Broken",
    "Work In Progress",
    "Development",
    "To Review",
    "Patch",
    "Integration-Ready",
    "Integrated",
    "Ready to Merge",
    "Merged",
    "Tested",
    "Internal Release",
    "Released",
)

DEFAULT_VERSION_REGEX = ".+"
DEFAULT_MINIMUM_BLESSING_LEVEL = "Development"
DEFAULT_PARCEL_BUILDER_INPUT_FILENAME = "parcelsToBuild"


@dataclass(frozen=True)
class StoreScript:
    """A named script that runs the StoreCI package in a VisualWorks image."""

    name: str
    path: str

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Store script name must not be empty")
        if not self.path:
            raise ConfigurationError(f"Store script {self.name!r} has no path")

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'path': self.path}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoreScript':
        return cls(name=data.get('name', ''), path=data.get('path', ''))


@dataclass(frozen=True)
class MonitorConfig:
    """
    Immutable configuration of one monitored Store repository.

    Attributes:
        script_name: Name of the registered StoreScript to run
        repository_name: Store repository to monitor (never empty)
        pundles: Root pundles to monitor, in command-line order
        version_regex: Regex11-style pattern matching versions to include
        minimum_blessing_level: Include only versions blessed at least this high
        generate_parcel_builder_input_file: Ask the tool for a parcel list file
        parcel_builder_input_filename: Name of that file
    """

    script_name: str
    repository_name: str
    pundles: Tuple[PundleSpec, ...] = ()
    version_regex: str = DEFAULT_VERSION_REGEX
    minimum_blessing_level: str = DEFAULT_MINIMUM_BLESSING_LEVEL
    generate_parcel_builder_input_file: bool = False
    parcel_builder_input_filename: str = DEFAULT_PARCEL_BUILDER_INPUT_FILENAME

    def __post_init__(self):
        if not self.repository_name:
            raise ConfigurationError("Repository name must not be empty")
        # Accept any iterable (or None) and store an immutable tuple
        object.__setattr__(self, 'pundles', tuple(self.pundles or ()))
        if self.minimum_blessing_level not in BLESSING_LEVELS:
            logger.warning(
                f"Unknown blessing level {self.minimum_blessing_level!r} "
                f"for repository {self.repository_name!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'script': self.script_name,
            'repository': self.repository_name,
            'pundles': [p.to_dict() for p in self.pundles],
            'version_regex': self.version_regex,
            'minimum_blessing_level': self.minimum_blessing_level,
            'generate_parcel_builder_input_file': self.generate_parcel_builder_input_file,
            'parcel_builder_input_filename': self.parcel_builder_input_filename,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MonitorConfig':
        """Build a MonitorConfig from a job's configuration section."""
        return cls(
            script_name=data.get('script', ''),
            repository_name=data.get('repository', ''),
            pundles=tuple(PundleSpec.from_dict(p) for p in data.get('pundles') or []),
            version_regex=data.get('version_regex', DEFAULT_VERSION_REGEX),
            minimum_blessing_level=data.get(
                'minimum_blessing_level', DEFAULT_MINIMUM_BLESSING_LEVEL),
            generate_parcel_builder_input_file=bool(
                data.get('generate_parcel_builder_input_file', False)),
            parcel_builder_input_filename=data.get(
                'parcel_builder_input_filename', DEFAULT_PARCEL_BUILDER_INPUT_FILENAME),
        )
