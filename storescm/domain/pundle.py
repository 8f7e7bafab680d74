"""
Pundle specifications for storescm.

A pundle is a unit of versioned Store source: a Package, or a Bundle
grouping packages. Each monitored pundle is named on the Store script's
command line with the flag of its type (``-package Foo``, ``-bundle Bar``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from ..errors import ConfigurationError


class PundleType(Enum):
    """Kind of pundle; the value is the command-line flag name."""
    PACKAGE = "package"
    BUNDLE = "bundle"

    @property
    def flag(self) -> str:
        return f"-{self.value}"

    @classmethod
    def parse(cls, text: str) -> 'PundleType':
        """
        Parse a pundle type from its enum name or flag name.

        Examples:
            PundleType.parse("PACKAGE")  -> PundleType.PACKAGE
            PundleType.parse("bundle")   -> PundleType.BUNDLE
        """
        key = (text or "").strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ConfigurationError(f"Unknown pundle type: {text!r}")


@dataclass(frozen=True)
class PundleSpec:
    """A named pundle to monitor, tagged with its type."""

    name: str
    pundle_type: PundleType = PundleType.PACKAGE

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ConfigurationError("Pundle name must not be empty")

    def to_args(self) -> list:
        """Command-line arguments naming this pundle."""
        return [self.pundle_type.flag, self.name]

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'type': self.pundle_type.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PundleSpec':
        return cls(
            name=data.get('name', ''),
            pundle_type=PundleType.parse(data.get('type', PundleType.PACKAGE.value)),
        )

    def __str__(self) -> str:
        return f"{self.pundle_type.value}:{self.name}"
