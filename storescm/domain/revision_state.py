"""
Revision state domain object for storescm.

A RevisionState is a point-in-time snapshot of the pundle versions in one
Store repository, as reported by the Store script. It is parsed from the
script's output, attached to the build that produced it and never changed
afterwards.

Script output format, one pundle per line, tab separated::

    <pundle name>\\t<version>\\t<blessing>[\\t<timestamp>]

Blank lines and lines starting with ``#`` are ignored. Pundle names and
versions may contain spaces, so fields are split on tabs only.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from ..errors import ParseFailure, RepositoryMismatch

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"
COMMENT_PREFIX = "#"


@dataclass(frozen=True)
class PundleVersion:
    """Version and blessing of one pundle at snapshot time."""
    name: str
    version: str
    blessing: str
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'name': self.name,
            'version': self.version,
            'blessing': self.blessing,
        }
        if self.timestamp is not None:
            d['timestamp'] = self.timestamp
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PundleVersion':
        return cls(
            name=data['name'],
            version=data['version'],
            blessing=data['blessing'],
            timestamp=data.get('timestamp'),
        )


@dataclass(frozen=True)
class RevisionState:
    """
    Snapshot of a Store repository's monitored pundles.

    Two states are only comparable when they belong to the same
    repository; comparing across repositories raises RepositoryMismatch.

    Example:
        state = RevisionState.parse("psql_public_cst", output)
        if state.has_changed_from(baseline):
            schedule_build()
    """

    repository_name: str
    pundles: Mapping[str, PundleVersion] = field(default_factory=dict)

    def __post_init__(self):
        if not self.repository_name:
            raise ValueError("RevisionState requires a repository name")
        object.__setattr__(self, 'pundles', MappingProxyType(dict(self.pundles)))

    @classmethod
    def of(cls, repository_name: str, versions: Iterable[PundleVersion]) -> 'RevisionState':
        """Build a state from pundle versions (later duplicates win)."""
        return cls(repository_name, {v.name: v for v in versions})

    @classmethod
    def parse(cls, repository_name: str, output: str) -> 'RevisionState':
        """
        Parse Store script output into a RevisionState.

        Args:
            repository_name: Repository the output describes
            output: Standard output of the Store script

        Returns:
            Parsed RevisionState

        Raises:
            ParseFailure: If a line is malformed or a pundle is listed twice
        """
        pundles: Dict[str, PundleVersion] = {}

        for line_number, raw_line in enumerate((output or "").splitlines(), start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip() or line.lstrip().startswith(COMMENT_PREFIX):
                continue

            fields = line.split(FIELD_SEPARATOR)
            if len(fields) not in (3, 4):
                raise ParseFailure(
                    f"expected 3 or 4 tab-separated fields, got {len(fields)}",
                    line_number
                )

            name, version, blessing = (f.strip() for f in fields[:3])
            timestamp = fields[3].strip() if len(fields) == 4 else None
            if not name:
                raise ParseFailure("missing pundle name", line_number)
            if name in pundles:
                raise ParseFailure(f"pundle {name!r} listed more than once", line_number)

            pundles[name] = PundleVersion(name, version, blessing, timestamp or None)

        return cls(repository_name, pundles)

    def changed_pundles(self, other: 'RevisionState') -> List[str]:
        """Names of pundles added, removed or re-versioned relative to other."""
        self._check_same_repository(other)
        names = set(self.pundles) | set(other.pundles)
        return sorted(n for n in names if self.pundles.get(n) != other.pundles.get(n))

    def has_changed_from(self, other: Optional['RevisionState']) -> bool:
        """
        Check whether this state differs from a baseline.

        A missing baseline always counts as changed.

        Raises:
            RepositoryMismatch: If other belongs to a different repository
        """
        if other is None:
            return True

        changed = self.changed_pundles(other)
        if changed:
            logger.info(f"Changes in {self.repository_name}: {', '.join(changed)}")
        return bool(changed)

    def _check_same_repository(self, other: 'RevisionState') -> None:
        if other.repository_name != self.repository_name:
            raise RepositoryMismatch(self.repository_name, other.repository_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repository': self.repository_name,
            'pundles': [self.pundles[name].to_dict() for name in sorted(self.pundles)],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RevisionState':
        return cls.of(
            data['repository'],
            (PundleVersion.from_dict(p) for p in data.get('pundles', [])),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, RevisionState):
            return NotImplemented
        return (self.repository_name == other.repository_name
                and dict(self.pundles) == dict(other.pundles))

    def __hash__(self) -> int:
        return hash((self.repository_name, frozenset(self.pundles.items())))

    def __repr__(self) -> str:
        return f"RevisionState(repository={self.repository_name!r}, pundles={len(self.pundles)})"
