"""
Build history domain objects for storescm.

Build history is modelled as a read-only arena of immutable records
indexed by build number. Each record links to its predecessor by number
rather than by object reference, so a history can be walked, persisted
and reloaded without a live object graph.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple
import logging

from .revision_state import RevisionState

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class BuildRecord:
    """
    Immutable record of one build and the revision states it recorded.

    A record's revision states are exhaustive: they cover every Store
    repository the build monitored, one state per repository. A build
    that carries states, none of them for repository R, did not monitor R.

    Attributes:
        number: Build number, unique within a job
        timestamp: When the build started (UTC)
        previous_number: Number of the preceding build, or None for the first
        revision_states: One state per monitored repository, in checkout order
    """

    number: int
    timestamp: datetime
    previous_number: Optional[int] = None
    revision_states: Tuple[RevisionState, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'timestamp', _as_utc(self.timestamp))
        states = tuple(self.revision_states)
        names = [s.repository_name for s in states]
        if len(names) != len(set(names)):
            raise ValueError(f"Build #{self.number} records a repository more than once")
        object.__setattr__(self, 'revision_states', states)

    @property
    def has_revision_states(self) -> bool:
        return bool(self.revision_states)

    def monitors(self, repository_name: str) -> bool:
        """True if this build recorded a state for the repository."""
        return self.state_for(repository_name) is not None

    def state_for(self, repository_name: str) -> Optional[RevisionState]:
        for state in self.revision_states:
            if state.repository_name == repository_name:
                return state
        return None

    def with_state(self, state: RevisionState) -> 'BuildRecord':
        """Return a copy of this record with another revision state attached."""
        if self.monitors(state.repository_name):
            raise ValueError(
                f"Build #{self.number} already has a state for {state.repository_name!r}"
            )
        return replace(self, revision_states=self.revision_states + (state,))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'timestamp': self.timestamp.isoformat(),
            'previous': self.previous_number,
            'revision_states': [s.to_dict() for s in self.revision_states],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildRecord':
        return cls(
            number=int(data['number']),
            timestamp=datetime.fromisoformat(data['timestamp']),
            previous_number=data.get('previous'),
            revision_states=tuple(
                RevisionState.from_dict(s) for s in data.get('revision_states', [])
            ),
        )


@dataclass(frozen=True)
class BuildHistory:
    """
    Read-only arena of build records, indexed by build number.

    Example:
        history = BuildHistory.of(records)
        for build in history.walk(history.last_build()):
            print(build.number)
    """

    records: Mapping[int, BuildRecord] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'records', MappingProxyType(dict(self.records)))

    @classmethod
    def of(cls, records) -> 'BuildHistory':
        return cls({r.number: r for r in records})

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[BuildRecord]:
        """Iterate records newest first."""
        for number in sorted(self.records, reverse=True):
            yield self.records[number]

    def get(self, number: Optional[int]) -> Optional[BuildRecord]:
        if number is None:
            return None
        return self.records.get(number)

    def last_build(self) -> Optional[BuildRecord]:
        if not self.records:
            return None
        return self.records[max(self.records)]

    def previous(self, build: BuildRecord) -> Optional[BuildRecord]:
        return self.get(build.previous_number)

    def next_number(self) -> int:
        return max(self.records, default=0) + 1

    def walk(self, start: Optional[BuildRecord]) -> Iterator[BuildRecord]:
        """
        Iterate from start back through its predecessors.

        Stops at the first build, at a dangling predecessor link, or when
        a build would be visited twice (a malformed history that links a
        build to itself or to a later build).
        """
        seen = set()
        build = start
        while build is not None:
            if build.number in seen:
                logger.warning(f"Build history loops back to build #{build.number}")
                return
            seen.add(build.number)
            yield build
            build = self.previous(build)

    def append(self, build: BuildRecord) -> 'BuildHistory':
        """Return a new history including build (replacing one with the same number)."""
        records = dict(self.records)
        records[build.number] = build
        return BuildHistory(records)

    def to_list(self) -> list:
        return [self.records[n].to_dict() for n in sorted(self.records)]

    @classmethod
    def from_list(cls, data) -> 'BuildHistory':
        return cls.of(BuildRecord.from_dict(d) for d in data or [])
