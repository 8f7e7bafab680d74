"""
Baseline resolution for storescm.

When several Store repositories are monitored by one job, the baseline a
poll is handed may belong to another repository. The correct baseline is
found by walking the build history back from the most recent build:

- a build with a state for the repository: that state is the baseline
- a build with states, none for the repository: the repository was not
  monitored yet, so there is no baseline (the walk stops here)
- a build with no states at all: it predates polling, keep walking

The stop-on-unrelated-state rule relies on BuildRecord's invariant that
a build's revision states are exhaustive for that build.
"""

from typing import Optional
import logging

from ..domain import BuildHistory, BuildRecord, RevisionState

logger = logging.getLogger(__name__)


def is_relevant(state: Optional[RevisionState], repository_name: str) -> bool:
    """True if state is a snapshot of the named repository."""
    return state is not None and state.repository_name == repository_name


def find_correct_baseline(
    history: BuildHistory,
    most_recent: Optional[BuildRecord],
    repository_name: str
) -> Optional[RevisionState]:
    """
    Find the most recent recorded state of a repository.

    Args:
        history: Build history to walk
        most_recent: Build to start from
        repository_name: Repository whose baseline is wanted

    Returns:
        The baseline state, or None if the repository has no usable baseline
    """
    for build in history.walk(most_recent):
        if not build.has_revision_states:
            continue

        state = build.state_for(repository_name)
        if state is not None:
            logger.debug(f"Baseline for {repository_name} found in build #{build.number}")
            return state

        logger.debug(
            f"Build #{build.number} did not monitor {repository_name}; no baseline"
        )
        return None

    return None
