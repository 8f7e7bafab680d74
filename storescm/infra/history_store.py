"""
Build history persistence for storescm.

Each job's history lives in its own JSON file::

    {
      "builds": [ {number, timestamp, previous, revision_states}, ... ],
      "polling_baselines": { "<repository>": {repository, pundles}, ... }
    }

Build records are append-only; polling baselines are replaced after
every poll so the next poll compares against the latest remote state.
"""

from pathlib import Path
from typing import Dict, Optional, Union
import logging
import re

from ..domain import BuildHistory, BuildRecord, RevisionState
from .file_store import FileStore

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]')


class HistoryStore:
    """
    Loads and saves per-job build histories.

    Example:
        store = HistoryStore("~/.storescm/jobs")
        history = store.load("nightly")
        store.save_build("nightly", record)
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()
        self._stores: Dict[str, FileStore] = {}

    def path_for(self, job: str) -> Path:
        """Return the history file path for a job."""
        safe = _UNSAFE_CHARS.sub('_', job) or '_'
        return self.directory / f"{safe}.json"

    def _store(self, job: str) -> FileStore:
        if job not in self._stores:
            self._stores[job] = FileStore(self.path_for(job))
        return self._stores[job]

    def load(self, job: str) -> BuildHistory:
        """Load the build history of a job (empty if never built)."""
        store = self._store(job)
        store.invalidate_cache()
        return BuildHistory.from_list(store.get("builds", []))

    def save_build(self, job: str, build: BuildRecord) -> BuildHistory:
        """
        Record a build in the job's history.

        Args:
            job: Job name
            build: Completed build record

        Returns:
            The updated history
        """
        builds = self._store(job).update(
            "builds", lambda data: BuildHistory.from_list(data).append(build).to_list(), []
        )
        history = BuildHistory.from_list(builds)
        logger.debug(f"Recorded build #{build.number} of {job}")
        return history

    def polling_baseline(self, job: str, repository_name: str) -> Optional[RevisionState]:
        """Return the state seen by the last poll of a repository, if any."""
        data = self._store(job).get('polling_baselines', {}).get(repository_name)
        if data is None:
            return None
        return RevisionState.from_dict(data)

    def save_polling_baseline(self, job: str, state: RevisionState) -> None:
        """Remember state as the repository's baseline for the next poll."""
        self._store(job).update(
            "polling_baselines",
            lambda baselines: {**(baselines or {}), state.repository_name: state.to_dict()},
            {}
        )
