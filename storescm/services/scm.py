"""
Store SCM service for storescm.

StoreSCM ties the pieces together for one monitored repository:

Polling:
    baseline resolution -> polling command -> run script -> parse -> compare
Checkout:
    checkout command -> run script -> parse -> relocate change log -> attach

Polling never raises for tool, parse or configuration problems; it reports
"no changes" so a broken script neither triggers nor blocks builds.
Checkout always raises, since a build cannot proceed without a snapshot.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Optional, Union
import logging

from ..domain import BuildHistory, BuildRecord, MonitorConfig, RevisionState, StoreScript
from ..errors import AbortError, ConfigurationError, ExternalToolFailure, ParseFailure
from ..infra import ScriptRegistry, StoreCommandRunner
from .baseline import find_correct_baseline, is_relevant
from .command_builder import build_checkout_command, build_polling_command, midnight_utc

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EMPTY_CHANGELOG = "<log/>\n"


class Change(Enum):
    """How significant the difference between baseline and remote is."""
    NONE = "none"
    SIGNIFICANT = "significant"
    INCOMPARABLE = "incomparable"


@dataclass(frozen=True)
class PollingResult:
    """
    Outcome of one poll.

    Attributes:
        baseline: State compared against (None if there was none)
        remote: State just observed (None if the poll could not run);
            callers keep it as the next poll's baseline
        change: Significance of the difference
    """

    baseline: Optional[RevisionState]
    remote: Optional[RevisionState]
    change: Change

    NO_CHANGES: ClassVar['PollingResult']
    BUILD_NOW: ClassVar['PollingResult']

    def has_changes(self) -> bool:
        """True if a build should be scheduled."""
        return self.change in (Change.SIGNIFICANT, Change.INCOMPARABLE)

    def to_dict(self) -> dict:
        return {
            'change': self.change.value,
            'build_now': self.has_changes(),
            'baseline': self.baseline.to_dict() if self.baseline is not None else None,
            'remote': self.remote.to_dict() if self.remote is not None else None,
        }


PollingResult.NO_CHANGES = PollingResult(None, None, Change.NONE)
PollingResult.BUILD_NOW = PollingResult(None, None, Change.INCOMPARABLE)


class StoreSCM:
    """
    SCM for Visualworks Smalltalk Store, bound to one monitored repository.

    Example:
        scm = StoreSCM(monitor, get_registry())
        result = scm.compare_remote_revision_with(history, baseline)
        if result.has_changes():
            build = scm.checkout(history, new_build, workspace, changelog)
    """

    def __init__(
        self,
        monitor: MonitorConfig,
        registry: ScriptRegistry,
        runner: Optional[StoreCommandRunner] = None
    ):
        """
        Initialize StoreSCM.

        Args:
            monitor: What to monitor
            registry: Registry used to resolve monitor.script_name
            runner: Script runner (creates default if None)
        """
        self.monitor = monitor
        self.registry = registry
        self.runner = runner or StoreCommandRunner()

    @property
    def repository_name(self) -> str:
        return self.monitor.repository_name

    def requires_workspace_for_polling(self) -> bool:
        return False

    def store_script(self) -> Optional[StoreScript]:
        """Resolve the configured script by name."""
        return self.registry.get(self.monitor.script_name)

    def compare_remote_revision_with(
        self,
        history: BuildHistory,
        baseline: Optional[RevisionState] = None,
        workspace: Optional[PathLike] = None
    ) -> PollingResult:
        """
        Decide whether the repository changed since the baseline.

        Args:
            history: Build history of the job
            baseline: Baseline handed in by the caller; may belong to
                another repository or be None
            workspace: Working directory for the script (optional)

        Returns:
            PollingResult; BUILD_NOW when there is nothing to compare against
        """
        last_build = history.last_build()
        if last_build is None:
            logger.info("No existing build. Scheduling a new one.")
            return PollingResult.BUILD_NOW

        if not is_relevant(baseline, self.repository_name):
            baseline = find_correct_baseline(history, last_build, self.repository_name)
            if baseline is None:
                logger.info("New repository. Scheduling a new build.")
                return PollingResult.BUILD_NOW

        script = self.store_script()
        if script is None:
            logger.critical(f"No store script named {self.monitor.script_name!r} is registered")
            return PollingResult.NO_CHANGES

        command = build_polling_command(self.monitor, script.path)
        try:
            output = self.runner.run(command, cwd=workspace)
            current = RevisionState.parse(self.repository_name, output)
        except ExternalToolFailure as e:
            logger.warning(f"Polling {self.repository_name} failed: {e}")
            return PollingResult.NO_CHANGES
        except ParseFailure as e:
            logger.warning(f"Unreadable output polling {self.repository_name}: {e}")
            return PollingResult.NO_CHANGES

        changed = current.has_changed_from(baseline)
        return PollingResult(baseline, current, Change.SIGNIFICANT if changed else Change.NONE)

    def checkout(
        self,
        history: BuildHistory,
        build: BuildRecord,
        workspace: PathLike,
        changelog_file: PathLike
    ) -> BuildRecord:
        """
        Check out the changes made since the previous build.

        Args:
            history: Build history of the job
            build: The build being checked out
            workspace: Working directory for the script
            changelog_file: Where the build expects its change log

        Returns:
            build with the freshly parsed revision state attached

        Raises:
            ConfigurationError: If the configured script is not registered
            AbortError: If the script fails or its output cannot be parsed
        """
        previous = history.get(build.previous_number)
        since = previous.timestamp if previous is not None else midnight_utc(build.timestamp)

        script = self.store_script()
        if script is None:
            logger.critical(f"No store script named {self.monitor.script_name!r} is registered")
            raise ConfigurationError(f"No store script named {self.monitor.script_name!r}")

        workspace = Path(workspace)
        workspace.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix="store", suffix=".xml", dir=workspace)
        os.close(fd)
        local_changelog = Path(temp_name)

        try:
            command = build_checkout_command(
                self.monitor, script.path, since, build.timestamp, str(local_changelog)
            )
            try:
                output = self.runner.run(command, cwd=workspace)
            except ExternalToolFailure as e:
                raise AbortError(f"Error launching command: {e}") from e

            try:
                state = RevisionState.parse(self.repository_name, output)
            except ParseFailure as e:
                raise AbortError(f"Unreadable output from Store script: {e}") from e

            # Only a successful checkout leaves a change log behind
            _relocate_changelog(local_changelog, Path(changelog_file))
        finally:
            local_changelog.unlink(missing_ok=True)

        logger.info(f"Checked out {self.repository_name} for build #{build.number}")
        return build.with_state(state)

    def calc_revisions_from_build(self, build: BuildRecord) -> None:
        # States are attached during checkout
        return None


def _relocate_changelog(local_changelog: Path, changelog_file: Path) -> None:
    """Copy the script's change log into place, or write an empty one."""
    changelog_file.parent.mkdir(parents=True, exist_ok=True)
    if local_changelog.exists() and local_changelog.stat().st_size > 0:
        shutil.copyfile(local_changelog, changelog_file)
    else:
        changelog_file.write_text(EMPTY_CHANGELOG)
