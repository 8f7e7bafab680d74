"""
Checkout command for storescm.

Starts a new build of a job: every monitored Store repository is checked
out into the workspace, the Store script's change log is put where the
build expects it and the parsed revision states are recorded with the
build for future baseline resolution.
"""

import click
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CHANGELOG = "changelog.xml"


def changelog_path(base: Path, index: int, count: int) -> Path:
    """Change log for the index-th monitor (1-based) of count monitors."""
    if count == 1:
        return base
    return base.with_name(f"{base.stem}{index}{base.suffix}")


@click.command('checkout')
@click.argument('job')
@click.option('--workspace', '-w',
              type=click.Path(file_okay=False),
              help='Directory to check out into (default: configured workspace or cwd)')
@click.option('--changelog', '-c',
              type=click.Path(dir_okay=False),
              help=f'Change log file (default: <workspace>/{DEFAULT_CHANGELOG})')
def checkout_handler(job, workspace, changelog):
    """
    Check out JOB's Store repositories as a new build.

    Changes made since the previous build (or since midnight UTC for the
    first build) are written to the change log. With several monitored
    repositories each gets its own numbered change log (changelog1.xml, ...).

    Any failure aborts the build with a non-zero exit status; the build is
    still recorded, with the states checked out before the failure.
    """
    from ..config import load_config, get_job_monitors, get_history_directory
    from ..domain import BuildRecord
    from ..errors import StoreSCMError
    from ..exit_codes import exit_code_for, exit_with_code
    from ..infra import HistoryStore, get_registry
    from ..output import emit, emit_error
    from ..services import StoreSCM

    try:
        config = load_config()
        monitors = get_job_monitors(config, job)
        store = HistoryStore(get_history_directory(config))
        history = store.load(job)
    except (StoreSCMError, ValueError) as e:
        emit_error(str(e), type=e.__class__.__name__, context={'job': job})
        exit_with_code(exit_code_for(e))

    workspace = Path(workspace or config['general'].get('workspace') or Path.cwd()).expanduser()
    base_changelog = Path(changelog) if changelog else workspace / DEFAULT_CHANGELOG

    last_build = history.last_build()
    build = BuildRecord(
        number=history.next_number(),
        timestamp=datetime.now(timezone.utc),
        previous_number=last_build.number if last_build is not None else None,
    )
    logger.info(f"Starting build #{build.number} of {job}")

    registry = get_registry()
    failure = None
    for index, monitor in enumerate(monitors, start=1):
        scm = StoreSCM(monitor, registry)
        try:
            build = scm.checkout(
                history, build, workspace, changelog_path(base_changelog, index, len(monitors))
            )
        except (StoreSCMError, OSError) as e:
            failure = e
            break

    store.save_build(job, build)

    if failure is not None:
        emit_error(str(failure), type=failure.__class__.__name__,
                   context={'job': job, 'build': build.number})
        exit_with_code(exit_code_for(failure))

    emit([build])
