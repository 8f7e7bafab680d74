"""
Polling command for storescm.

Asks the Store script for the current state of every repository a job
monitors and decides whether a new build should be scheduled. Tool and
configuration problems never fail the command: they are logged and the
repository reports "no changes".
"""

import click
import logging

logger = logging.getLogger(__name__)


@click.command('poll')
@click.argument('job')
@click.option('--workspace', '-w',
              type=click.Path(file_okay=False),
              help='Directory to run the Store script in (optional for polling)')
@click.option('--exit-status', is_flag=True,
              help='Exit with status 1 when no build is needed')
@click.option('--pretty', '-p', is_flag=True,
              help='Human-readable table output (default: JSONL)')
def poll_handler(job, workspace, exit_status, pretty):
    """
    Check whether JOB's Store repositories changed since the last build.

    Prints one JSON line per monitored repository with its decision, then a
    summary line with "build_now".

    \b
    Examples:
      storescm poll nightly
      storescm poll nightly --exit-status && storescm checkout nightly
    """
    from ..config import load_config, get_job_monitors, get_history_directory
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

    workspace = workspace or config['general'].get('workspace') or None
    registry = get_registry()

    results = []
    for monitor in monitors:
        scm = StoreSCM(monitor, registry)
        baseline = store.polling_baseline(job, monitor.repository_name)
        result = scm.compare_remote_revision_with(history, baseline, workspace)
        if result.remote is not None:
            store.save_polling_baseline(job, result.remote)
        results.append(result)

    build_now = any(r.has_changes() for r in results)
    repositories = [m.repository_name for m in monitors]

    if pretty:
        from ..render import render_polling_results
        render_polling_results(job, results, repositories)
        click.echo("Build needed" if build_now else "No changes")
    else:
        emit(dict(repository=name, **result.to_dict()) for name, result in zip(repositories, results))
        emit([{"job": job, "build_now": build_now}])

    if exit_status and not build_now:
        exit_with_code(1)
