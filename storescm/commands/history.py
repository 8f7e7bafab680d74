"""
Build history command for storescm.
"""

import click


@click.command('history')
@click.argument('job')
@click.option('--limit', '-n', type=int, default=None,
              help='Show only the most recent N builds')
@click.option('--pretty', '-p', is_flag=True,
              help='Human-readable table output (default: JSONL)')
def history_handler(job, limit, pretty):
    """Show JOB's recorded builds and their revision states, newest first."""
    from ..config import load_config, get_history_directory
    from ..domain import BuildHistory
    from ..errors import StoreSCMError
    from ..exit_codes import exit_code_for, exit_with_code
    from ..infra import HistoryStore
    from ..output import emit, emit_error

    try:
        history = HistoryStore(get_history_directory(load_config())).load(job)
    except (StoreSCMError, ValueError) as e:
        emit_error(str(e), type=e.__class__.__name__, context={'job': job})
        exit_with_code(exit_code_for(e))

    builds = list(history)
    if limit is not None:
        builds = builds[:limit]

    if pretty:
        from ..render import render_history
        render_history(job, BuildHistory.of(builds))
    else:
        emit(builds)
