"""
Store script administration for storescm.

Scripts are registered globally and referred to by name from each
monitored repository's configuration. Every change replaces the whole
registry and saves it to the configuration file.
"""

import click


@click.group('scripts')
def scripts_cmd():
    """Manage the registered Store scripts."""
    pass


@scripts_cmd.command('list')
@click.option('--pretty', '-p', is_flag=True,
              help='Human-readable table output (default: JSONL)')
def list_scripts(pretty):
    """List registered Store scripts."""
    from ..infra import get_registry
    from ..output import emit

    scripts = get_registry().scripts()
    if pretty:
        from ..render import render_table
        render_table(["Name", "Path"], [[s.name, s.path] for s in scripts], title="Store scripts")
    else:
        emit(scripts)


@scripts_cmd.command('add')
@click.argument('name')
@click.argument('path')
@click.option('--force', '-f', is_flag=True,
              help='Replace an existing script with the same name')
def add_script(name, path, force):
    """Register a Store script NAME that runs the script at PATH."""
    from ..domain import StoreScript
    from ..errors import StoreSCMError
    from ..exit_codes import CONFIG_ERROR, CommandError, exit_code_for, exit_with_code
    from ..infra import get_registry
    from ..output import emit, emit_error

    def with_script(scripts):
        if any(s.name == name for s in scripts) and not force:
            raise CommandError(
                f"Store script {name!r} already exists (use --force to replace it)", CONFIG_ERROR
            )
        return [s for s in scripts if s.name != name] + [script]

    try:
        script = StoreScript(name=name, path=path)
        get_registry().update(with_script)
    except (StoreSCMError, CommandError) as e:
        emit_error(str(e), type=e.__class__.__name__)
        exit_with_code(exit_code_for(e))

    emit([script])


@scripts_cmd.command('remove')
@click.argument('name')
def remove_script(name):
    """Unregister the Store script NAME."""
    from ..errors import StoreSCMError
    from ..exit_codes import CONFIG_ERROR, CommandError, exit_code_for, exit_with_code
    from ..infra import get_registry
    from ..output import emit, emit_error

    def without_script(scripts):
        if not any(s.name == name for s in scripts):
            raise CommandError(f"No store script named {name!r}", CONFIG_ERROR)
        return [s for s in scripts if s.name != name]

    try:
        get_registry().update(without_script)
    except (StoreSCMError, CommandError) as e:
        emit_error(str(e), type=e.__class__.__name__)
        exit_with_code(exit_code_for(e))

    emit([{'removed': name}])
