#!/usr/bin/env python3

import click

from storescm.commands.poll import poll_handler
from storescm.commands.checkout import checkout_handler
from storescm.commands.history import history_handler
from storescm.commands.scripts import scripts_cmd
from storescm.commands.config import config_cmd


@click.group()
@click.version_option(package_name="storescm")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """storescm - Visualworks Store change detection for CI builds.

    Polls Store repositories through the StoreCI script to decide whether
    a build is needed, and checks out changes with their change log.
    """
    from storescm.config import load_config, configure_logging
    from storescm.errors import ConfigurationError

    try:
        config = load_config()
    except ConfigurationError:
        # Reported by the command that needs the configuration
        config = {}
    configure_logging(config, verbose=verbose)


@cli.command('blessings')
def blessings_handler():
    """List the standard Store blessing levels, lowest first."""
    from storescm.domain import BLESSING_LEVELS

    for level in BLESSING_LEVELS:
        click.echo(level)


# Core commands
cli.add_command(poll_handler, name='poll')
cli.add_command(checkout_handler, name='checkout')
cli.add_command(history_handler, name='history')

# Command groups
cli.add_command(scripts_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
