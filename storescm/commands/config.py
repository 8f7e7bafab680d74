import click
import json

from storescm.config import load_config
from storescm.errors import ConfigurationError
from storescm.exit_codes import exit_code_for, exit_with_code
from storescm.output import emit_error


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("generate")
def generate_config():
    """Write an example configuration file if none exists."""
    from storescm.config import get_config_path

    example = {
        "store_scripts": [
            {"name": "vw77", "path": "/opt/vw7.7/bin/storeci.sh"}
        ],
        "jobs": {
            "nightly": {
                "monitors": [
                    {
                        "script": "vw77",
                        "repository": "psql_public_cst",
                        "pundles": [
                            {"name": "MyApplication", "type": "bundle"},
                            {"name": "MyApplication-Tests", "type": "package"}
                        ],
                        "version_regex": ".+",
                        "minimum_blessing_level": "Development",
                        "generate_parcel_builder_input_file": False,
                        "parcel_builder_input_filename": "parcelsToBuild"
                    }
                ]
            }
        }
    }
    config_path = get_config_path()
    if config_path.exists():
        click.echo(f"Configuration already exists at {config_path}. Example configuration:\n{json.dumps(example, indent=2)}")
        return
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        json.dump(example, f, indent=2)
    click.echo(f"Example configuration written to {config_path}")


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@click.option("--raw", is_flag=True, help="Show the file as written, without defaults or STORESCM_* overrides")
def show_config(pretty, path, raw):
    """Show the effective configuration as one line of JSON."""
    from storescm.config import get_config_path, read_config_file

    if path:
        click.echo(json.dumps({"config_path": str(get_config_path())}))
        return

    try:
        config = read_config_file() if raw else load_config()
    except ConfigurationError as e:
        emit_error(str(e), type=e.__class__.__name__)
        exit_with_code(exit_code_for(e))

    click.echo(json.dumps(config, indent=2 if pretty else None, ensure_ascii=False))
