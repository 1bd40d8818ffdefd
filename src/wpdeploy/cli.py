# cli.py
from __future__ import annotations

import sys

import click

from wpdeploy.deploy import deploy
from wpdeploy.envfile import load_environments
from wpdeploy.errors import DeployError
from wpdeploy.model import DeployOptions, Operation
from wpdeploy.runner import StepFailure
from wpdeploy.settings import CONFIG_FILE, DEFAULT_VERBOSITY, VERSION
from wpdeploy.ui.console import Console, get_console, set_console

verbosity_option = click.option(
    "--v",
    "verbosity",
    default=DEFAULT_VERBOSITY,
    show_default=True,
    type=click.IntRange(0, 2),
    help="Verbosity level. 0 is highest and 2 is lowest.",
)
themename_option = click.option(
    "--themename",
    default=None,
    help="Only sync this theme (with --what=themes).",
)


def _report(error: DeployError) -> None:
    get_console().print_error(
        error.title,
        str(error),
        details=error.details(),
        suggestion=error.suggestion,
    )


def run_operation(ctx: click.Context, operation: Operation, env: str, what: str | None, verbosity: int, options: DeployOptions) -> None:
    """Shared body of push, pull and dump."""
    console = get_console()

    try:
        source = load_environments(ctx.obj["config"])
        result = deploy(
            source,
            env,
            operation,
            what,
            verbosity=verbosity,
            options=options,
            console=console,
        )
    except DeployError as e:
        _report(e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    if not result.ok:
        failure: StepFailure | None = result.failure
        # the runner already printed the step's own failure message
        if failure is not None and not failure.message:
            _report(failure)
        elif failure is not None:
            console.print_debug("\n".join(failure.details()))
        console.print_leftovers([a.describe() for a in result.leftovers()])
        sys.exit(1)

    console.print_done()


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--config",
    "config_path",
    default=CONFIG_FILE,
    show_default=True,
    envvar="WP_DEPLOY_CONFIG",
    help="YAML file holding the '@<env>' sections",
)
@click.pass_context
def cli(ctx, debug, config_path):
    """Deploys the local WordPress database or the uploads, plugins, themes or core directories."""
    set_console(Console(debug=debug))
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config_path


@cli.command()
def info():
    """Displays information about the current version of the deploy command."""
    console = get_console()
    console.print_info(f"wp-deploy version {VERSION}")
    console.print_info("Supported subcommands: push, pull, dump")
    console.print_info('Run "wp-deploy --help" for the documentation')


@cli.command()
@click.argument("environment")
@click.option("--what", required=True, help="What to deploy: db, uploads, themes, plugins or core.")
@themename_option
@verbosity_option
@click.pass_context
def push(ctx, environment, what, themename, verbosity):
    """Pushes the local database or files to ENVIRONMENT."""
    run_operation(ctx, Operation.PUSH, environment, what, verbosity, DeployOptions(themename=themename))


@cli.command()
@click.argument("environment")
@click.option("--what", required=True, help="What to pull: db, uploads, themes, plugins or core.")
@click.option("--backup/--no-backup", default=None, help="Back up the local copy first (on by default for db).")
@click.option("--cleanup", is_flag=True, default=False, help="Delete the pulled database dump after import.")
@themename_option
@verbosity_option
@click.pass_context
def pull(ctx, environment, what, backup, cleanup, themename, verbosity):
    """Pulls the database or files from ENVIRONMENT to local."""
    options = DeployOptions(themename=themename, backup=backup, cleanup=cleanup)
    run_operation(ctx, Operation.PULL, environment, what, verbosity, options)


@cli.command()
@click.argument("environment")
@click.option("--file", "file_path", default=None, help="Write the dump here instead of the working directory.")
@verbosity_option
@click.pass_context
def dump(ctx, environment, file_path, verbosity):
    """Dumps the local database prepared for ENVIRONMENT."""
    run_operation(ctx, Operation.DUMP, environment, None, verbosity, DeployOptions(file=file_path))


if __name__ == "__main__":
    cli()
