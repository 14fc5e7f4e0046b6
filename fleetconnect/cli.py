"""Typer CLI: one command per connection type."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Annotated, Any, Optional

import typer

from . import __version__
from .config import Config, ConfigError, load_config
from .connections import (
    EXAMPLES,
    ConnectionRequest,
    ConnectionType,
    connect,
    hosting_and_environment_from_url,
)
from .context import ResolutionContext
from .errors import FleetConnectError, MissingEnvironment
from .output import (
    Reporter,
    print_config_error,
    print_error,
    print_running_command,
)
from .remote import exec_outbound

MACHINE_TARGET_HELP = """\
Machines are named by node class, for example "backend". When the
hosting provider is ambiguous prefix it, as in "aws/backend". Add a
number to pick a specific machine, as in "backend:2".
"""

APP_TARGET_HELP = """\
Applications are named directly, for example "publishing-api". When the
node class is ambiguous prefix it, as in "whitehall_backend/whitehall".
Add a number to pick a specific machine, as in "publishing-api:2".
"""

app = typer.Typer(
    name="fleet-connect",
    help=(
        "Connect to machines and applications across hosting providers"
        " and environments. Arguments after -- are passed to ssh/scp."
    ),
    epilog="Examples:\n\n" + "\n\n".join(EXAMPLES),
    no_args_is_help=True,
)

EnvironmentOption = Annotated[
    Optional[str],
    typer.Option(
        "--environment",
        "-e",
        help="Select which environment to connect to",
    ),
]
AlertUrlOption = Annotated[
    Optional[str],
    typer.Option(
        "--hosting-and-environment-from-alert-url",
        metavar="URL",
        help=(
            "Select which environment to connect to based on"
            " the URL provided"
        ),
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable more detailed logging"),
]
ConfigOption = Annotated[
    Optional[str],
    typer.Option("--config", "-c", help="Path to config file"),
]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def cli(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Prints version information",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Connect to machines and applications in the fleet."""


def _load_config_or_exit(config_path: str | None) -> Config:
    """Load config or exit with code 2 on error."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(2)


def _passthrough(ctx: typer.Context) -> list[str]:
    obj: Any = ctx.obj
    if isinstance(obj, dict):
        return list(obj.get("passthrough", []))
    return []


def _run(
    ctx: typer.Context,
    connection_type: ConnectionType,
    target: str | None,
    environment: str | None,
    alert_url: str | None,
    verbose: bool,
    config: str | None,
    *,
    port_forward: int | None = None,
    paths: Sequence[str] = (),
) -> None:
    """Resolve the target and replace this process with ssh/scp."""
    cfg = _load_config_or_exit(config)
    reporter = Reporter(verbose=verbose)
    try:
        hosting = None
        if alert_url is not None:
            alert = hosting_and_environment_from_url(alert_url, cfg.fleet)
            hosting, environment = alert.hosting, alert.environment
        if environment is None:
            raise MissingEnvironment(cfg.fleet.environments)

        request = ConnectionRequest(
            type=connection_type,
            target=target,
            hosting=hosting,
            port_forward=port_forward,
            paths=list(paths),
            extra_args=_passthrough(ctx),
        )
        resolution = ResolutionContext.create(cfg, environment, reporter)
        outbound = connect(request, resolution)
    except FleetConnectError as e:
        print_error(e, reporter)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        raise typer.Exit(1)

    print_running_command(outbound.argv, reporter)
    try:
        exec_outbound(outbound.argv)
    except FleetConnectError as e:
        print_error(e, reporter)
        raise typer.Exit(1)
    except OSError as e:
        reporter.error(f"error: couldn't run {outbound.argv[0]}: {e}")
        raise typer.Exit(1)


@app.command(help=f"{ConnectionType.SSH.description}\n\n{MACHINE_TARGET_HELP}")
def ssh(
    ctx: typer.Context,
    target: Annotated[
        Optional[str], typer.Argument(help="Machine target")
    ] = None,
    port_forward: Annotated[
        Optional[int],
        typer.Option(
            "--port-forward",
            "-p",
            help="Connect to a remote port",
            min=1,
            max=65535,
        ),
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.SSH,
        target,
        environment,
        alert_url,
        verbose,
        config,
        port_forward=port_forward,
    )


@app.command(
    "app-console",
    help=f"{ConnectionType.APP_CONSOLE.description}\n\n{APP_TARGET_HELP}",
)
def app_console(
    ctx: typer.Context,
    target: Annotated[
        Optional[str], typer.Argument(help="Application target")
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.APP_CONSOLE,
        target,
        environment,
        alert_url,
        verbose,
        config,
    )


@app.command(
    "app-dbconsole",
    help=f"{ConnectionType.APP_DBCONSOLE.description}\n\n{APP_TARGET_HELP}",
)
def app_dbconsole(
    ctx: typer.Context,
    target: Annotated[
        Optional[str], typer.Argument(help="Application target")
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.APP_DBCONSOLE,
        target,
        environment,
        alert_url,
        verbose,
        config,
    )


@app.command(help=ConnectionType.RABBITMQ.description)
def rabbitmq(
    ctx: typer.Context,
    target: Annotated[
        Optional[str],
        typer.Argument(help="Machine target, defaults to rabbitmq"),
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.RABBITMQ,
        target,
        environment,
        alert_url,
        verbose,
        config,
    )


@app.command(
    "sidekiq-monitoring",
    help=ConnectionType.SIDEKIQ_MONITORING.description,
)
def sidekiq_monitoring(
    ctx: typer.Context,
    target: Annotated[
        Optional[str],
        typer.Argument(help="Machine target, defaults to backend"),
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.SIDEKIQ_MONITORING,
        target,
        environment,
        alert_url,
        verbose,
        config,
    )


@app.command(
    "scp-push",
    help=f"{ConnectionType.SCP_PUSH.description}\n\n{MACHINE_TARGET_HELP}",
)
def scp_push(
    ctx: typer.Context,
    target: Annotated[
        Optional[str], typer.Argument(help="Machine target")
    ] = None,
    paths: Annotated[
        Optional[list[str]],
        typer.Argument(help="Local sources followed by a remote destination"),
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.SCP_PUSH,
        target,
        environment,
        alert_url,
        verbose,
        config,
        paths=paths or [],
    )


@app.command(
    "scp-pull",
    help=f"{ConnectionType.SCP_PULL.description}\n\n{MACHINE_TARGET_HELP}",
)
def scp_pull(
    ctx: typer.Context,
    target: Annotated[
        Optional[str], typer.Argument(help="Machine target")
    ] = None,
    paths: Annotated[
        Optional[list[str]],
        typer.Argument(help="Remote sources followed by a local destination"),
    ] = None,
    environment: EnvironmentOption = None,
    alert_url: AlertUrlOption = None,
    verbose: VerboseOption = False,
    config: ConfigOption = None,
) -> None:
    _run(
        ctx,
        ConnectionType.SCP_PULL,
        target,
        environment,
        alert_url,
        verbose,
        config,
        paths=paths or [],
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point.

    Arguments after ``--`` are split off before option parsing and handed
    to the outbound client untouched.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    passthrough: list[str] = []
    if "--" in args:
        index = args.index("--")
        args, passthrough = args[:index], args[index + 1 :]
    app(
        args=args,
        prog_name="fleet-connect",
        obj={"passthrough": passthrough},
    )


if __name__ == "__main__":
    main()
