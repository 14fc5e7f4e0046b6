"""Connection types and how each one turns a target into a command."""

from __future__ import annotations

import enum
import os
from typing import List, Optional, assert_never
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from .config import AlertHost, FleetRegistry
from .context import ResolutionContext
from .errors import (
    InvalidTargetFormat,
    MissingTarget,
    MissingTransferPaths,
    UnknownAlertHost,
)
from .outbound import (
    Action,
    ConsoleAction,
    OutboundCommand,
    PortForwardAction,
    ShellAction,
    TransferAction,
    TransferDirection,
    build_outbound_command,
)
from .output import bold
from .resolution import (
    ResolvedEndpoint,
    resolve_application,
    resolve_machine,
)
from .target import TargetSpec, parse_app_target, parse_target

RABBITMQ_PORT = 15672
SIDEKIQ_MONITORING_PORT = 3211


class ConnectionType(str, enum.Enum):
    SSH = "ssh"
    APP_CONSOLE = "app-console"
    APP_DBCONSOLE = "app-dbconsole"
    RABBITMQ = "rabbitmq"
    SIDEKIQ_MONITORING = "sidekiq-monitoring"
    SCP_PUSH = "scp-push"
    SCP_PULL = "scp-pull"

    @property
    def description(self) -> str:
        return CONNECTION_TYPE_DESCRIPTIONS[self]


CONNECTION_TYPE_DESCRIPTIONS: dict[ConnectionType, str] = {
    ConnectionType.SSH: "Connect to a machine through SSH.",
    ConnectionType.APP_CONSOLE: (
        "Launch a console for an application. For example, a rails"
        " console when connecting to a Rails application."
    ),
    ConnectionType.APP_DBCONSOLE: (
        "Launch a console for the database for an application."
    ),
    ConnectionType.RABBITMQ: (
        "Setup port forwarding to the RabbitMQ admin interface."
    ),
    ConnectionType.SIDEKIQ_MONITORING: (
        "Setup port forwarding to the Sidekiq Monitoring application."
    ),
    ConnectionType.SCP_PUSH: "Copy local files to a machine.",
    ConnectionType.SCP_PULL: "Copy files from a machine.",
}

EXAMPLES = [
    "fleet-connect ssh --environment integration backend",
    "fleet-connect app-console --environment staging publishing-api",
    "fleet-connect app-dbconsole -e integration whitehall_backend/whitehall",
    "fleet-connect rabbitmq -e staging aws/rabbitmq",
    "fleet-connect sidekiq-monitoring -e integration",
    "fleet-connect scp-push -e integration backend:2 notes.txt /tmp/",
    "fleet-connect scp-pull -e integration backend /var/log/syslog .",
]


class ConnectionRequest(BaseModel):
    """What the operator asked for on the command line."""

    model_config = ConfigDict(frozen=True)
    type: ConnectionType
    target: Optional[str] = None
    hosting: Optional[str] = None
    port_forward: Optional[int] = Field(default=None, ge=1, le=65535)
    paths: List[str] = Field(default_factory=list)
    extra_args: List[str] = Field(default_factory=list)


def hosting_and_environment_from_url(
    url: str, registry: FleetRegistry
) -> AlertHost:
    """Look up the hosting and environment of an alert URL's host."""
    host = urlparse(url).hostname
    alert = registry.alert_hosts.get(host or "")
    if alert is None:
        raise UnknownAlertHost(host, sorted(registry.alert_hosts))
    return alert


def rabbitmq_root_password_command(
    hosting: str, ctx: ResolutionContext
) -> str:
    directory = os.path.join(
        os.path.expanduser(ctx.config.secrets_root),
        ctx.registry.secrets_dirs.get(hosting, "puppet"),
    )
    return (
        f"cd {directory} && rake eyaml:decrypt_value"
        f"[{ctx.environment},govuk_rabbitmq::root_password]"
    )


def _require_target(target: str | None) -> str:
    if not target:
        raise MissingTarget(EXAMPLES)
    return target


def _machine_target(
    request: ConnectionRequest,
    ctx: ResolutionContext,
    default_target: str | None = None,
) -> TargetSpec:
    """Parse the machine target, merging in a hosting from an alert URL."""
    raw = _require_target(request.target or default_target)
    spec = parse_target(raw, ctx.registry.hosting_providers)
    if request.hosting is not None:
        if spec.hosting is not None:
            raise InvalidTargetFormat(raw, "hosting specified twice")
        spec = TargetSpec(
            hosting=request.hosting, name=spec.name, number=spec.number
        )
    return spec


def _build(
    resolved: ResolvedEndpoint,
    action: Action,
    request: ConnectionRequest,
    ctx: ResolutionContext,
) -> OutboundCommand:
    command = build_outbound_command(
        resolved,
        ctx.environment,
        action,
        registry=ctx.registry,
        credentials=ctx.credentials,
        opts=ctx.config.ssh_options,
        extra_args=request.extra_args,
        rng=ctx.rng,
    )
    if command.local_url is not None:
        ctx.reporter.info(
            f"Port forwarding setup, access:\n\n  {command.local_url}\n"
        )
    return command


def _machine_action(
    request: ConnectionRequest, ctx: ResolutionContext
) -> OutboundCommand:
    spec = _machine_target(request, ctx)
    resolved = resolve_machine(spec, ctx)
    action: Action
    if request.port_forward is not None:
        action = PortForwardAction(remote_port=request.port_forward)
    else:
        action = ShellAction()
    return _build(resolved, action, request, ctx)


def _app_action(
    request: ConnectionRequest, ctx: ResolutionContext, kind: str
) -> OutboundCommand:
    spec = parse_app_target(_require_target(request.target))
    ctx.reporter.info(
        f"Connecting to the app {kind} for {bold(spec.app_name)},"
        f" in the {bold(ctx.environment)} environment"
    )
    resolved = resolve_application(spec, ctx, request.hosting)
    command = f"{ctx.registry.app_command_prefix}{kind} {spec.app_name}"
    return _build(resolved, ConsoleAction(command=command), request, ctx)


def _forward_action(
    request: ConnectionRequest,
    ctx: ResolutionContext,
    default_target: str,
    remote_port: int,
) -> OutboundCommand:
    spec = _machine_target(request, ctx, default_target)
    resolved = resolve_machine(spec, ctx)
    return _build(
        resolved, PortForwardAction(remote_port=remote_port), request, ctx
    )


def _rabbitmq_action(
    request: ConnectionRequest, ctx: ResolutionContext
) -> OutboundCommand:
    spec = _machine_target(request, ctx, "rabbitmq")
    resolved = resolve_machine(spec, ctx)
    hint = rabbitmq_root_password_command(resolved.hosting, ctx)
    ctx.reporter.info(
        f"You'll need to login as the RabbitMQ {bold('root')} user."
    )
    ctx.reporter.info("Get the password from govuk-secrets, for example:\n")
    ctx.reporter.info(f"  {bold(hint)}\n")
    return _build(
        resolved, PortForwardAction(remote_port=RABBITMQ_PORT), request, ctx
    )


def _transfer_action(
    request: ConnectionRequest,
    ctx: ResolutionContext,
    direction: TransferDirection,
) -> OutboundCommand:
    if len(request.paths) < 2:
        raise MissingTransferPaths(request.type.value)
    spec = _machine_target(request, ctx)
    resolved = resolve_machine(spec, ctx)
    action = TransferAction(
        direction=direction,
        sources=request.paths[:-1],
        destination=request.paths[-1],
    )
    return _build(resolved, action, request, ctx)


def connect(
    request: ConnectionRequest, ctx: ResolutionContext
) -> OutboundCommand:
    """Resolve the request's target and build its outbound command."""
    match request.type:
        case ConnectionType.SSH:
            return _machine_action(request, ctx)
        case ConnectionType.APP_CONSOLE:
            return _app_action(request, ctx, "console")
        case ConnectionType.APP_DBCONSOLE:
            return _app_action(request, ctx, "dbconsole")
        case ConnectionType.RABBITMQ:
            return _rabbitmq_action(request, ctx)
        case ConnectionType.SIDEKIQ_MONITORING:
            return _forward_action(
                request, ctx, "backend", SIDEKIQ_MONITORING_PORT
            )
        case ConnectionType.SCP_PUSH:
            return _transfer_action(request, ctx, TransferDirection.PUSH)
        case ConnectionType.SCP_PULL:
            return _transfer_action(request, ctx, TransferDirection.PULL)
        case _:
            assert_never(request.type)
