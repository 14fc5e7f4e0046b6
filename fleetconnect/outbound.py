"""Outbound ssh/scp command lines for a resolved endpoint."""

from __future__ import annotations

import enum
import random
from collections.abc import Callable, Sequence
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .config import FleetRegistry, SshConnectionOptions, SshCredentials
from .net import find_free_port
from .remote import build_jump_args, format_remote_path
from .resolution import ResolvedEndpoint


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class ShellAction(_Action):
    """An interactive login shell."""

    kind: Literal["shell"] = "shell"


class ConsoleAction(_Action):
    """Run a command on the machine with a TTY attached."""

    kind: Literal["console"] = "console"
    command: str = Field(..., min_length=1)


class PortForwardAction(_Action):
    """Tunnel a free local port to a port on the machine."""

    kind: Literal["port-forward"] = "port-forward"
    remote_port: int = Field(..., ge=1, le=65535)


class TransferDirection(str, enum.Enum):
    PUSH = "push"
    PULL = "pull"


class TransferAction(_Action):
    """Copy one or more sources to a single destination."""

    kind: Literal["transfer"] = "transfer"
    direction: TransferDirection
    sources: List[str] = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)


Action = Union[ShellAction, ConsoleAction, PortForwardAction, TransferAction]


class OutboundCommand(BaseModel):
    """A command line ready to replace the current process."""

    model_config = ConfigDict(frozen=True)
    argv: List[str]
    local_url: Optional[str] = None


def build_outbound_command(
    resolved: ResolvedEndpoint,
    environment: str,
    action: Action,
    *,
    registry: FleetRegistry,
    credentials: SshCredentials,
    opts: SshConnectionOptions,
    extra_args: Sequence[str] = (),
    port_finder: Callable[[], int] | None = None,
    rng: random.Random | None = None,
) -> OutboundCommand:
    """Compose the two-hop command for *action* on *resolved*.

    The first hop goes to the environment's jumpbox and the second to the
    machine itself. *extra_args* are passed to the client untouched after
    the constructed options.
    """
    jumpbox = registry.jumpbox(environment, resolved.hosting)
    jump_args = build_jump_args(jumpbox, credentials, opts)
    target = credentials.at(resolved.hostname)

    match action:
        case ShellAction():
            argv = ["ssh", *jump_args, target, *extra_args]
            return OutboundCommand(argv=argv)
        case ConsoleAction():
            # -t so that interactive commands get a terminal
            argv = [
                "ssh",
                *jump_args,
                target,
                "-t",
                action.command,
                *extra_args,
            ]
            return OutboundCommand(argv=argv)
        case PortForwardAction():
            if port_finder is not None:
                local_port = port_finder()
            else:
                local_port = find_free_port(rng)
            forward = f"127.0.0.1:{local_port}:127.0.0.1:{action.remote_port}"
            argv = [
                "ssh",
                *jump_args,
                target,
                "-N",
                "-L",
                forward,
                *extra_args,
            ]
            return OutboundCommand(
                argv=argv,
                local_url=f"http://127.0.0.1:{local_port}/",
            )
        case TransferAction():
            match action.direction:
                case TransferDirection.PUSH:
                    sources = list(action.sources)
                    destination = format_remote_path(
                        credentials, resolved.hostname, action.destination
                    )
                case TransferDirection.PULL:
                    sources = [
                        format_remote_path(
                            credentials, resolved.hostname, source
                        )
                        for source in action.sources
                    ]
                    destination = action.destination
            argv = ["scp", *jump_args, *extra_args, *sources, destination]
            return OutboundCommand(argv=argv)
