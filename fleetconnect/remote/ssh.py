"""SSH and SCP command line building, and process replacement."""

from __future__ import annotations

import os
import shutil

from ..config import SshConnectionOptions, SshCredentials
from ..errors import CommandNotFound


def ssh_o_options(opts: SshConnectionOptions) -> list[str]:
    """Derive -o arguments for options that differ from ssh defaults."""
    result: list[str] = []
    if not opts.strict_host_key_checking:
        result.extend(["-o", "StrictHostKeyChecking=no"])
    if opts.known_hosts_file is not None:
        result.extend(["-o", f"UserKnownHostsFile={opts.known_hosts_file}"])
    return result


def build_query_args(
    jumpbox: str,
    command: str,
    credentials: SshCredentials,
    opts: SshConnectionOptions,
) -> list[str]:
    """Equivalent ssh command line for an inventory query.

    Returns args like:
        ssh -o ConnectTimeout=2 [-i key] user@jumpbox command
    """
    return [
        "ssh",
        "-o",
        f"ConnectTimeout={opts.connect_timeout}",
        *credentials.identity_arguments(),
        *ssh_o_options(opts),
        credentials.at(jumpbox),
        command,
    ]


def build_jump_args(
    jumpbox: str,
    credentials: SshCredentials,
    opts: SshConnectionOptions,
) -> list[str]:
    """Identity, options and -J for a connection through *jumpbox*."""
    return [
        *credentials.identity_arguments(),
        *ssh_o_options(opts),
        "-J",
        credentials.at(jumpbox),
    ]


def format_remote_path(
    credentials: SshCredentials, host: str, path: str
) -> str:
    """Format a remote path as [user@]host:path."""
    return f"{credentials.at(host)}:{path}"


def exec_outbound(argv: list[str]) -> None:
    """Replace the current process with *argv*.

    Only returns if the replacement fails.
    """
    path = shutil.which(argv[0])
    if path is None:
        raise CommandNotFound(argv[0])
    os.execv(path, argv)
