"""Fabric-based remote command execution on jumpboxes."""

from __future__ import annotations

import subprocess

import paramiko  # type: ignore[import-untyped]
from fabric import Connection  # type: ignore[import-untyped]

from ..config import SshConnectionOptions, SshCredentials


def _build_connection(
    host: str,
    credentials: SshCredentials,
    opts: SshConnectionOptions,
) -> Connection:
    """Build a Fabric Connection to a jumpbox."""
    connect_kwargs: dict[str, object] = {
        "allow_agent": opts.allow_agent,
        "look_for_keys": opts.look_for_keys,
    }
    if credentials.identity_file:
        connect_kwargs["key_filename"] = credentials.identity_file

    conn = Connection(
        host=host,
        user=credentials.username,
        connect_kwargs=connect_kwargs,
        connect_timeout=opts.connect_timeout,
    )

    # Fabric installs AutoAddPolicy itself and never loads system keys
    if opts.strict_host_key_checking:
        conn.client.load_system_host_keys()
        conn.client.set_missing_host_key_policy(paramiko.RejectPolicy())
    else:
        conn.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    if opts.known_hosts_file is not None:
        conn.client.load_host_keys(opts.known_hosts_file)

    return conn


def run_remote_command(
    host: str,
    command: str,
    credentials: SshCredentials,
    opts: SshConnectionOptions,
) -> subprocess.CompletedProcess[str]:
    """Run *command* on *host* via Fabric.

    Connection failures propagate as ``paramiko.SSHException`` or
    ``OSError``; a failing command is reported through ``returncode``.
    """
    with _build_connection(host, credentials, opts) as conn:
        result = conn.run(command, warn=True, hide=True, in_stream=False)
    return subprocess.CompletedProcess(
        args=command,
        returncode=result.exited,
        stdout=result.stdout,
        stderr=result.stderr,
    )
