"""Tests for fleetconnect.outbound."""

from __future__ import annotations

import pytest

from fleetconnect.config import (
    FleetRegistry,
    SshConnectionOptions,
    SshCredentials,
)
from fleetconnect.errors import UnknownJumpbox
from fleetconnect.outbound import (
    ConsoleAction,
    PortForwardAction,
    ShellAction,
    TransferAction,
    TransferDirection,
    build_outbound_command,
)
from fleetconnect.resolution import ResolvedEndpoint, Selection

from .conftest import INTEGRATION_JUMPBOX, STAGING_AWS_JUMPBOX

HOST = "ip-10-1-2-3.eu-west-1.compute.internal"


@pytest.fixture()
def resolved() -> ResolvedEndpoint:
    return ResolvedEndpoint(
        hosting="aws", hostname=HOST, selection=Selection.QUALIFIED
    )


@pytest.fixture()
def credentials() -> SshCredentials:
    return SshCredentials(username="alice")


def _build(resolved, action, credentials, **kwargs):
    return build_outbound_command(
        resolved,
        kwargs.pop("environment", "staging"),
        action,
        registry=FleetRegistry(),
        credentials=credentials,
        opts=kwargs.pop("opts", SshConnectionOptions()),
        **kwargs,
    )


class TestShell:
    def test_two_hop(self, resolved, credentials) -> None:
        command = _build(resolved, ShellAction(), credentials)
        assert command.argv == [
            "ssh",
            "-J",
            f"alice@{STAGING_AWS_JUMPBOX}",
            f"alice@{HOST}",
        ]
        assert command.local_url is None

    def test_passthrough_comes_last(self, resolved, credentials) -> None:
        command = _build(
            resolved,
            ShellAction(),
            credentials,
            extra_args=["-v", "uptime"],
        )
        assert command.argv[-2:] == ["-v", "uptime"]

    def test_identity_and_host_key_options(self, resolved) -> None:
        creds = SshCredentials(username="alice", identity_file="/k/id")
        opts = SshConnectionOptions(
            strict_host_key_checking=False, known_hosts_file="/k/hosts"
        )
        command = _build(resolved, ShellAction(), creds, opts=opts)
        assert command.argv == [
            "ssh",
            "-i",
            "/k/id",
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            "UserKnownHostsFile=/k/hosts",
            "-J",
            f"alice@{STAGING_AWS_JUMPBOX}",
            f"alice@{HOST}",
        ]

    def test_without_username(self, resolved) -> None:
        command = _build(resolved, ShellAction(), SshCredentials())
        assert command.argv == ["ssh", "-J", STAGING_AWS_JUMPBOX, HOST]

    def test_jumpbox_follows_environment(
        self, resolved, credentials
    ) -> None:
        command = _build(
            resolved, ShellAction(), credentials, environment="integration"
        )
        assert command.argv[2] == f"alice@{INTEGRATION_JUMPBOX}"

    def test_no_jumpbox_for_provider(self, credentials) -> None:
        carrenza = ResolvedEndpoint(
            hosting="carrenza",
            hostname="backend-1.gov.uk",
            selection=Selection.QUALIFIED,
        )
        with pytest.raises(UnknownJumpbox):
            _build(
                carrenza, ShellAction(), credentials, environment="integration"
            )


class TestConsole:
    def test_allocates_tty(self, resolved, credentials) -> None:
        action = ConsoleAction(command="govuk_app_console whitehall")
        command = _build(resolved, action, credentials)
        assert command.argv[-3:] == [
            f"alice@{HOST}",
            "-t",
            "govuk_app_console whitehall",
        ]


class TestPortForward:
    def test_forward(self, resolved, credentials) -> None:
        command = _build(
            resolved,
            PortForwardAction(remote_port=15672),
            credentials,
            port_finder=lambda: 40000,
        )
        assert command.argv[-4:] == [
            f"alice@{HOST}",
            "-N",
            "-L",
            "127.0.0.1:40000:127.0.0.1:15672",
        ]
        assert command.local_url == "http://127.0.0.1:40000/"


class TestTransfer:
    def test_push(self, resolved, credentials) -> None:
        action = TransferAction(
            direction=TransferDirection.PUSH,
            sources=["a.txt", "b.txt"],
            destination="/tmp/",
        )
        command = _build(
            resolved, action, credentials, extra_args=["-r"]
        )
        assert command.argv == [
            "scp",
            "-J",
            f"alice@{STAGING_AWS_JUMPBOX}",
            "-r",
            "a.txt",
            "b.txt",
            f"alice@{HOST}:/tmp/",
        ]

    def test_pull(self, resolved, credentials) -> None:
        action = TransferAction(
            direction=TransferDirection.PULL,
            sources=["/var/log/syslog"],
            destination=".",
        )
        command = _build(resolved, action, credentials)
        assert command.argv[-2:] == [f"alice@{HOST}:/var/log/syslog", "."]
