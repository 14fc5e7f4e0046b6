"""Shared test fixtures."""

from __future__ import annotations

import io
import random
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

from fleetconnect.config import (
    Config,
    SshConnectionOptions,
    SshCredentials,
)
from fleetconnect.context import ResolutionContext
from fleetconnect.output import Reporter

STAGING_AWS_JUMPBOX = "jumpbox.staging.govuk.digital"
STAGING_CARRENZA_JUMPBOX = "jumpbox.staging.publishing.service.gov.uk"
INTEGRATION_JUMPBOX = "jumpbox.integration.publishing.service.gov.uk"

AWS_HIERADATA = """\
node_class:
  whitehall_backend:
    apps:
      - whitehall
  backend:
    apps:
      - publishing-api
      - signon
  frontend:
    apps:
      - collections
"""

CARRENZA_HIERADATA = """\
node_class:
  backend:
    apps:
      - publishing-api
      - content-store
  draft_backend:
    apps:
      - content-store
"""


class FakeRunner:
    """Stand-in for the Fabric runner, answering from a fixed table."""

    def __init__(self) -> None:
        self.responses: dict[tuple[str, str], tuple[int, str]] = {}
        self.calls: list[tuple[str, str]] = []

    def add(
        self,
        host: str,
        command: str,
        lines: list[str],
        returncode: int = 0,
    ) -> None:
        self.responses[(host, command)] = (returncode, "\n".join(lines))

    def __call__(
        self,
        host: str,
        command: str,
        credentials: SshCredentials,
        opts: SshConnectionOptions,
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append((host, command))
        returncode, stdout = self.responses.get((host, command), (0, ""))
        return subprocess.CompletedProcess(
            args=command,
            returncode=returncode,
            stdout=stdout + "\n",
            stderr="" if returncode == 0 else "permission denied",
        )


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture()
def reporter(output: io.StringIO) -> Reporter:
    console = Console(file=output, width=200, color_system=None)
    return Reporter(verbose=True, console=console)


@pytest.fixture()
def hieradata_root(tmp_path: Path) -> Path:
    root = tmp_path / "govuk-puppet"
    (root / "hieradata_aws").mkdir(parents=True)
    (root / "hieradata").mkdir(parents=True)
    (root / "hieradata_aws" / "staging.yaml").write_text(AWS_HIERADATA)
    (root / "hieradata" / "staging.yaml").write_text("{}\n")
    (root / "hieradata" / "common.yaml").write_text(CARRENZA_HIERADATA)
    (root / "hieradata_aws" / "integration.yaml").write_text(AWS_HIERADATA)
    return root


@pytest.fixture()
def config(hieradata_root: Path, tmp_path: Path) -> Config:
    return Config(
        ssh_username="alice",
        hieradata_root=str(hieradata_root),
        secrets_root=str(tmp_path / "govuk-secrets"),
    )


@pytest.fixture()
def make_ctx(
    config: Config,
    reporter: Reporter,
    fake_runner: FakeRunner,
):
    def _make(
        environment: str = "staging",
        rng: random.Random | None = None,
    ) -> ResolutionContext:
        return ResolutionContext.create(
            config,
            environment,
            reporter,
            runner=fake_runner,
            rng=rng or random.Random(0),
            environ={},
        )

    return _make
