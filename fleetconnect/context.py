"""Per-invocation state shared by the resolution stages."""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass, field

from .config import Config, FleetRegistry, SshCredentials, resolve_credentials
from .inventory import InventoryClient, RemoteRunner
from .output import Reporter
from .remote import run_remote_command


@dataclass
class ResolutionContext:
    """Everything a resolution needs, computed once up front.

    The inventory client memoizes its queries, so a context must not be
    reused across invocations.
    """

    config: Config
    environment: str
    credentials: SshCredentials
    inventory: InventoryClient
    reporter: Reporter
    rng: random.Random = field(default_factory=random.Random)

    @property
    def registry(self) -> FleetRegistry:
        return self.config.fleet

    @classmethod
    def create(
        cls,
        config: Config,
        environment: str,
        reporter: Reporter,
        *,
        runner: RemoteRunner = run_remote_command,
        rng: random.Random | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ResolutionContext:
        config.fleet.check_environment(environment)
        credentials = resolve_credentials(config, environ)
        return cls(
            config=config,
            environment=environment,
            credentials=credentials,
            inventory=InventoryClient(config, credentials, reporter, runner),
            reporter=reporter,
            rng=rng or random.Random(),
        )
