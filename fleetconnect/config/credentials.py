"""SSH identity used for every hop of an invocation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .protocol import Config


class SshCredentials(BaseModel):
    """Username and optional private key, computed once per run."""

    model_config = ConfigDict(frozen=True)
    username: Optional[str] = None
    identity_file: Optional[str] = None

    def identity_arguments(self) -> list[str]:
        if self.identity_file:
            return ["-i", self.identity_file]
        else:
            return []

    def at(self, host: str) -> str:
        """Format *host* as ``user@host`` when a username is known."""
        return f"{self.username}@{host}" if self.username else host


def resolve_credentials(
    config: Config,
    environ: Mapping[str, str] | None = None,
) -> SshCredentials:
    """Take the username from the config, else ``$USER``."""
    env = os.environ if environ is None else environ
    identity_file = (
        os.path.expanduser(config.ssh_identity_file)
        if config.ssh_identity_file
        else None
    )
    return SshCredentials(
        username=config.ssh_username or env.get("USER"),
        identity_file=identity_file,
    )
