from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..errors import UnknownEnvironment, UnknownJumpbox


def _to_kebab(name: str) -> str:
    return name.replace("_", "-")


class _BaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_kebab,
        populate_by_name=True,
        frozen=True,
    )


DEFAULT_JUMPBOXES: dict[str, dict[str, str]] = {
    "ci": {
        "carrenza": "ci-jumpbox.integration.publishing.service.gov.uk",
    },
    "integration": {
        "aws": "jumpbox.integration.publishing.service.gov.uk",
    },
    "staging": {
        "carrenza": "jumpbox.staging.publishing.service.gov.uk",
        "aws": "jumpbox.staging.govuk.digital",
    },
    "production": {
        "carrenza": "jumpbox.publishing.service.gov.uk",
        "aws": "jumpbox.production.govuk.digital",
    },
}

# Hostnames with these suffixes are already fully qualified.
DEFAULT_HOST_SUFFIXES: dict[str, str] = {
    ".internal": "aws",
    ".gov.uk": "carrenza",
}

DEFAULT_ALERT_HOSTS: dict[str, dict[str, str]] = {
    "ci-alert.integration.publishing.service.gov.uk": {
        "hosting": "carrenza",
        "environment": "ci",
    },
    "alert.integration.publishing.service.gov.uk": {
        "hosting": "aws",
        "environment": "integration",
    },
    "alert.staging.govuk.digital": {
        "hosting": "aws",
        "environment": "staging",
    },
    "alert.blue.staging.govuk.digital": {
        "hosting": "aws",
        "environment": "staging",
    },
    "alert.staging.publishing.service.gov.uk": {
        "hosting": "carrenza",
        "environment": "staging",
    },
    "alert.production.govuk.digital": {
        "hosting": "aws",
        "environment": "production",
    },
    "alert.blue.production.govuk.digital": {
        "hosting": "aws",
        "environment": "production",
    },
    "alert.publishing.service.gov.uk": {
        "hosting": "carrenza",
        "environment": "production",
    },
}

DEFAULT_HIERADATA_DIRS: dict[str, str] = {
    "carrenza": "hieradata",
    "aws": "hieradata_aws",
}

DEFAULT_SECRETS_DIRS: dict[str, str] = {
    "carrenza": "puppet",
    "aws": "puppet_aws",
}


class SshConnectionOptions(_BaseModel):
    """SSH connection options.

    Applied both to inventory queries on jumpboxes (through Fabric and
    Paramiko) and to the outbound ssh/scp command line.
    """

    # SSH: ConnectTimeout | Fabric: connect_timeout
    connect_timeout: int = Field(default=2, ge=1)
    # Paramiko: allow_agent
    allow_agent: bool = True
    # Paramiko: look_for_keys
    look_for_keys: bool = True
    # SSH: StrictHostKeyChecking
    # Paramiko: SSHClient.set_missing_host_key_policy()
    strict_host_key_checking: bool = True
    # SSH: UserKnownHostsFile | Paramiko: SSHClient.load_host_keys()
    known_hosts_file: Optional[str] = None


class AlertHost(_BaseModel):
    """Hosting and environment served by an alerting host."""

    hosting: str = Field(..., min_length=1)
    environment: str = Field(..., min_length=1)


class FleetRegistry(_BaseModel):
    """Static description of environments, providers and jumpboxes."""

    jumpboxes: Dict[str, Dict[str, str]] = Field(
        default_factory=lambda: {
            env: dict(hosts) for env, hosts in DEFAULT_JUMPBOXES.items()
        }
    )
    host_suffixes: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HOST_SUFFIXES)
    )
    alert_hosts: Dict[str, AlertHost] = Field(
        default_factory=lambda: {
            host: AlertHost(**data)
            for host, data in DEFAULT_ALERT_HOSTS.items()
        }
    )
    hieradata_dirs: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HIERADATA_DIRS)
    )
    secrets_dirs: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_SECRETS_DIRS)
    )
    node_list_command: str = Field(default="govuk_node_list", min_length=1)
    app_command_prefix: str = Field(default="govuk_app_", min_length=1)

    @field_validator("jumpboxes")
    @classmethod
    def require_providers(
        cls, v: Dict[str, Dict[str, str]]
    ) -> Dict[str, Dict[str, str]]:
        if not v:
            raise ValueError("At least one environment is required")
        for env, hosts in v.items():
            if not hosts:
                raise ValueError(
                    f"Environment '{env}' has no jumpboxes configured"
                )
        return v

    @property
    def environments(self) -> list[str]:
        return list(self.jumpboxes)

    @property
    def hosting_providers(self) -> list[str]:
        """All providers, in first-seen order across environments."""
        providers: list[str] = []
        for hosts in self.jumpboxes.values():
            for provider in hosts:
                if provider not in providers:
                    providers.append(provider)
        return providers

    def check_environment(self, environment: str) -> None:
        if environment not in self.jumpboxes:
            raise UnknownEnvironment(environment, self.environments)

    def providers_for(self, environment: str) -> list[str]:
        self.check_environment(environment)
        return list(self.jumpboxes[environment])

    def single_provider_for(self, environment: str) -> str | None:
        """Return the provider when an environment has exactly one."""
        providers = self.providers_for(environment)
        if len(providers) == 1:
            return providers[0]
        else:
            return None

    def jumpbox(self, environment: str, hosting: str) -> str:
        providers = self.providers_for(environment)
        jumpbox = self.jumpboxes[environment].get(hosting)
        if jumpbox is None:
            raise UnknownJumpbox(environment, hosting, providers)
        return jumpbox

    def provider_for_hostname(self, hostname: str) -> str | None:
        """Provider implied by a fully qualified hostname, if any."""
        for suffix, provider in self.host_suffixes.items():
            if hostname.endswith(suffix):
                return provider
        return None

    @model_validator(mode="after")
    def validate_cross_references(self) -> FleetRegistry:
        providers = set(self.hosting_providers)
        for suffix, provider in self.host_suffixes.items():
            if provider not in providers:
                raise ValueError(
                    f"Host suffix '{suffix}' references "
                    f"unknown hosting provider '{provider}'"
                )
        for host, alert in self.alert_hosts.items():
            if alert.environment not in self.jumpboxes:
                raise ValueError(
                    f"Alert host '{host}' references "
                    f"unknown environment '{alert.environment}'"
                )
            if alert.hosting not in self.jumpboxes[alert.environment]:
                raise ValueError(
                    f"Alert host '{host}' references hosting provider "
                    f"'{alert.hosting}' which does not serve "
                    f"'{alert.environment}'"
                )
        for table_name, table in (
            ("hieradata-dirs", self.hieradata_dirs),
            ("secrets-dirs", self.secrets_dirs),
        ):
            for provider in table:
                if provider not in providers:
                    raise ValueError(
                        f"{table_name} references "
                        f"unknown hosting provider '{provider}'"
                    )
        return self


class Config(_BaseModel):
    """Top-level fleet-connect configuration."""

    ssh_username: Optional[str] = None
    ssh_identity_file: Optional[str] = None
    ssh_options: SshConnectionOptions = Field(
        default_factory=lambda: SshConnectionOptions()
    )
    hieradata_root: str = "~/govuk/govuk-puppet"
    secrets_root: str = "~/govuk/govuk-secrets"
    fleet: FleetRegistry = Field(default_factory=lambda: FleetRegistry())

    @field_validator("ssh_username", "ssh_identity_file", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

