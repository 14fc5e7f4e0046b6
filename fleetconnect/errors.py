"""User-facing errors raised while resolving and connecting to a target.

Every error carries a short message plus optional remediation: a heading
and a list of items (valid options, fully qualified examples or near-match
suggestions). The CLI prints them and exits non-zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .suggest import similar_strings


class FleetConnectError(Exception):
    """Base class for errors that terminate an invocation."""

    def __init__(
        self,
        message: str,
        *,
        heading: str | None = None,
        items: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.heading = heading
        self.items = list(items)


class InvalidTargetFormat(FleetConnectError):
    """The target string does not follow the target grammar."""

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(
            f"invalid target '{target}': {reason}",
            heading="targets look like:",
            items=["name", "name:2", "hosting/name", "hosting/name:2"],
        )
        self.target = target


class UnknownHostingProvider(FleetConnectError):
    def __init__(self, hosting: str, providers: Sequence[str]) -> None:
        super().__init__(
            f"unknown hosting provider: {hosting}",
            heading="available hosting providers are:",
            items=providers,
        )
        self.hosting = hosting


class AmbiguousHosting(FleetConnectError):
    """A name exists under more than one hosting provider."""

    def __init__(
        self,
        name: str,
        environment: str,
        providers: Sequence[str],
    ) -> None:
        super().__init__(
            f"ambiguous hosting for {name} in {environment}",
            heading="specify the hosting provider and name, for example:",
            items=[f"{provider}/{name}" for provider in providers],
        )
        self.name = name
        self.providers = list(providers)


class AmbiguousGrouping(FleetConnectError):
    """An application is deployed to more than one node class."""

    def __init__(
        self,
        app_name: str,
        environment: str,
        groupings: Sequence[str],
    ) -> None:
        super().__init__(
            f"ambiguous node class for {app_name} in {environment}",
            heading="specify the node class and application name, "
            "for example:",
            items=[f"{grouping}/{app_name}" for grouping in groupings],
        )
        self.app_name = app_name
        self.groupings = list(groupings)


class NotFound(FleetConnectError):
    """A name could not be found; suggests near matches.

    When nothing is close enough, every candidate is listed instead.
    """

    def __init__(
        self,
        kind: str,
        name: str,
        location: str,
        candidates: Iterable[str],
    ) -> None:
        all_candidates = sorted(set(candidates))
        similar = similar_strings(name, all_candidates)
        if similar:
            heading = "did you mean:"
            items = similar
        else:
            heading = f"all {kind}s:"
            items = all_candidates
        super().__init__(
            f"couldn't find {kind} {name} in {location}",
            heading=heading,
            items=items,
        )
        self.name = name
        self.suggestions = similar


class InventoryUnavailable(FleetConnectError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"couldn't read node class data from {path}: {reason}",
            heading="check that the puppet repository is checked out at:",
            items=[path],
        )


class InvalidIndex(FleetConnectError):
    """A machine number is outside 1..number of machines."""

    def __init__(self, number: int, count: int) -> None:
        if number <= 0:
            message = f"invalid machine number '{number}', it must be > 0"
        else:
            message = (
                f"cannot connect to machine number: {number}"
                f" (there are {count})"
            )
        super().__init__(message)
        self.number = number
        self.count = count


class NoFreePortFound(FleetConnectError):
    def __init__(self, tried: Sequence[int]) -> None:
        super().__init__(
            "couldn't find an open local port",
            heading="ports tried:",
            items=[str(port) for port in tried],
        )


class RemoteQueryFailed(FleetConnectError):
    """An inventory query on a jumpbox failed or could not connect."""

    def __init__(
        self,
        command: str,
        username: str | None,
        detail: str | None = None,
    ) -> None:
        message = f"command failed: {command}"
        if detail:
            message += f" ({detail})"
        super().__init__(
            message,
            heading=f"The SSH username used was: {username or '(none)'}",
            items=[
                "Check this is correct, and if it isn't, set ssh_username "
                "in the config file or the USER environment variable."
            ],
        )
        self.command = command
        self.username = username


class UnknownEnvironment(FleetConnectError):
    def __init__(self, environment: str, environments: Sequence[str]) -> None:
        super().__init__(
            f"unknown environment '{environment}'",
            heading="Valid environments are:",
            items=environments,
        )


class UnknownAlertHost(FleetConnectError):
    def __init__(self, host: str | None, hosts: Sequence[str]) -> None:
        super().__init__(
            f"unknown hosting and environment for: {host}",
            heading="known alert hosts are:",
            items=hosts,
        )


class UnknownJumpbox(FleetConnectError):
    """No jumpbox is registered for an (environment, hosting) pair."""

    def __init__(
        self,
        environment: str,
        hosting: str,
        providers: Sequence[str],
    ) -> None:
        super().__init__(
            f"couldn't determine jumpbox for {hosting}/{environment}",
            heading=f"hosting providers for {environment} are:",
            items=providers,
        )


class MissingTarget(FleetConnectError):
    def __init__(self, examples: Sequence[str]) -> None:
        super().__init__(
            "you must specify the target",
            heading="Example commands:",
            items=examples,
        )


class MissingEnvironment(FleetConnectError):
    def __init__(self, environments: Sequence[str]) -> None:
        super().__init__(
            "you must specify the environment",
            heading="Valid environments are:",
            items=environments,
        )


class MissingTransferPaths(FleetConnectError):
    def __init__(self, connection_type: str) -> None:
        super().__init__(
            f"{connection_type} needs at least one source and a destination",
            heading="for example:",
            items=[f"{connection_type} -e integration backend SOURCE DEST"],
        )


class CommandNotFound(FleetConnectError):
    def __init__(self, command: str) -> None:
        super().__init__(f"{command} command not found")
