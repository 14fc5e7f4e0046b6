"""Choosing the machine to connect to."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..context import ResolutionContext
from ..errors import InvalidIndex, NotFound
from ..output import bold
from ..target import AppTargetSpec, TargetSpec
from .grouping import resolve_grouping
from .hosting import resolve_app_hosting, resolve_hosting


class Selection(str, enum.Enum):
    """How the machine was chosen."""

    QUALIFIED = "qualified hostname"
    ONLY = "only machine"
    REQUESTED = "requested number"
    RANDOM = "random"


class ResolvedEndpoint(BaseModel):
    """The single machine an invocation connects to."""

    model_config = ConfigDict(frozen=True)
    hosting: str
    hostname: str
    selection: Selection
    number: Optional[int] = None
    count: int = 1


def select_endpoint(
    hosting: str,
    grouping: str,
    number: int | None,
    ctx: ResolutionContext,
) -> ResolvedEndpoint:
    """Pick one live machine of *grouping*.

    Machines are addressed by their 1-based position in the sorted list.
    Without a number a machine is picked at random; a lone machine is
    picked regardless of a positive number.
    """
    environment = ctx.environment
    domains = sorted(
        ctx.inventory.list_domains(environment, hosting, grouping)
    )

    if not domains:
        node_types = ctx.inventory.list_groupings(environment, hosting)
        raise NotFound(
            "node type", grouping, f"{hosting}/{environment}", node_types
        )
    elif number is not None and number <= 0:
        raise InvalidIndex(number, len(domains))
    elif len(domains) == 1:
        ctx.reporter.info(f"There is {bold('one machine')} to connect to")
        return ResolvedEndpoint(
            hosting=hosting,
            hostname=domains[0],
            selection=Selection.ONLY,
            number=1,
        )

    count = len(domains)
    ctx.reporter.info(f"There are {bold(f'{count} machines')} of this class")
    if number is not None:
        if number > count:
            raise InvalidIndex(number, count)
        ctx.reporter.info(f"Connecting to number {number}")
        selection = Selection.REQUESTED
    else:
        number = ctx.rng.randrange(count) + 1
        ctx.reporter.info(
            f"Connecting to a random machine (number {number})"
        )
        selection = Selection.RANDOM
    return ResolvedEndpoint(
        hosting=hosting,
        hostname=domains[number - 1],
        selection=selection,
        number=number,
        count=count,
    )


def resolve_machine(
    target: TargetSpec, ctx: ResolutionContext
) -> ResolvedEndpoint:
    """Resolve a machine target to one endpoint.

    Names carrying a known hostname suffix are used as they are, on the
    provider the suffix implies.
    """
    ctx.reporter.debug(f"resolving {target.name} in {ctx.environment}")
    suffix_hosting = ctx.registry.provider_for_hostname(target.name)
    if suffix_hosting is not None:
        if target.number is not None and target.number <= 0:
            raise InvalidIndex(target.number, 1)
        return ResolvedEndpoint(
            hosting=suffix_hosting,
            hostname=target.name,
            selection=Selection.QUALIFIED,
        )

    hosting = target.hosting or resolve_hosting(target.name, ctx)
    return select_endpoint(hosting, target.name, target.number, ctx)


def resolve_application(
    target: AppTargetSpec,
    ctx: ResolutionContext,
    hosting: str | None = None,
) -> ResolvedEndpoint:
    """Resolve an application target to one endpoint.

    A known *hosting* skips the lookup of the provider running the app.
    """
    hosting = hosting or resolve_app_hosting(target.app_name, ctx)
    ctx.reporter.info(f"The relevant hosting provider is {bold(hosting)}")

    node_class = target.node_class or resolve_grouping(
        target.app_name, hosting, ctx
    )
    ctx.reporter.info(f"The relevant node class is {bold(node_class)}")

    return select_endpoint(hosting, node_class, target.number, ctx)
