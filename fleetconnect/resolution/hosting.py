"""Deciding which hosting provider serves a name."""

from __future__ import annotations

from ..context import ResolutionContext
from ..errors import AmbiguousHosting, NotFound


def resolve_hosting(name: str, ctx: ResolutionContext) -> str:
    """Find the single provider whose node classes include *name*.

    Environments served by one provider need no remote query.
    """
    environment = ctx.environment
    ctx.reporter.debug(f"looking up hosting for node type: {name}")
    single = ctx.registry.single_provider_for(environment)
    if single is not None:
        ctx.reporter.debug(
            f"this environment has a single hosting provider: {single}"
        )
        return single

    listings = {
        provider: ctx.inventory.list_groupings(environment, provider)
        for provider in ctx.registry.providers_for(environment)
    }
    matches = [
        provider for provider, classes in listings.items() if name in classes
    ]
    if len(matches) > 1:
        raise AmbiguousHosting(name, environment, matches)
    elif len(matches) == 1:
        return matches[0]
    else:
        all_classes = {c for classes in listings.values() for c in classes}
        raise NotFound("node type", name, environment, all_classes)


def resolve_app_hosting(app_name: str, ctx: ResolutionContext) -> str:
    """Find the provider running *app_name*.

    Providers are tried in registry order and the first one whose node
    classes run the application wins.
    """
    environment = ctx.environment
    ctx.reporter.debug(f"finding hosting for {app_name} in {environment}")
    single = ctx.registry.single_provider_for(environment)
    if single is not None:
        ctx.reporter.debug(
            f"this environment has a single hosting provider: {single}"
        )
        return single

    all_apps: set[str] = set()
    for provider in ctx.registry.providers_for(environment):
        app_names = ctx.inventory.application_names(environment, provider)
        if app_name in app_names:
            ctx.reporter.debug(f"{app_name} is hosted in {provider}")
            return provider
        all_apps.update(app_names)
    raise NotFound("application", app_name, environment, all_apps)
