"""Mapping applications to the node class that runs them."""

from __future__ import annotations

from collections.abc import Mapping, Set

from ..context import ResolutionContext
from ..errors import AmbiguousGrouping, NotFound


def build_app_lookup(
    inventory: Mapping[str, Set[str]],
) -> dict[str, list[str]]:
    """Invert node class → apps into app → node classes."""
    lookup: dict[str, list[str]] = {}
    for node_class, apps in inventory.items():
        for app in sorted(apps):
            lookup.setdefault(app, []).append(node_class)
    return lookup


def resolve_grouping(
    app_name: str,
    hosting: str,
    ctx: ResolutionContext,
) -> str:
    """Return the only node class running *app_name* in *hosting*."""
    environment = ctx.environment
    ctx.reporter.debug(
        f"finding node class for {app_name} in {hosting} {environment}"
    )
    inventory = ctx.inventory.grouping_inventory(environment, hosting)
    node_classes = build_app_lookup(inventory).get(app_name, [])
    if len(node_classes) > 1:
        raise AmbiguousGrouping(app_name, environment, node_classes)
    elif not node_classes:
        all_apps = {app for apps in inventory.values() for app in apps}
        raise NotFound(
            "application", app_name, f"{hosting}/{environment}", all_apps
        )
    else:
        ctx.reporter.debug(f"node class: {node_classes[0]}")
        return node_classes[0]
