"""Target resolution: hosting, node class and machine selection."""

from .endpoint import (
    ResolvedEndpoint,
    Selection,
    resolve_application,
    resolve_machine,
    select_endpoint,
)
from .grouping import build_app_lookup, resolve_grouping
from .hosting import resolve_app_hosting, resolve_hosting

__all__ = [
    "ResolvedEndpoint",
    "Selection",
    "build_app_lookup",
    "resolve_app_hosting",
    "resolve_application",
    "resolve_grouping",
    "resolve_hosting",
    "resolve_machine",
    "select_endpoint",
]
