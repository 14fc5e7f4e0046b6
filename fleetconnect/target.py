"""Parsing of target identifiers typed on the command line.

Machine targets look like ``[hosting/]name[:number]`` and application
targets like ``[node_class/]app_name[:number]``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidTargetFormat, UnknownHostingProvider

_NUMBER_RE = re.compile(r"[+-]?[0-9]+")


class TargetSpec(BaseModel):
    """A machine target: optional hosting, node class or host, number.

    ``number`` is kept as typed; values below 1 are rejected when a
    machine is selected.
    """

    model_config = ConfigDict(frozen=True)
    hosting: Optional[str] = None
    name: str = Field(..., min_length=1)
    number: Optional[int] = None


class AppTargetSpec(BaseModel):
    """An application target: optional node class, application, number."""

    model_config = ConfigDict(frozen=True)
    node_class: Optional[str] = None
    app_name: str = Field(..., min_length=1)
    number: Optional[int] = None


def _split_target(raw: str) -> tuple[str | None, str, int | None]:
    """Split ``prefix/name:number`` into its three parts."""
    if not raw:
        raise InvalidTargetFormat(raw, "target is empty")

    prefix: str | None
    if "/" in raw:
        prefix, _, rest = raw.partition("/")
        if not prefix:
            raise InvalidTargetFormat(raw, "nothing before '/'")
        if "/" in rest:
            raise InvalidTargetFormat(raw, "more than one '/'")
    else:
        prefix, rest = None, raw

    number: int | None
    if ":" in rest:
        name, _, raw_number = rest.partition(":")
        if ":" in raw_number:
            raise InvalidTargetFormat(raw, "more than one ':'")
        if not _NUMBER_RE.fullmatch(raw_number):
            raise InvalidTargetFormat(
                raw, f"machine number '{raw_number}' is not an integer"
            )
        number = int(raw_number)
    else:
        name, number = rest, None

    if not name:
        raise InvalidTargetFormat(raw, "name is empty")
    return prefix, name, number


def parse_target(
    raw: str | TargetSpec,
    hosting_providers: Sequence[str],
) -> TargetSpec:
    """Parse a machine target, validating any hosting prefix.

    An already structured :class:`TargetSpec` is returned unchanged.
    """
    if isinstance(raw, TargetSpec):
        return raw
    hosting, name, number = _split_target(raw)
    if hosting is not None and hosting not in hosting_providers:
        raise UnknownHostingProvider(hosting, hosting_providers)
    return TargetSpec(hosting=hosting, name=name, number=number)


def parse_app_target(raw: str | AppTargetSpec) -> AppTargetSpec:
    """Parse an application target."""
    if isinstance(raw, AppTargetSpec):
        return raw
    node_class, app_name, number = _split_target(raw)
    return AppTargetSpec(
        node_class=node_class, app_name=app_name, number=number
    )


def _format(prefix: str | None, name: str, number: int | None) -> str:
    text = f"{prefix}/{name}" if prefix else name
    if number is not None:
        text += f":{number}"
    return text


def format_target(spec: TargetSpec | AppTargetSpec) -> str:
    """Canonical ``prefix/name:number`` form, the inverse of parsing."""
    match spec:
        case TargetSpec():
            return _format(spec.hosting, spec.name, spec.number)
        case AppTargetSpec():
            return _format(spec.node_class, spec.app_name, spec.number)
