from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from .errors import MissingName, MissingPorts, NoRoutingConfig
from .labels import DEFAULT_LABEL_PREFIX, RoutingConfig, extract_routing_config

NAME_SEPARATOR = "/"


@dataclass(frozen=True)
class RawContainer:
    """A container as reported by the engine, before any validation."""

    name: str | None
    labels: Mapping[str, str] | None
    public_ports: Sequence[int] | None


@dataclass(frozen=True)
class NormalizedContainer:
    name: str
    public_ports: tuple[int, ...]
    config: RoutingConfig


def strip_name(name: str) -> str:
    # Docker reports names as "/<name>".
    if name.startswith(NAME_SEPARATOR):
        return name[1:]
    return name


def adapt_container(
    raw: RawContainer,
    label_prefix: str = DEFAULT_LABEL_PREFIX,
    config: RoutingConfig | None = None,
) -> NormalizedContainer:
    """Validate a raw container and attach its routing configuration.

    An empty port list is accepted here; a missing one is not. Pass ``config``
    when the labels were already extracted to skip scanning them again.
    """
    if raw.name is None:
        raise MissingName()
    name = strip_name(raw.name)

    if raw.public_ports is None:
        raise MissingPorts(name)

    if config is None:
        config = extract_routing_config(raw.labels or {}, label_prefix)
    if config is None:
        raise NoRoutingConfig(name)

    return NormalizedContainer(name=name, public_ports=tuple(raw.public_ports), config=config)
