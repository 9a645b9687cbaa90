"""Routing label extraction.

Two key families are recognized on a container (``<prefix>`` defaults to
``routing``):

    <prefix>.http.routers.<router>.rule                        -> rule string
    <prefix>.http.services.<service>.loadbalancer.server.port  -> target port

A container with a single router needs no port disambiguation. With several
routers, routers and services are sorted by name independently and paired by
position, so label authors must name them so that both sorts line up.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Union

DEFAULT_LABEL_PREFIX = "routing"

_PORT_RE = re.compile(r"\+?[0-9]+")
MAX_PORT = 65535


@dataclass(frozen=True)
class SinglePortConfig:
    router_name: str
    rule: str


@dataclass(frozen=True)
class MultiPortEntry:
    router_name: str
    rule: str
    service_name: str
    target_port: int


@dataclass(frozen=True)
class MultiPortConfig:
    entries: tuple[MultiPortEntry, ...]


RoutingConfig = Union[SinglePortConfig, MultiPortConfig]


@lru_cache(maxsize=None)
def label_patterns(prefix: str = DEFAULT_LABEL_PREFIX) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Return (router rule pattern, service port pattern) for a label prefix."""
    p = re.escape(prefix)
    routers = re.compile(rf"{p}\.http\.routers\.(.+)\.rule")
    services = re.compile(rf"{p}\.http\.services\.(.+)\.loadbalancer\.server\.port")
    return routers, services


def parse_port(value: str) -> int | None:
    """Parse an unsigned 16-bit port; None when the value is not one."""
    if not _PORT_RE.fullmatch(value):
        return None
    port = int(value)
    if port > MAX_PORT:
        return None
    return port


def _scan(labels: Mapping[str, str], pattern: re.Pattern[str]) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    for key, value in labels.items():
        m = pattern.fullmatch(key)
        if m:
            found.append((m.group(1), value))
    return sorted(found, key=lambda kv: kv[0])


def extract_routing_config(
    labels: Mapping[str, str],
    prefix: str = DEFAULT_LABEL_PREFIX,
) -> RoutingConfig | None:
    """Turn a container label map into its routing configuration.

    Returns None when the container declares no router, or when it declares
    several routers but not exactly as many valid service ports.
    """
    router_re, service_re = label_patterns(prefix)

    routers = _scan(labels, router_re)
    if not routers:
        return None

    if len(routers) == 1:
        router_name, rule = routers[0]
        return SinglePortConfig(router_name=router_name, rule=rule)

    services: list[tuple[str, int]] = []
    for service_name, raw_port in _scan(labels, service_re):
        port = parse_port(raw_port)
        if port is None:
            continue
        services.append((service_name, port))

    if len(services) != len(routers):
        return None

    entries = tuple(
        MultiPortEntry(router_name=router_name, rule=rule, service_name=service_name, target_port=port)
        for (router_name, rule), (service_name, port) in zip(routers, services)
    )
    return MultiPortConfig(entries=entries)
