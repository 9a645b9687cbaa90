from __future__ import annotations

from typing import Any

import docker
import requests
import structlog
from docker.errors import DockerException

from .containers import RawContainer
from .errors import DiscoveryError

logger = structlog.get_logger(__name__)


def _client(timeout_s: int = 10) -> docker.DockerClient:
    return docker.from_env(timeout=timeout_s)


def raw_container_from_attrs(attrs: dict[str, Any]) -> RawContainer:
    """Build a RawContainer from a list-API container summary.

    ``Ports`` entries without a ``PublicPort`` are not published on the host
    and are dropped. A missing ``Ports`` key stays None.
    """
    names = attrs.get("Names") or []
    ports = attrs.get("Ports")
    public_ports = None
    if ports is not None:
        public_ports = [int(p["PublicPort"]) for p in ports if p.get("PublicPort") is not None]
    return RawContainer(
        name=names[0] if names else None,
        labels=attrs.get("Labels"),
        public_ports=public_ports,
    )


def list_raw_containers(timeout_s: int = 10) -> list[RawContainer]:
    """List every running container with its labels and published ports.

    No filtering happens here; unmanaged containers are dropped later.
    """
    try:
        c = _client(timeout_s)
        try:
            # sparse: keep the list API payload (Names/Labels/Ports), no per-container inspect.
            containers = c.containers.list(sparse=True)
        finally:
            c.close()
    except (DockerException, requests.exceptions.RequestException) as e:
        logger.error("Docker discovery failed", error=str(e))
        raise DiscoveryError(str(e)) from e

    raw = [raw_container_from_attrs(x.attrs) for x in containers]
    logger.debug("Discovered containers", count=len(raw))
    return raw
