"""Dynamic configuration document and its builder.

Serialized shape:

    http:
      routers:
        <router>: {rule: ..., service: ...}
      services:
        <service>:
          loadBalancer:
            servers:
            - url: ...
"""
from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit, urlunsplit

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field

from .containers import NormalizedContainer
from .errors import InvalidBaseUrl, NoPublicPort
from .labels import MultiPortConfig, SinglePortConfig

logger = structlog.get_logger(__name__)

# Schemes whose URLs always have a host and a path; default ports are not printed.
DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


class ServerUrl(BaseModel):
    url: str


class LoadBalancer(BaseModel):
    servers: list[ServerUrl] = Field(default_factory=list)


class HttpService(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    load_balancer: LoadBalancer = Field(..., alias="loadBalancer")

    @classmethod
    def single(cls, url: str) -> HttpService:
        return cls(load_balancer=LoadBalancer(servers=[ServerUrl(url=url)]))


class HttpRouter(BaseModel):
    rule: str = Field(..., description="Matching expression, passed through verbatim")
    service: str


class HttpConfiguration(BaseModel):
    routers: dict[str, HttpRouter] = Field(default_factory=dict)
    services: dict[str, HttpService] = Field(default_factory=dict)


class DynamicConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    http: HttpConfiguration = Field(default_factory=HttpConfiguration)

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        http = data["http"]
        return {
            "http": {
                "routers": dict(sorted(http["routers"].items())),
                "services": dict(sorted(http["services"].items())),
            }
        }

    def to_yaml(self) -> str:
        # Rules are written verbatim: no line folding, no escaping of non-ASCII text.
        return yaml.safe_dump(
            self.to_dict(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=float("inf"),
        )


def with_port(base_url: str, port: int) -> str:
    """Return base_url with its port replaced by ``port``."""
    parts = urlsplit(base_url)
    scheme = parts.scheme
    if not scheme or scheme == "file" or not parts.hostname:
        raise InvalidBaseUrl(base_url)

    userinfo, _, _ = parts.netloc.rpartition("@")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{userinfo}@{host}" if userinfo else host
    if DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{int(port)}"

    path = parts.path
    if not path and scheme in DEFAULT_PORTS:
        path = "/"
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


class DynamicConfigurationBuilder:
    """Accumulates containers into routers and services.

    Later containers overwrite routers/services registered under the same
    name. Once ``build()`` has been called the builder cannot be reused.
    """

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self._routers: dict[str, HttpRouter] = {}
        self._services: dict[str, HttpService] = {}
        self._built = False

    def add_container(self, container: NormalizedContainer) -> DynamicConfigurationBuilder:
        if self._built:
            raise RuntimeError("Configuration already built; create a new builder.")

        config = container.config
        # (router, rule, service, url) rows; resolved fully before touching the maps.
        rows: list[tuple[str, str, str, str]] = []

        if isinstance(config, SinglePortConfig):
            if not container.public_ports:
                raise NoPublicPort(container.name)
            # First published port wins when several are exposed.
            url = with_port(self.base_url, container.public_ports[0])
            rows.append((config.router_name, config.rule, container.name, url))
        elif isinstance(config, MultiPortConfig):
            for entry in config.entries:
                url = with_port(self.base_url, entry.target_port)
                rows.append((entry.router_name, entry.rule, entry.service_name, url))
        else:
            raise TypeError(f"Unsupported routing config: {type(config).__name__}")

        for router_name, rule, service_name, url in rows:
            if router_name in self._routers or service_name in self._services:
                logger.debug("Overwriting route", container=container.name, router=router_name, service=service_name)
            self._services[service_name] = HttpService.single(url)
            self._routers[router_name] = HttpRouter(rule=rule, service=service_name)

        return self

    def build(self) -> DynamicConfiguration:
        self._built = True
        return DynamicConfiguration(
            http=HttpConfiguration(
                routers=dict(sorted(self._routers.items())),
                services=dict(sorted(self._services.items())),
            )
        )
