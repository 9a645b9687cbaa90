from __future__ import annotations

from typing import Iterable

import structlog

from .configuration import DynamicConfiguration, DynamicConfigurationBuilder
from .containers import RawContainer, adapt_container, strip_name
from .errors import AdapterError, NoPublicPort
from .labels import DEFAULT_LABEL_PREFIX, extract_routing_config

logger = structlog.get_logger(__name__)


def build_dynamic_configuration(
    raw_containers: Iterable[RawContainer],
    base_url: str,
    *,
    label_prefix: str = DEFAULT_LABEL_PREFIX,
    skip_invalid: bool = False,
) -> DynamicConfiguration:
    """Run discovered containers through the adapter and the builder.

    Containers without routing labels are not managed and are left out. Any
    other per-container failure aborts the whole document unless
    ``skip_invalid`` is set.
    """
    builder = DynamicConfigurationBuilder(base_url)
    managed = 0

    for raw in raw_containers:
        config = extract_routing_config(raw.labels or {}, label_prefix)
        if config is None:
            logger.debug("Container not managed", container=raw.name)
            continue
        try:
            builder.add_container(adapt_container(raw, label_prefix, config=config))
        except (AdapterError, NoPublicPort) as e:
            if not skip_invalid:
                raise
            name = strip_name(raw.name) if raw.name else None
            logger.warning("Skipping invalid container", container=name, error=e.message, error_code=e.error_code)
            continue
        managed += 1

    configuration = builder.build()
    logger.info(
        "Dynamic configuration built",
        containers=managed,
        routers=len(configuration.http.routers),
        services=len(configuration.http.services),
    )
    return configuration
