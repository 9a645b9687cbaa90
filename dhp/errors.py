from __future__ import annotations


class ProviderError(Exception):
    """Base exception for the provider."""

    def __init__(self, message: str, error_code: str = "PROVIDER_ERROR", status_code: int = 500):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(self.message)


class ConfigError(ProviderError):
    """Startup configuration is missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR")


class DiscoveryError(ProviderError):
    """The container engine could not be queried."""

    def __init__(self, message: str):
        super().__init__(message, "DISCOVERY_ERROR")


class AdapterError(ProviderError):
    """A raw container record cannot be normalized."""


class MissingName(AdapterError):
    def __init__(self, message: str = "No container name found"):
        super().__init__(message, "MISSING_NAME")


class MissingPorts(AdapterError):
    def __init__(self, container: str):
        self.container = container
        super().__init__(f"No ports specified for container '{container}'", "MISSING_PORTS")


class NoRoutingConfig(AdapterError):
    def __init__(self, container: str):
        self.container = container
        super().__init__(f"Could not find a routing rule label on container '{container}'", "NO_ROUTING_CONFIG")


class BuildError(ProviderError):
    """A normalized container cannot be turned into routers/services."""


class NoPublicPort(BuildError):
    def __init__(self, container: str):
        self.container = container
        super().__init__(f"No public port specified for container '{container}'", "NO_PUBLIC_PORT")


class InvalidBaseUrl(BuildError):
    def __init__(self, base_url: str):
        self.base_url = base_url
        super().__init__(f"Cannot append container port to base URL '{base_url}'", "INVALID_BASE_URL")
