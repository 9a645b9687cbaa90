from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from . import __version__
from .docker_ops import list_raw_containers
from .errors import DiscoveryError, ProviderError
from .provider import build_dynamic_configuration
from .settings import Settings, parse_base_url
from .settings import settings as default_settings

logger = structlog.get_logger(__name__)

YAML_CONTENT_TYPE = "text/yaml"


def error_message(exc: Exception) -> str:
    if isinstance(exc, DiscoveryError):
        return f"Internal Docker error: {exc.message}"
    if isinstance(exc, ProviderError):
        return f"Something went wrong: {exc.message}"
    return f"Something went wrong: {exc}"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the HTTP API.

    Raises ConfigError when BASE_URL is missing or malformed, so a
    misconfigured process fails at startup rather than on the first poll.
    """
    settings = settings or default_settings
    base_url = parse_base_url(settings.base_url)

    app = FastAPI(title="Docker HTTP Provider", version=__version__)
    app.state.settings = settings
    app.state.base_url = base_url

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        logger.info(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            response_time=round(time.time() - start, 4),
        )
        return response

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        logger.error("Request failed", error_code=exc.error_code, message=exc.message, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": error_message(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("Unexpected error", error=str(exc), path=request.url.path, exc_info=True)
        return JSONResponse(status_code=500, content={"error": error_message(exc)})

    @app.get("/")
    def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/dynamic_configuration")
    def dynamic_configuration(request: Request) -> Response:
        s: Settings = request.app.state.settings
        raw = list_raw_containers(timeout_s=s.docker_timeout_s)
        configuration = build_dynamic_configuration(
            raw,
            request.app.state.base_url,
            label_prefix=s.label_prefix,
            skip_invalid=s.skip_invalid_containers,
        )
        return Response(content=configuration.to_yaml(), headers={"Content-Type": YAML_CONTENT_TYPE})

    return app
