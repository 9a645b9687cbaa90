import pytest

from dhp.containers import RawContainer
from dhp.settings import Settings


BASE_URL = "http://192.168.1.100"


@pytest.fixture
def settings():
    return Settings(base_url=BASE_URL, label_prefix="routing", skip_invalid_containers=False)


@pytest.fixture
def make_raw():
    def _make(name="/web", labels=None, public_ports=(7878,)):
        return RawContainer(
            name=name,
            labels=labels if labels is not None else {"routing.http.routers.web.rule": "Host(`a.com`)"},
            public_ports=list(public_ports) if public_ports is not None else None,
        )

    return _make


@pytest.fixture(autouse=True)
def restore_logging():
    import logging

    import structlog

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
