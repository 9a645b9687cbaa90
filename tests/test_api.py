import pytest
from fastapi.testclient import TestClient

from dhp import api
from dhp.containers import RawContainer
from dhp.errors import ConfigError, DiscoveryError
from dhp.settings import Settings


def _client(settings, monkeypatch, containers=None, error=None):
    calls = []

    def fake_list_raw_containers(timeout_s=10):
        calls.append(timeout_s)
        if error is not None:
            raise error
        return list(containers or [])

    monkeypatch.setattr(api, "list_raw_containers", fake_list_raw_containers)
    return TestClient(api.create_app(settings)), calls


def test_health_check(settings, monkeypatch):
    client, calls = _client(settings, monkeypatch)
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert calls == []


def test_dynamic_configuration_yaml(settings, monkeypatch):
    containers = [
        RawContainer(
            name="/my-service",
            labels={"routing.http.routers.to-my-service.rule": "Host(`my-service.my-domain.com`)"},
            public_ports=[7878],
        )
    ]
    client, _ = _client(settings, monkeypatch, containers)

    r = client.get("/dynamic_configuration")
    assert r.status_code == 200
    assert r.headers["content-type"] == "text/yaml"
    assert r.text == (
        "http:\n"
        "  routers:\n"
        "    to-my-service:\n"
        "      rule: Host(`my-service.my-domain.com`)\n"
        "      service: my-service\n"
        "  services:\n"
        "    my-service:\n"
        "      loadBalancer:\n"
        "        servers:\n"
        "        - url: http://192.168.1.100:7878/\n"
    )


def test_every_request_queries_docker(settings, monkeypatch):
    client, calls = _client(settings, monkeypatch)
    for _ in range(3):
        r = client.get("/dynamic_configuration")
        assert r.status_code == 200
        assert r.text == "http:\n  routers: {}\n  services: {}\n"
    assert calls == [settings.docker_timeout_s] * 3


def test_discovery_failure_is_500(settings, monkeypatch):
    client, _ = _client(settings, monkeypatch, error=DiscoveryError("connection refused"))
    r = client.get("/dynamic_configuration")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Docker error: connection refused"}


def test_bad_container_is_500(settings, monkeypatch):
    containers = [RawContainer(name="/web", labels={"routing.http.routers.web.rule": "Host(`a`)"}, public_ports=[])]
    client, _ = _client(settings, monkeypatch, containers)
    r = client.get("/dynamic_configuration")
    assert r.status_code == 500
    assert r.json() == {"error": "Something went wrong: No public port specified for container 'web'"}


def test_skip_invalid_setting(monkeypatch):
    settings = Settings(base_url="http://h", skip_invalid_containers=True)
    containers = [
        RawContainer(name="/web", labels={"routing.http.routers.web.rule": "Host(`a`)"}, public_ports=[]),
        RawContainer(name="/api", labels={"routing.http.routers.api.rule": "Host(`b`)"}, public_ports=[9000]),
    ]
    client, _ = _client(settings, monkeypatch, containers)
    r = client.get("/dynamic_configuration")
    assert r.status_code == 200
    assert "api:" in r.text
    assert "web:" not in r.text


def test_unexpected_error_is_500(settings, monkeypatch):
    monkeypatch.setattr(api, "list_raw_containers", lambda timeout_s=10: 1 / 0)
    client = TestClient(api.create_app(settings), raise_server_exceptions=False)
    r = client.get("/dynamic_configuration")
    assert r.status_code == 500
    assert r.json()["error"].startswith("Something went wrong: ")


@pytest.mark.parametrize("base_url", [None, "", "192.168.1.100", "http://", "http://host:notaport"])
def test_missing_or_malformed_base_url_fails_at_startup(base_url):
    with pytest.raises(ConfigError):
        api.create_app(Settings(base_url=base_url))
