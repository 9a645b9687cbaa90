from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict

import requests

from .containers import strip_name
from .docker_ops import list_raw_containers
from .errors import ProviderError
from .labels import extract_routing_config
from .logging_config import configure_logging
from .provider import build_dynamic_configuration
from .settings import parse_base_url, settings


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _inspect(label_prefix: str, timeout_s: int) -> list[dict]:
    rows = []
    for raw in list_raw_containers(timeout_s=timeout_s):
        config = extract_routing_config(raw.labels or {}, label_prefix)
        rows.append(
            {
                "container": strip_name(raw.name) if raw.name else None,
                "public_ports": raw.public_ports,
                "managed": config is not None,
                "config": asdict(config) if config is not None else None,
            }
        )
    return rows


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Docker HTTP Provider CLI")
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="cmd", required=True)

    s_serve = sub.add_parser("serve", help="Run the HTTP provider")
    s_serve.add_argument("--host", default=settings.host)
    s_serve.add_argument("--port", type=int, default=settings.port)

    s_render = sub.add_parser("render", help="Print the dynamic configuration for local containers")
    s_render.add_argument("--base-url", default=settings.base_url, help="Defaults to $BASE_URL")
    s_render.add_argument("--label-prefix", default=settings.label_prefix)
    s_render.add_argument("--skip-invalid", action="store_true", default=settings.skip_invalid_containers)

    s_inspect = sub.add_parser("inspect", help="Show the routing config extracted from each container")
    s_inspect.add_argument("--label-prefix", default=settings.label_prefix)

    s_fetch = sub.add_parser("fetch", help="Fetch the dynamic configuration from a running provider")
    s_fetch.add_argument("--api", default=f"http://localhost:{settings.port}", help="Provider base URL")

    args = p.parse_args(argv)

    if args.cmd == "serve":
        import uvicorn

        from .api import create_app

        configure_logging(args.log_level, settings.log_json)
        try:
            app = create_app()
        except ProviderError as e:
            print(e.message, file=sys.stderr)
            return 1
        uvicorn.run(app, host=args.host, port=args.port, log_config=None)
        return 0

    configure_logging(args.log_level, json_logs=False)

    try:
        if args.cmd == "render":
            configuration = build_dynamic_configuration(
                list_raw_containers(timeout_s=settings.docker_timeout_s),
                parse_base_url(args.base_url),
                label_prefix=args.label_prefix,
                skip_invalid=args.skip_invalid,
            )
            sys.stdout.write(configuration.to_yaml())
            return 0

        if args.cmd == "inspect":
            _print(_inspect(args.label_prefix, settings.docker_timeout_s))
            return 0
    except ProviderError as e:
        print(e.message, file=sys.stderr)
        return 1

    # fetch
    base = args.api.rstrip("/")
    try:
        r = requests.get(f"{base}/dynamic_configuration", timeout=10)
    except requests.exceptions.RequestException as e:
        print(f"Cannot reach provider at {base}: {e}", file=sys.stderr)
        return 1
    if not r.ok:
        print(r.text, file=sys.stderr)
        return 1
    sys.stdout.write(r.text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
