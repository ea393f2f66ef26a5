"""CLI entrypoint: python -m med_notes.server"""

from __future__ import annotations

import argparse
import logging

from med_notes.clients.config import FeatureServiceConfig
from med_notes.resolution.config import ResolutionConfig
from med_notes.server.config import ServerConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="med-notes-server",
        description="Med Notes: clinical shorthand parsing and feature resolution",
    )
    p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p.add_argument("--port", type=int, default=8430, help="Bind port (default: 8430)")

    # Feature service
    p.add_argument("--service-url", default="http://localhost:54321",
                   help="Feature registry base URL (default: http://localhost:54321)")
    p.add_argument("--api-key", default="", help="Feature registry API key")
    p.add_argument("--service-timeout", type=float, default=5.0,
                   help="Lookup timeout in seconds (default: 5.0)")

    # Latency / caching
    p.add_argument("--debounce-ms", type=int, default=300,
                   help="Autocomplete debounce window (default: 300)")
    p.add_argument("--cache-ttl-ms", type=int, default=300_000,
                   help="Suggestion cache TTL (default: 300000)")
    p.add_argument("--no-subscribe", action="store_true",
                   help="Do not listen for change webhooks")

    # Logging
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    service = FeatureServiceConfig(
        base_url=args.service_url,
        api_key=args.api_key,
        timeout=args.service_timeout,
    )
    resolution = ResolutionConfig(
        debounce_ms=args.debounce_ms,
        cache_ttl_ms=args.cache_ttl_ms,
    )
    config = ServerConfig(
        host=args.host,
        port=args.port,
        feature_service=service,
        resolution=resolution,
    )
    if args.no_subscribe:
        config.subscribe_to = []
    return config


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = build_config(args)
    _run_rest(config)


def _run_rest(config: ServerConfig) -> None:
    import uvicorn

    from med_notes.server.rest.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
