"""CLI entry point for salt-proxier."""

import argparse
import sys
from datetime import datetime

from pydantic import ValidationError
from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, apply_cli_overrides, load_config
from core.upstream_proxy import EXPECTED_FORMAT
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, write_cli_log

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="salt-proxier",
        description="Forward requests to the host named in their Salt-Host header.",
    )
    parser.add_argument("--port", type=int, help="Port to listen on (default: 3000)")
    parser.add_argument("--host", help="Address to bind (default: 0.0.0.0)")
    parser.add_argument("--proxy", help=f"Upstream proxy ({EXPECTED_FORMAT})")
    parser.add_argument("--cors", help="CORS allowed origin (default: * for all origins)")
    parser.add_argument(
        "--max-body-size",
        type=int,
        help="Reject request bodies larger than this many bytes (default: unlimited)",
    )
    parser.add_argument("--config", action="store_true", help="Show config and log locations")
    return parser


def resolve_config(argv: list[str] | None = None) -> tuple[Config, argparse.Namespace]:
    """Load the config file and apply command line overrides."""
    args = build_parser().parse_args(argv)
    config = apply_cli_overrides(
        load_config(),
        {
            "port": args.port,
            "host": args.host,
            "proxy": args.proxy,
            "cors": args.cors,
            "max_body_size": args.max_body_size,
        },
    )
    return config, args


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    try:
        config, args = resolve_config(argv)
    except ValidationError as e:
        console.print("[red][ERROR][/red] Invalid configuration:")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  {location}: {error['msg']}")
        sys.exit(1)

    if args.config:
        console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
        console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
        return

    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", host=config.proxy.host, port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


if __name__ == "__main__":
    main()
