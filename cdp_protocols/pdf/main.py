"""
Command-line entry point: render a URL or HTML file through a running browser.

The browser must already expose a DevTools endpoint (e.g. started with
--remote-debugging-port=9222); this tool only attaches to it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .browser_session import BrowserSession
from .config import ProtocolConfig, normalize_policy
from .session_cdp import CdpConnection, TransportError, browser_ws_url
from .steps import ProtocolError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("cdp.pdf")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cdp-pdf", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--ws-url", help="browser WebSocket debugger URL (overrides --host/--port)")
    parser.add_argument("--host", help="DevTools HTTP host")
    parser.add_argument("--port", type=int, help="DevTools HTTP port")
    parser.add_argument("--timeout", type=float, help="per-protocol timeout in seconds")
    parser.add_argument("--runtime-exceptions", help="ignore | log | raise")
    parser.add_argument("--console-api-calls", help="ignore | log | raise")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)
    for name in ("print", "screenshot"):
        cmd = sub.add_parser(name)
        src = cmd.add_mutually_exclusive_group(required=True)
        src.add_argument("url", nargs="?")
        src.add_argument("--html", type=Path, help="render this HTML file instead of a URL")
        cmd.add_argument("-o", "--output", type=Path, required=True)
        cmd.add_argument("--wait-for", nargs=2, metavar=("SELECTOR", "ATTRIBUTE"))
        cmd.add_argument("--offline", action="store_true")
        if name == "print":
            cmd.add_argument("--landscape", action="store_true")
            cmd.add_argument("--background", action="store_true", help="print background graphics")
    return parser


def config_from_args(args: argparse.Namespace) -> ProtocolConfig:
    config = ProtocolConfig.from_env()
    if args.ws_url:
        config.ws_url = args.ws_url
    if args.host:
        config.cdp_host = args.host
    if args.port:
        config.cdp_port = args.port
    if args.timeout:
        config.timeout = args.timeout
    if args.runtime_exceptions:
        config.unhandled_runtime_exceptions = normalize_policy(
            args.runtime_exceptions, config.unhandled_runtime_exceptions
        )
    if args.console_api_calls:
        config.console_api_calls = normalize_policy(args.console_api_calls, config.console_api_calls)
    return config


def render(args: argparse.Namespace, config: ProtocolConfig) -> bytes:
    source = {"html": args.html.read_text(encoding="utf-8")} if args.html else {"url": args.url}
    options: dict[str, object] = {}
    if args.wait_for:
        options["wait_for"] = {"selector": args.wait_for[0], "attribute": args.wait_for[1]}

    ws_url = config.ws_url or browser_ws_url(config.cdp_host, config.cdp_port)
    spawn_options = {"offline": True} if args.offline else {}
    with CdpConnection(ws_url) as conn, BrowserSession(conn, config, **spawn_options) as session:
        if args.command == "print":
            pdf_params: dict[str, object] = {}
            if args.landscape:
                pdf_params["landscape"] = True
            if args.background:
                pdf_params["printBackground"] = True
            return session.print_to_pdf(source, print_to_pdf=pdf_params, **options)
        return session.capture_screenshot(source, **options)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger("cdp.pdf").setLevel(logging.DEBUG)
    config = config_from_args(args)
    try:
        data = render(args, config)
    except ProtocolError as exc:
        logger.error("protocol_failed %s", exc)
        return 1
    except TransportError as exc:
        logger.error("transport_error %s", exc)
        return 2
    args.output.write_bytes(data)
    logger.info("wrote %s (%d bytes)", args.output, len(data))
    return 0


if __name__ == "__main__":
    sys.exit(main())
