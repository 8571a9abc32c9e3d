"""CLI entry point for automation-dashboard."""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys

from automation_dashboard.app import DashboardApp
from automation_dashboard.config import AppConfig, load_config
from automation_dashboard.core.classifier import categorize, extract_price_range
from automation_dashboard.display import (
    format_ai_result,
    format_checks,
    format_messages,
    format_snapshot,
    format_status,
    mask_secret,
)
from automation_dashboard.errors import DashboardError
from automation_dashboard.log import setup_logging


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="automation-dashboard",
        description="Monitor and control the WhatsApp inquiry automation workflow",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_config_args(check_parser)

    snapshot_parser = subparsers.add_parser("snapshot", help="Refresh once and print the dashboard")
    _add_config_args(snapshot_parser)
    snapshot_parser.add_argument("--json", action="store_true", help="Print the snapshot as JSON")

    watch_parser = subparsers.add_parser("watch", help="Poll and print the dashboard until interrupted")
    _add_config_args(watch_parser)

    messages_parser = subparsers.add_parser("messages", help="Show recent processed messages")
    _add_config_args(messages_parser)
    messages_parser.add_argument("-n", "--limit", type=int, default=None, help="Number of messages")

    toggle_parser = subparsers.add_parser("toggle", help="Activate or deactivate the workflow")
    _add_config_args(toggle_parser)
    toggle_parser.add_argument("state", choices=["on", "off"])

    ai_parser = subparsers.add_parser("test-ai", help="Send a test prompt to the reply model")
    _add_config_args(ai_parser)
    ai_parser.add_argument("prompt", help="Customer message to test")

    health_parser = subparsers.add_parser("health", help="Test connections to every upstream")
    _add_config_args(health_parser)

    classify_parser = subparsers.add_parser("classify", help="Categorize a message offline")
    classify_parser.add_argument("text")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        # Default to a single snapshot
        args.command = "snapshot"
        args.config = "config.yaml"
        args.env = ".env"
        args.json = False

    if args.command == "classify":
        _classify(args.text)
        return

    config = _load(args.config, args.env)
    if args.command == "config-check":
        _check_config(config, args.config)
        return

    setup_logging(config.log_level, config.log_format)

    if args.command == "snapshot":
        asyncio.run(_snapshot(config, args.json))
    elif args.command == "watch":
        asyncio.run(_watch(config))
    elif args.command == "messages":
        limit = args.limit if args.limit is not None else config.dashboard.message_limit
        asyncio.run(_messages(config, limit))
    elif args.command == "toggle":
        asyncio.run(_toggle(config, args.state == "on"))
    elif args.command == "test-ai":
        sys.exit(asyncio.run(_test_ai(config, args.prompt)))
    elif args.command == "health":
        asyncio.run(_health(config))


def _load(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config: AppConfig, config_path: str) -> None:
    """Print a configuration summary with secrets masked."""
    local = config.local_api
    engine = config.workflow_engine
    ai = config.openrouter
    print(f"Configuration valid: {config_path}")
    print(f"  Local API      : {local.base_url or 'Not configured'} (key: {mask_secret(local.api_key)})")
    print(f"  Workflow engine: {engine.base_url or 'Not configured'}")
    print(f"    Workflow ID  : {engine.workflow_id or 'Not configured'}")
    print(f"    API key      : {mask_secret(engine.api_key)} via {engine.api_key_header}")
    print(f"  OpenRouter     : {ai.model} (key: {mask_secret(ai.api_key)})")
    print(f"  Refresh        : every {config.dashboard.refresh_interval_ms}ms, range {config.dashboard.time_range}")
    if not (local.configured or engine.webhooks_configured):
        print("  Note: no live tier configured, dashboard will show mock data")


def _classify(text: str) -> None:
    result = categorize(text)
    print(f"type   : {result.type.value}")
    print(f"domain : {result.domain.value if result.domain else '-'}")
    print(f"intent : {result.intent or '-'}")
    print(f"price  : {extract_price_range(text) or '-'}")


async def _snapshot(config: AppConfig, as_json: bool) -> None:
    async with DashboardApp(config) as app:
        snapshot = await app.monitor.refresh()
    if snapshot is None:
        return
    if as_json:
        print(json.dumps(snapshot.to_wire(), indent=2, ensure_ascii=False))
    else:
        print(format_snapshot(snapshot))


async def _watch(config: AppConfig) -> None:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: _signal_handler())

    async with DashboardApp(config) as app:
        app.monitor.on_snapshot(lambda snapshot: print(format_snapshot(snapshot), flush=True))
        async with app.monitor:
            await stop_event.wait()


async def _messages(config: AppConfig, limit: int) -> None:
    async with DashboardApp(config) as app:
        resolution = await app.resolver.resolve_messages(limit)
    print(format_messages(resolution.value, resolution.source))


async def _toggle(config: AppConfig, active: bool) -> None:
    async with DashboardApp(config) as app:
        resolution = await app.resolver.resolve_toggle(active)
        status = await app.resolver.get_workflow_status()
    print(f"Requested {'activation' if active else 'deactivation'}: now {'ACTIVE' if resolution.value else 'INACTIVE'} "
          f"[{resolution.source.value}]")
    print(format_status(status))


async def _test_ai(config: AppConfig, prompt: str) -> int:
    async with DashboardApp(config) as app:
        try:
            result = await app.ai_tester.test_business_response(prompt)
        except DashboardError as e:
            print(f"AI response test failed: {e}", file=sys.stderr)
            return 1
    print(format_ai_result(result))
    return 0


async def _health(config: AppConfig) -> None:
    async with DashboardApp(config) as app:
        if app.local_api.configured:
            try:
                report = await app.local_health()
                print(f"Local API: {report.status} (n8n connected: {report.n8n_connected}, "
                      f"workflow: {report.workflow_id or '-'})")
            except DashboardError as e:
                print(f"Local API: unavailable ({e})")
        checks = await app.check_connections()
    print("Connections:")
    print(format_checks(checks))


if __name__ == "__main__":
    main()
