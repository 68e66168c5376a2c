"""Command line entry point for a single watcher run."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from unit_watcher import __version__
from unit_watcher.config import AppSettings, load_settings
from unit_watcher.errors import ConfigError, ProbeError
from unit_watcher.runner import WatchRunner
from unit_watcher.utils.logging_setup import log_event, setup_root_logger

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROBE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="unit-watcher",
        description="Alert when a systemd unit restarted or is not active.",
    )
    ap.add_argument("--unit", help="systemd unit name (e.g. nginx.service)")
    ap.add_argument("--state", dest="state_path", help="path to state file")
    ap.add_argument("--timeout", help="timeout for systemctl command (e.g. 5s)")
    ap.add_argument("--cooldown", help="minimum time between alerts (e.g. 10m)")
    ap.add_argument(
        "--tolerance-ms",
        type=int,
        help="uptime jitter tolerated before a drop counts as a restart",
    )
    ap.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="do not send telegram, only print",
    )
    ap.add_argument("--bot-token", help="telegram bot token")
    ap.add_argument("--chat-id", help="telegram chat id")
    ap.add_argument("--telegram-base-url", dest="base_url", help="telegram API base URL")
    ap.add_argument("--log-level", help="log level (DEBUG, INFO, WARNING, ...)")
    ap.add_argument("--log-format", choices=["logfmt", "json"], help="log output format")
    ap.add_argument(
        "--show-config",
        action="store_true",
        help="print the resolved configuration and exit",
    )
    ap.add_argument("--version", action="store_true", help="print version and exit")
    return ap


def _settings_from_args(args: argparse.Namespace) -> AppSettings:
    overrides = vars(args).copy()
    overrides.pop("show_config", None)
    overrides.pop("version", None)
    return load_settings(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(__version__)
        return EXIT_OK

    try:
        cfg = _settings_from_args(args)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.show_config:
        print(json.dumps(cfg.snapshot(), indent=2))
        return EXIT_OK

    setup_root_logger(cfg.log_level, cfg.log_format)

    try:
        runner = WatchRunner.from_settings(cfg)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    log_event(
        "watch.start",
        "debug",
        unit=runner.unit,
        version=__version__,
        state_path=str(cfg.resolved_state_path),
        dry_run=cfg.dry_run,
    )
    try:
        runner.run()
    except ProbeError as exc:
        log.error("probe.failed unit=%s error=%s", runner.unit, exc)
        return EXIT_PROBE_ERROR
    finally:
        runner.close()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
