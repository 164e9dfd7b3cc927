"""CLI entry point for the astrocast weather station."""

import argparse
import logging

from astrocast.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from astrocast.daemon import WeatherDaemon, build_scheduler, daemon_status, stop_daemon
from astrocast.models.status import DeviceStatus
from astrocast.reporting.formatters import format_tick_json, format_tick_text

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="astrocast",
        description="Astrospheric forecast cache for observatory weather monitoring",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # tick
    tick_p = sub.add_parser("tick", help="Fetch if stale and print current values")
    tick_p.add_argument("--json", action="store_true", help="JSON output")

    # daemon
    daemon_p = sub.add_parser("daemon", help="Run the tick loop")
    daemon_p.add_argument("--interval", type=int, help="Tick interval in seconds")
    daemon_p.add_argument("--stop", action="store_true", help="Stop running daemon")
    daemon_p.add_argument("--status", action="store_true", help="Show daemon status")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "daemon" and args.stop:
        return stop_daemon()
    if args.command == "daemon" and args.status:
        return daemon_status()

    config = load_config(args.config)

    if args.command == "tick":
        return _cmd_tick(config, args)
    elif args.command == "daemon":
        WeatherDaemon(config, interval=args.interval).start()
        return 0
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_tick(config, args) -> int:
    scheduler = build_scheduler(config)
    try:
        result = scheduler.tick()
    finally:
        scheduler.close()
    print(format_tick_json(result) if args.json else format_tick_text(result))
    return 0 if result.status == DeviceStatus.OK else 1


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
        except (KeyError, ValueError) as e:
            print(f"Error: {e}")
            return 1
        save_config(new_config, args.config)
        print(f"Set {key} = {get_config_value(new_config, key.strip())}")
        return 0
    else:
        print("Use: config show | config set key=value")
        return 1
