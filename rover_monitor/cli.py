# rover_monitor/cli.py
import argparse


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="rover-monitor",
        description="Renogy Rover charge controller monitor (Modbus RTU)"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to configuration file (optional)"
    )

    parser.add_argument(
        "--port",
        help="Serial port of the controller (overrides RENOGY_ROVER_PORT)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log raw register payloads and read errors"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress stdout output"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    parser.add_argument(
        "--compact",
        action="store_true",
        help="With --json, print each reading on a single line"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # Continuous polling
    cmd_monitor = sub.add_parser("monitor", help="Poll the controller on an interval")
    cmd_monitor.add_argument(
        "--interval",
        type=_positive_int,
        help="Seconds between poll cycles (overrides RENOGY_ROVER_INTERVAL, default 60)",
    )

    # One-shot read
    sub.add_parser("read", help="Run a single poll cycle and exit")

    # Identification only
    sub.add_parser("identify", help="Print the controller model and serial number")

    return parser
