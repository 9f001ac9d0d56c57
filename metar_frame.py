#!/usr/bin/env python3
"""
metar-frame

Fetches METAR reports for a fixed set of airports and sends their flight
rules colors to the Pro Micro driving the LEDs of a photo frame.

Usage:
    metar-frame [--serial-port /dev/ttyACM0] [--baud-rate 9600]
                [--serial-timeout-ms 500] [--refresh-interval-s 300]
                [--roster airports.csv] [--once]

Log verbosity defaults to the METAR_FRAME_LOG environment variable
(e.g. METAR_FRAME_LOG=debug), or WARNING when unset.
"""
import argparse
import asyncio
import logging
import os
import sys
from typing import Optional

from config import (
    DEFAULT_BAUD_RATE,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_REFRESH_INTERVAL_S,
    DEFAULT_SERIAL_PORT,
    DEFAULT_SERIAL_TIMEOUT_MS,
    Config,
)
from errors import ConfigError, RosterError
from refresh import run
from roster import DEFAULT_ROSTER, Roster, load_roster
from serial_link import write_budget_bytes


logger = logging.getLogger("metar_frame")

LOG_ENV = "METAR_FRAME_LOG"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')

# longest frame: five digits plus the color byte
MAX_FRAME_BYTES = 6


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="metar-frame",
        description="Fetches METAR data and sends serial commands to a photo frame",
    )
    parser.add_argument('--serial-port', default=DEFAULT_SERIAL_PORT,
                        help=f"Serial port for connected Pro Micro (default {DEFAULT_SERIAL_PORT})")
    parser.add_argument('--baud-rate', type=int, default=DEFAULT_BAUD_RATE,
                        help=f"Baud rate for serial link to Pro Micro (default {DEFAULT_BAUD_RATE})")
    parser.add_argument('--serial-timeout-ms', type=int, default=DEFAULT_SERIAL_TIMEOUT_MS,
                        help=f"Timeout for serial writes in milliseconds (default {DEFAULT_SERIAL_TIMEOUT_MS})")
    parser.add_argument('--refresh-interval-s', type=float, default=DEFAULT_REFRESH_INTERVAL_S,
                        help=f"Interval to refresh METAR data in seconds (default {DEFAULT_REFRESH_INTERVAL_S})")
    parser.add_argument('--http-timeout-s', type=float, default=DEFAULT_HTTP_TIMEOUT_S,
                        help=f"Timeout for each METAR request in seconds (default {DEFAULT_HTTP_TIMEOUT_S:g})")
    parser.add_argument('--roster', metavar='PATH',
                        help="CSV file of ICAO,LED rows (default: built-in Bay Area roster)")
    parser.add_argument('--conservative-ceilings', action='store_true',
                        help="Treat broken/overcast layers without a height as LIFR")
    parser.add_argument('--once', action='store_true',
                        help="Run a single refresh and exit")
    parser.add_argument('--log-level', choices=LOG_LEVELS,
                        default=(os.environ.get(LOG_ENV) or 'warning').lower(),
                        help=f"Log verbosity (default from ${LOG_ENV}, else warning)")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        serial_port=args.serial_port,
        baud_rate=args.baud_rate,
        serial_timeout_ms=args.serial_timeout_ms,
        refresh_interval_s=args.refresh_interval_s,
        http_timeout_s=args.http_timeout_s,
        roster_path=args.roster,
        conservative_ceilings=args.conservative_ceilings,
    )


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def build_roster(config: Config) -> Roster:
    if config.roster_path:
        return load_roster(config.roster_path)
    return Roster(DEFAULT_ROSTER)


def check_write_budget(config: Config, roster: Roster) -> None:
    """Warn when one tick's frames would not fit in a single timed write."""
    budget = write_budget_bytes(config.baud_rate, config.serial_timeout_ms)
    payload = len(roster) * MAX_FRAME_BYTES
    logger.debug("Serial write budget %d bytes, tick payload up to %d bytes", budget, payload)
    if payload > budget:
        logger.warning(
            "Up to %d bytes per refresh exceeds the %d bytes that fit in %d ms at %d baud",
            payload, budget, config.serial_timeout_ms, config.baud_rate,
        )


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
        roster = build_roster(config)
    except (ConfigError, RosterError) as e:
        print(f"metar-frame: error: {e}", file=sys.stderr)
        return 2

    for airport, led in roster.by_led():
        logger.info("%s on LED%d", airport, led)
    check_write_budget(config, roster)

    try:
        asyncio.run(run(config, roster, ticks=1 if args.once else None))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == '__main__':
    sys.exit(main())
