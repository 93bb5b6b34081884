"""
Command-line interface for the planet ephemeris.

Usage:
    # Positions at J2000.0 (the default)
    python -m orrery

    # At a Julian Date, a calendar date, or years past J2000
    python -m orrery --jd 2460000.5
    python -m orrery --date 2024-03-20
    python -m orrery --year 12.5

    # Realistic scale, compiled kernel, JSON output for a renderer
    python -m orrery --date 2024-03-20 --scale realistic --backend compiled --json
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from orrery.config import ScaleMode, make_engine_config
from orrery.constants import J2000_JD
from orrery.ephemeris import Ephemeris
from orrery.exceptions import OrreryError
from orrery.timescale import (
    clamp_simulation_year,
    datetime_to_julian_date,
    julian_date_to_string,
    year_to_julian_date,
)

logger = logging.getLogger(__name__)


def date_type(value):
    """Parse a YYYY-MM-DD calendar date (UTC midnight) into a Julian Date."""
    try:
        return datetime_to_julian_date(datetime.strptime(value, "%Y-%m-%d"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Date must be YYYY-MM-DD, got {value!r}")


def build_parser():
    """
    Build the argument parser.

    Returns
    -------
    argparse.ArgumentParser
        The configured parser
    """
    parser = argparse.ArgumentParser(
        prog="orrery",
        description="Heliocentric positions of the eight major planets at a given time",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    when = parser.add_mutually_exclusive_group()
    when.add_argument(
        '--jd',
        type=float,
        help=f'Julian Date (default: J2000.0 = {J2000_JD})'
    )
    when.add_argument(
        '--date',
        type=date_type,
        dest='date_jd',
        metavar='YYYY-MM-DD',
        help='Calendar date, UTC midnight'
    )
    when.add_argument(
        '--year',
        type=float,
        help='Julian years past J2000.0, clamped to the simulation range [0, 10000]'
    )

    parser.add_argument(
        '--scale',
        choices=[m.value for m in ScaleMode],
        default=ScaleMode.COMPRESSED.value,
        help='AU to scene-unit scale (default: compressed)'
    )
    parser.add_argument(
        '--backend',
        choices=['native', 'compiled'],
        default='native',
        help='Evaluate with NumPy (native) or the jax.jit kernel (compiled)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print planet states as JSON with camelCase keys'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def resolve_julian_date(args) -> float:
    if args.jd is not None:
        return args.jd
    if args.date_jd is not None:
        return args.date_jd
    if args.year is not None:
        return year_to_julian_date(clamp_simulation_year(args.year))
    return J2000_JD


def main(argv=None):
    """
    Main entry point for the CLI.

    Returns the process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    julian_date = resolve_julian_date(args)

    try:
        ephemeris = Ephemeris(config=make_engine_config(args.scale))
        if args.backend == 'compiled':
            states = ephemeris.compute_positions_compiled(julian_date)
        else:
            states = ephemeris.compute_positions(julian_date)
    except (OrreryError, ValueError) as err:
        logger.error("%s", err)
        return 1

    if args.json:
        payload = {
            'julianDate': julian_date,
            'date': julian_date_to_string(julian_date),
            'scale': args.scale,
            'planets': [s.model_dump(by_alias=True) for s in states],
        }
        print(json.dumps(payload, indent=2))
    else:
        print(f"JD {julian_date:.5f} ({julian_date_to_string(julian_date)}), "
              f"scale={args.scale}, backend={args.backend}")
        print(f"{'Planet':<8s} {'x':>12s} {'y':>12s} {'z':>12s} {'r (AU)':>10s} {'orbit':>10s} {'size':>6s} color")
        for state in states:
            print(state.to_row())

    return 0


if __name__ == '__main__':
    sys.exit(main())
