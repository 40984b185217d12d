"""CLI: python -m designetica.monitoring [--once | --summary | --interval=N]."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from designetica import config
from designetica.logging_config import get_monitor_logger
from designetica.settings import MONITOR_DATA_DIR, MONITOR_INTERVAL

from .health_monitor import HealthMonitor, MonitorTargets


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designetica-monitor",
        description="Health monitor for a Designetica deployment.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="run one check and print the result")
    mode.add_argument("--summary", action="store_true", help="print the stored health summary")
    parser.add_argument(
        "--interval", type=float, default=MONITOR_INTERVAL / 60,
        help="minutes between checks in continuous mode (default: %(default)s)",
    )
    parser.add_argument("--base-url", default=config.API_BASE_URL, help="API base URL")
    parser.add_argument("--website-url", default=None, help="website URL (defaults to the API base URL)")
    parser.add_argument("--data-dir", default=MONITOR_DATA_DIR, help="directory for log/alert files")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    get_monitor_logger()
    monitor = HealthMonitor(
        MonitorTargets.from_base(args.base_url, args.website_url),
        data_dir=args.data_dir,
    )

    if args.summary:
        print(json.dumps(monitor.get_health_summary(), indent=2))
        return 0
    if args.once:
        results = asyncio.run(monitor.check_health())
        print(json.dumps(results, indent=2))
        return 0 if results["overall"]["status"] != "ERROR" else 1

    if args.interval <= 0:
        print("--interval must be positive", file=sys.stderr)
        return 2
    try:
        asyncio.run(monitor.run_forever(args.interval * 60))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
