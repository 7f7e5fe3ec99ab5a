"""
Run one board report from the command line.

Usage:
    python -m board_report [--csv PATH] [--summary] [--subitems]

Options:
    --csv PATH   Write all rows to a CSV file instead of printing JSON
    --summary    Print one line per bucket instead of the full payload
    --subitems   Include sub-items in the report

Environment variables:
    MONDAY_API_KEY  - Required
"""

import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

import httpx

from .clients.monday import MondayError
from .clients.retry_handler import RetryExhaustedError
from .pipeline import build_report
from .utils.config import DEFAULT_BOARD_CONFIG, ConfigurationError, get_settings
from .utils.export import (
    export_to_csv,
    export_to_json,
    report_to_dataframe,
    summary_dataframe,
)


def main(argv: list[str]) -> int:
    """Main entry point."""
    args = list(argv)

    csv_path = None
    if "--csv" in args:
        index = args.index("--csv")
        if index + 1 >= len(args):
            print("--csv requires a file path")
            return 2
        csv_path = Path(args[index + 1])
        del args[index:index + 2]

    show_summary = "--summary" in args
    args = [a for a in args if a != "--summary"]

    include_subitems = "--subitems" in args
    args = [a for a in args if a != "--subitems"]

    if args:
        print(f"Unknown arguments: {' '.join(args)}")
        print(__doc__)
        return 2

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    config = dataclasses.replace(DEFAULT_BOARD_CONFIG, include_subitems=include_subitems)

    try:
        response = asyncio.run(build_report(settings, config))
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1
    except (MondayError, RetryExhaustedError, httpx.HTTPError) as e:
        print(f"Monday API error: {e}")
        return 1

    if csv_path is not None:
        df = report_to_dataframe(response)
        csv_path.write_bytes(export_to_csv(df))
        print(f"Wrote {len(df)} rows to {csv_path}")
    elif show_summary:
        print(summary_dataframe(response).to_string(index=False))
    else:
        print(export_to_json(response))

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
