from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from accessstats import config
from accessstats.line_parser import ParseError
from accessstats.processor import LogProcessor
from accessstats.report import render, render_json
from accessstats.sources import LogNotFoundError, build_source, object_key, open_log_lines

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_log_level(level: str) -> int:
    value = logging.getLevelName(level.strip().upper())
    if isinstance(value, int):
        return value
    print(f"Unknown log level {level!r}, using INFO.", file=sys.stderr)
    return logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    level = level or config.LOG_LEVEL
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT, stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize status codes per path and request latency for one day of access logs.",
    )
    parser.add_argument("service_name", help="Service whose log to read")
    parser.add_argument("date", help="Log date, as used in the object key (e.g. 2024-01-31)")
    parser.add_argument("--bucket", default=config.LOG_BUCKET, help=f"S3 bucket (default: {config.LOG_BUCKET})")
    parser.add_argument("--base-url", default=config.LOG_BASE_URL, help="Fetch the log over HTTP(S) from this prefix")
    parser.add_argument("--log-dir", default=config.LOG_DIR, help="Read the log from a local directory")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=config.STRICT,
        help="Abort on the first malformed line instead of skipping it",
    )
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    key = object_key(args.service_name, args.date)
    source = build_source(bucket=args.bucket, base_url=args.base_url, directory=args.log_dir)
    try:
        with open_log_lines(source, key) as lines:
            stats = LogProcessor(strict=args.strict).process(lines)
    except LogNotFoundError:
        print(
            "The specified log file could not be found. Please double check your entered values.",
            file=sys.stderr,
        )
        return 1
    except ParseError as exc:
        print(f"Malformed log line, aborting: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(render_json(stats))
    else:
        sys.stdout.write(render(stats))
    return 0


def serve():
    level = resolve_log_level(config.LOG_LEVEL)
    configure_logging(logging.getLevelName(level))
    uvicorn.run(
        "accessstats.app:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.RELOAD,
        log_level=level,
    )


if __name__ == "__main__":
    raise SystemExit(main())
