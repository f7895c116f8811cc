"""
Entrypoint: load .env and config, init logging, run one request through the
bridge and write the body to stdout.
"""

import argparse
import sys

from dotenv import find_dotenv, load_dotenv

from .config import config
from .fetcher import HTTPRequestBridge
from .https import request
from .logging_setup import setup_logging


def parse_header(value: str):
    key, sep, val = value.partition(':')
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected 'Key: Value', got {value!r}")
    return key.strip(), val.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpbridge",
        description="Perform one blocking HTTP(S) request through the request bridge",
    )
    parser.add_argument("url")
    parser.add_argument("-X", "--method", default=None)
    parser.add_argument("-d", "--data", default=None, help="request body, sent form-encoded")
    parser.add_argument("-H", "--header", action="append", type=parse_header, default=[],
                        dest="headers", help="extra header as 'Key: Value', repeatable")
    parser.add_argument("-i", "--include", action="store_true",
                        help="print response headers to stderr")
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv=None, transport=None) -> int:
    """Main entry point for the httpbridge command."""
    load_dotenv(find_dotenv(usecwd=True))
    # config was read at import time, before .env reached the environment
    config.reload()

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)

    options = {'headers': dict(args.headers)}
    if args.data is not None:
        options['data'] = args.data
    if args.method is not None:
        options['method'] = args.method

    try:
        result = request(args.url, options, bridge=HTTPRequestBridge(transport=transport))
    except ValueError as e:
        parser.error(str(e))

    if result[0] is None:
        print(f"httpbridge: {result[1]}", file=sys.stderr)
        return 1

    status, body, headers = result

    print(f"HTTP {status}", file=sys.stderr)
    if args.include:
        for key, value in headers.items():
            print(f"{key}: {value}", file=sys.stderr)

    sys.stdout.buffer.write(body)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
