#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import logging
import sys

from tcsys.client import ThreatConnectClient
from tcsys.errors import ThreatConnectError


def parse_param(value: str) -> tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"Expected key=value, got {value!r}")
    key, val = value.split("=", 1)
    return key, val


def main() -> int:
    parser = argparse.ArgumentParser(description="Perform one signed GET against ThreatConnect v3")
    parser.add_argument("endpoint", help="Path below /api/v3, e.g. /indicators")
    parser.add_argument(
        "--param",
        dest="params",
        action="append",
        type=parse_param,
        default=[],
        help="Query parameter as key=value (repeatable, order preserved)",
    )
    parser.add_argument("--timeout", type=float, default=30.0)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        with ThreatConnectClient.from_env(timeout=args.timeout) as client:
            payload = client.get(args.endpoint, params=args.params)
    except ThreatConnectError as e:
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
