#!/usr/bin/env python3
"""
Manual smoke checks against a real bucket.

Runs one store operation from the command line, using the same settings
resolution as library callers (explicit flags, then .env / environment).

Usage:
    python scripts/object_store.py put ./report.pdf reports/report.pdf
    python scripts/object_store.py get reports/report.pdf --out ./copy.pdf
    python scripts/object_store.py presign reports/report.pdf --ttl "10 minutes"
    python scripts/object_store.py info reports/report.pdf
    python scripts/object_store.py delete reports/report.pdf

Requires:
    - .env file (or environment) with S3_BUCKET, S3_REGION and credentials
"""

import argparse
import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from cloudstore.config import configure_logging  # noqa: E402
from cloudstore.core.errors import StorageError  # noqa: E402
from cloudstore.dependencies import get_object_store  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a single object store operation")
    parser.add_argument("--bucket", help="Override S3_BUCKET")
    parser.add_argument("--prefix", help="Override S3_PREFIX")
    parser.add_argument("--mock", action="store_true", help="Use the in-memory backend")
    parser.add_argument("--log-level", default=None, help="Logging level")

    commands = parser.add_subparsers(dest="command", required=True)

    put = commands.add_parser("put", help="Upload a local file")
    put.add_argument("local_path")
    put.add_argument("remote_path")
    put.add_argument("--private", action="store_true", help="Upload with private visibility")
    put.add_argument("--replace", action="store_true", help="Delete an existing object first")

    get = commands.add_parser("get", help="Download an object")
    get.add_argument("remote_path")
    get.add_argument("--out", help="Write to this file instead of stdout")

    for name, help_text in (
        ("delete", "Delete an object"),
        ("url", "Print the object URL"),
        ("info", "Print timestamp and MIME type"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("remote_path")

    presign = commands.add_parser("presign", help="Print a time-limited download URL")
    presign.add_argument("remote_path")
    presign.add_argument("--ttl", default="5 minutes", help="Lifetime, e.g. '30 seconds'")
    presign.add_argument("--inline", action="store_true", help="Don't force attachment download")

    return parser


def run(args: argparse.Namespace) -> int:
    overrides = {"S3_BUCKET": args.bucket, "prefix": args.prefix}
    store = get_object_store(overrides, mock_mode=True if args.mock else None)

    if args.command == "put":
        visibility = "private" if args.private else None
        if args.replace:
            result = store.replace(args.local_path, args.remote_path,
                                   visibility=visibility, track_for_cleanup=False)
            for note in result.notes:
                print(f"[NOTE] {note}")
            print(result.url)
        else:
            print(store.put(args.local_path, args.remote_path,
                            visibility=visibility, track_for_cleanup=False))

    elif args.command == "get":
        data = store.get(args.remote_path)
        if args.out:
            Path(args.out).write_bytes(data)
            print(f"[OK] Wrote {len(data)} bytes to {args.out}")
        else:
            sys.stdout.buffer.write(data)

    elif args.command == "delete":
        store.delete(args.remote_path)
        print(f"[OK] Deleted {args.remote_path}")

    elif args.command == "url":
        print(store.url(args.remote_path))

    elif args.command == "info":
        info = store.info(args.remote_path)
        print(f"timestamp: {info.timestamp}")
        print(f"mimetype:  {info.mimetype}")

    elif args.command == "presign":
        print(store.presigned_url(args.remote_path, ttl=args.ttl,
                                  for_download=not args.inline))

    return 0


def main():
    args = build_parser().parse_args()
    configure_logging(args.log_level)

    try:
        sys.exit(run(args))
    except StorageError as e:
        print(f"ERROR: {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
