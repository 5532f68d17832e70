#!/usr/bin/env python3
"""
LFS Content Store CLI

Commands:
    lfsstore put PATH [--oid OID] [--size N]   Verify and upload a file
    lfsstore get OID [--output PATH]          Download an object
    lfsstore exists OID                       Probe for an object
    lfsstore delete OID                       Remove an object
    lfsstore key OID [--prefix P]             Print the storage key for an oid
    lfsstore acl NAME                         Print the canned ACL a name resolves to

Usage:
    LFS_S3_BUCKET=lfs-objects python -m lfsstore put ./blob.bin

    # MinIO
    LFS_S3_BUCKET=lfs LFS_S3_ENDPOINT_URL=http://localhost:9000 \\
        LFS_S3_ADDRESSING_STYLE=path python -m lfsstore exists 6ae8a755...

Exit codes: 0 success, 1 operation failed or object absent, 2 bad configuration.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from lfsstore import __version__
from lfsstore.core.types import ContentHash, MetaObject
from lfsstore.observability.logging import LogLevel, setup_logging
from lfsstore.storage.acl import AccessPolicy
from lfsstore.storage.config import S3StoreConfig
from lfsstore.storage.keys import transform_key
from lfsstore.storage.protocols import ObjectBackend
from lfsstore.storage.s3_store import S3ContentStore

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _oid(value: str) -> str:
    """argparse type: a 64-character lowercase SHA-256 hex oid."""
    parsed = ContentHash.from_hex(value)
    if parsed.is_err():
        raise argparse.ArgumentTypeError(parsed.error)
    return parsed.unwrap().to_hex()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lfsstore",
        description="Content-addressable Git LFS object storage on S3",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Minimum log level (default: WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # put command
    put_parser = subparsers.add_parser("put", help="Verify and upload a file")
    put_parser.add_argument("path", type=Path, help="File to upload")
    put_parser.add_argument("--oid", type=_oid, help="Declared oid (default: SHA-256 of the file)")
    put_parser.add_argument("--size", type=int, help="Declared size (default: file length)")

    # get command
    get_parser = subparsers.add_parser("get", help="Download an object")
    get_parser.add_argument("oid", type=_oid, help="Object id")
    get_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write to this file instead of stdout",
    )

    # exists command
    exists_parser = subparsers.add_parser("exists", help="Probe for an object")
    exists_parser.add_argument("oid", type=_oid, help="Object id")

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Remove an object")
    delete_parser.add_argument("oid", type=_oid, help="Object id")

    # key command
    key_parser = subparsers.add_parser("key", help="Print the storage key for an oid")
    key_parser.add_argument("oid", help="Object id")
    key_parser.add_argument("--prefix", default="", help="Key prefix")

    # acl command
    acl_parser = subparsers.add_parser("acl", help="Print the canned ACL a policy name resolves to")
    acl_parser.add_argument("name", help="Policy name")

    return parser


def main(argv: Optional[Sequence[str]] = None, client: Optional[ObjectBackend] = None) -> int:
    """
    Run one command and return its exit code.

    Args:
        argv: Arguments (default: sys.argv[1:]).
        client: Pre-built S3 client handed to the store instead of boto3's.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    setup_logging(LogLevel.parse(args.log_level), json_output=args.json_logs)

    # Commands that need no backend
    if args.command == "key":
        print(transform_key(args.oid, args.prefix))
        return EXIT_OK

    if args.command == "acl":
        print(AccessPolicy.resolve(args.name).value)
        return EXIT_OK

    try:
        config = S3StoreConfig.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    store_result = S3ContentStore.open(config, client=client)
    if store_result.is_err():
        print(f"Configuration error: {store_result.error}", file=sys.stderr)
        return EXIT_CONFIG

    store = store_result.unwrap()

    if args.command == "put":
        return _put(store, args.path, args.oid, args.size)
    if args.command == "get":
        return _get(store, args.oid, args.output)
    if args.command == "exists":
        found = store.exists(MetaObject(oid=args.oid, size=0))
        print("present" if found else "absent")
        return EXIT_OK if found else EXIT_FAILED
    if args.command == "delete":
        result = store.delete(MetaObject(oid=args.oid, size=0))
        if result.is_err():
            print(f"Error: {result.error}", file=sys.stderr)
            return EXIT_FAILED
        return EXIT_OK

    parser.print_help()
    return EXIT_FAILED


def _put(store: S3ContentStore, path: Path, oid: Optional[str], size: Optional[int]) -> int:
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return EXIT_FAILED

    meta = MetaObject(
        oid=oid or ContentHash.compute(data).to_hex(),
        size=len(data) if size is None else size,
    )
    result = store.put(meta, data)
    if result.is_err():
        print(f"Error: {result.error}", file=sys.stderr)
        return EXIT_FAILED

    print(f"{meta.oid} {meta.size} {store.key_for(meta.oid)}")
    return EXIT_OK


def _get(store: S3ContentStore, oid: str, output: Optional[Path]) -> int:
    # get ignores the declared size
    result = store.get(MetaObject(oid=oid, size=0))
    if result.is_err():
        print(f"Error: {result.error}", file=sys.stderr)
        return EXIT_FAILED

    data = result.unwrap().read()
    if output is None:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    else:
        output.write_bytes(data)
    return EXIT_OK


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
