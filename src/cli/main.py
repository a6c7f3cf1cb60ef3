"""Bundle unpacker CLI entry point.
This module fetches an optional bundle by id and unpacks every local bundle.
It maps argparse options onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from core.config import UnpackConfig
from core.errors import UnpackArgumentError, UnpackConfigError, UnpackError
from core.types import UnpackRunReport
from store.unpack_sdk import UnpackClient

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="bundle-unpacker",
        description="Unpack ANS-104 bundles into per-item files and tag records",
    )
    parser.add_argument(
        "bundle_id",
        nargs="?",
        help="Optional 43-character bundle id to fetch before unpacking local bundles",
    )
    parser.add_argument("--input-dir", help="Override UNPACK_INPUT_DIR for this run")
    parser.add_argument("--output-dir", help="Override UNPACK_OUTPUT_DIR for this run")
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip item signature verification",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Override UNPACK_MAX_WORKERS for this run",
    )
    parser.add_argument(
        "--output-uri",
        help="Optional s3://bucket/prefix to upload each unpacked bundle to",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bundle unpacker CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args)
    except UnpackConfigError as error:
        print(f"error\tconfig\t{error}")
        return EXIT_USAGE
    exit_code = EXIT_OK
    if args.bundle_id is not None:
        exit_code = _fetch_requested_bundle(client, args.bundle_id)
    report = client.process_all()
    _print_report(report)
    if report.failed_count:
        exit_code = max(exit_code, EXIT_FAILURES)
    if args.output_uri:
        exit_code = max(exit_code, _export_results(client, report, args.output_uri))
    return exit_code


def _build_client(args: argparse.Namespace) -> UnpackClient:
    """Build SDK client with optional CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Configured SDK client.
    """
    config = UnpackConfig.from_env()
    if args.input_dir:
        config = replace(config, input_dir=Path(args.input_dir).expanduser().resolve())
    if args.output_dir:
        config = replace(config, output_dir=Path(args.output_dir).expanduser().resolve())
    if args.no_verify:
        config = replace(config, verify_signatures=False)
    if args.workers is not None:
        if args.workers < 1:
            raise UnpackConfigError(f"Invalid --workers value {args.workers}: expected >= 1.")
        config = replace(config, max_workers=args.workers)
    return UnpackClient(config)


def _fetch_requested_bundle(client: UnpackClient, bundle_id: str) -> int:
    """Fetch the requested bundle, reporting failures without raising.

    Args:
        client: SDK client.
        bundle_id: Bundle id from the command line.

    Returns:
        Exit code contribution of the fetch step.
    """
    try:
        client.fetch(bundle_id)
    except UnpackArgumentError as error:
        print(f"error\t{bundle_id}\t{error}")
        return EXIT_USAGE
    except UnpackError as error:
        print(f"error\t{bundle_id}\t{error}")
        return EXIT_FAILURES
    return EXIT_OK


def _print_report(report: UnpackRunReport) -> None:
    """Print one summary line per bundle."""
    for result in report.results:
        print(
            f"{result.bundle_name}\t"
            f"{result.artifacts_written}\t"
            f"{result.orphans_flushed}\t"
            f"{result.merged_count}"
        )
    for failure in report.failures:
        print(f"error\t{failure.bundle_name}\t{failure.error}")


def _export_results(client: UnpackClient, report: UnpackRunReport, output_uri: str) -> int:
    """Upload each unpacked bundle and return the export exit code."""
    exit_code = EXIT_OK
    for result in report.results:
        try:
            uploaded = client.export_output(result.bundle_name, output_uri)
        except UnpackError as error:
            print(f"error\t{result.bundle_name}\t{error}")
            exit_code = EXIT_FAILURES
            continue
        print(f"exported\t{result.bundle_name}\t{uploaded}")
    return exit_code
