"""
Command-line interface for auditing archives.

Usage:
    upifinder walk [options] <archive>...
    upifinder check [options] <archive>...
    upifinder inspect [options] <archive>...
"""

import argparse
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

from upifinder.core.config import AuditSettings, load_settings
from upifinder.core.decoder import OriginTable
from upifinder.core.stats import Aggregator, GapDetector, PartitionFunc, get_partitioner
from upifinder.observability.logger import LOG_FORMATS, LOG_LEVELS, configure_logging, get_logger, log_scan
from upifinder.observability.metrics import record_check_report, record_walk_report, start_metrics_server
from upifinder.report import format_duration, render_check, render_inspect, render_walk
from upifinder.scan import ArchiveScanner, ScanError, list_paths
from upifinder.utils.validation import (
    CHECK_FORMATS,
    TIME_FORMATS,
    WALK_FORMATS,
    ConfigurationError,
    parse_date,
    parse_duration,
    validate_format,
    validate_group_by,
    validate_period,
    validate_upi,
    validate_workers,
)

logger = get_logger(__name__)

EXIT_SCAN_ERROR = 1
EXIT_CONFIG_ERROR = 2


@dataclass
class ScanOptions:
    """Validated options shared by every command."""

    paths: list[str]
    upi: str | None
    partition: PartitionFunc
    output_format: str
    time_format: str
    workers: int


def resolve_scan_options(
    args, settings: AuditSettings, default_workers: int, formats: tuple[str, ...]
) -> ScanOptions:
    """
    Validate the command-line options and expand the archive roots.

    Raises:
        ConfigurationError: If any option is invalid
    """
    start = parse_date(args.start, "start")
    end = parse_date(args.end, "end")
    period = validate_period(args.days, "days")
    group_by = validate_group_by(args.group_by, "group-by")

    return ScanOptions(
        paths=list_paths(args.archives, period=period, start=start, end=end),
        upi=validate_upi(args.upi),
        partition=get_partitioner(group_by),
        output_format=validate_format(args.format or settings.report.format, formats),
        time_format=validate_format(args.time_format or settings.report.time_format, TIME_FORMATS, "time-format"),
        workers=validate_workers(args.workers or default_workers),
    )


def create_scanner(options: ScanOptions, settings: AuditSettings) -> ArchiveScanner:
    try:
        origins: OriginTable = settings.origins.table()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return ArchiveScanner(
        upi=options.upi,
        max_workers=options.workers,
        queue_size=settings.scan.queue_size,
        origins=origins,
    )


def report_scan_error(error: ScanError) -> int:
    for failure in error.errors:
        logger.error(f"Root {failure.root} failed: {failure.cause}")
    logger.error(f"Scan incomplete: {error}")
    return EXIT_SCAN_ERROR


def _stamped(records, rec_time: bool):
    if not rec_time:
        return records
    return (record.stamped_by_rec_time() for record in records)


def _aggregate(args, settings: AuditSettings, command: str) -> tuple[ScanOptions, Aggregator, ScanError | None, float]:
    options = resolve_scan_options(
        args, settings, settings.scan.walk_workers, WALK_FORMATS
    )
    scanner = create_scanner(options, settings)
    aggregator = Aggregator(partition=options.partition)

    failure = None
    scan = log_scan(command, logger=logger, roots=len(options.paths))
    try:
        with scan:
            records = scanner.scan(options.paths)
            scan.records = aggregator.update_all(_stamped(records, args.rec_time))
    except ScanError as e:
        failure = e
    return options, aggregator, failure, scan.duration


def walk_command(args, settings: AuditSettings) -> int:
    """
    Count the records of every partition.

    Args:
        args: Command line arguments
        settings: Loaded settings

    Returns:
        Process exit code
    """
    options, aggregator, failure, duration = _aggregate(args, settings, "walk")

    results = aggregator.results()
    summary = render_walk(
        results,
        options.output_format,
        sys.stdout,
        time_format=options.time_format,
        dirs=options.paths,
    )
    missing = sum(coze.missing() for coze in results.values())
    record_walk_report(len(results), summary.invalid, missing, duration)
    logger.info(
        f"{summary.count} files found - uniq: {summary.uniq} - corrupted: {summary.invalid} "
        f"- missing: {missing}"
    )

    if failure is not None:
        return report_scan_error(failure)
    return 0


def inspect_command(args, settings: AuditSettings) -> int:
    """Print, per partition, the seen and missing sequence ranges."""
    options, aggregator, failure, duration = _aggregate(args, settings, "inspect")

    results = aggregator.results()
    render_inspect(results, sys.stdout, time_format=options.time_format)
    summary = aggregator.summary()
    record_walk_report(
        len(results),
        summary.invalid,
        sum(coze.missing() for coze in results.values()),
        duration,
        command="inspect",
    )

    if failure is not None:
        return report_scan_error(failure)
    return 0


def check_command(args, settings: AuditSettings) -> int:
    """
    Report the gaps of every partition.

    Args:
        args: Command line arguments
        settings: Loaded settings

    Returns:
        Process exit code
    """
    options = resolve_scan_options(args, settings, settings.scan.check_workers, CHECK_FORMATS)
    min_duration = parse_duration(args.min_duration, "min-duration")
    scanner = create_scanner(options, settings)
    detector = GapDetector(
        partition=options.partition,
        keep_invalid=args.keep_invalid,
        all_gaps=args.all_gaps,
        min_duration=min_duration,
    )

    failure = None
    scan = log_scan("check", logger=logger, roots=len(options.paths))
    try:
        with scan:
            scan.records = detector.update_all(scanner.scan(options.paths))
    except ScanError as e:
        failure = e

    gaps = detector.gaps()
    missing, elapsed = render_check(
        gaps,
        options.output_format,
        sys.stdout,
        time_format=options.time_format,
        dirs=options.paths,
    )
    record_check_report(len(detector.partitions()), len(gaps), missing, scan.duration)
    logger.info(f"{missing} missing files ({format_duration(elapsed)}) in {len(gaps)} gaps")

    if failure is not None:
        return report_scan_error(failure)
    return 0


def _add_scan_arguments(parser: argparse.ArgumentParser, formats: tuple[str, ...] = ()) -> None:
    parser.add_argument(
        "archives",
        nargs="+",
        metavar="ARCHIVE",
        help="Archive root, tar/zip archive or list file",
    )
    parser.add_argument(
        "-s", "--start",
        help="First day of the window (YYYY-MM-DD)"
    )
    parser.add_argument(
        "-e", "--end",
        help="End of the window, exclusive (YYYY-MM-DD)"
    )
    parser.add_argument(
        "-d", "--days",
        type=int,
        default=0,
        help="Length of the window in days (default: no window)"
    )
    parser.add_argument(
        "-u", "--upi",
        help="Only scan files whose name contains this UPI"
    )
    parser.add_argument(
        "-g", "--group-by",
        default="upi",
        help="Partition key: upi (source/UPI), source or merged (UPI across sources)"
    )
    if formats:
        parser.add_argument(
            "-f", "--format",
            help=f"Output format: {', '.join(formats)} (default: column)"
        )
    else:
        parser.set_defaults(format=None)
    parser.add_argument(
        "-w", "--workers",
        type=int,
        help="Number of roots scanned concurrently"
    )
    parser.add_argument(
        "--time-format",
        help=f"Timestamp rendering: {', '.join(TIME_FORMATS)} (default: rfc3339)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upifinder",
        description="Audit archives for missing and corrupted files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Count files per partition over the last 7 days
  upifinder walk -d 7 /data/images/playback/38

  # Gaps longer than 5 minutes in June 2018, as JSON
  upifinder check -s 2018-06-01 -e 2018-07-01 -i 5m -f json /data/images/playback/38

  # Ranges of one product, all sources merged
  upifinder inspect -u HRD -g merged /data/archive.lst
        """
    )
    parser.add_argument(
        "--config",
        help="Path to settings YAML file (default: $UPIFINDER_CONFIG)"
    )
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        help="Log level (default: from settings)"
    )
    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        help="Log format (default: from settings)"
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    walk_parser = subparsers.add_parser("walk", help="Count files per partition")
    _add_scan_arguments(walk_parser, WALK_FORMATS)
    walk_parser.add_argument(
        "--rec-time",
        action="store_true",
        help="Use the reception time instead of the acquisition time"
    )

    check_parser = subparsers.add_parser("check", help="Report sequence gaps per partition")
    _add_scan_arguments(check_parser, CHECK_FORMATS)
    check_parser.add_argument(
        "-i", "--min-duration",
        help="Ignore gaps shorter than this (90s, 5m, 1h30m or seconds)"
    )
    check_parser.add_argument(
        "-k", "--keep-invalid",
        action="store_true",
        help="Include corrupted (.bad) files in the gap computation"
    )
    check_parser.add_argument(
        "-a", "--all-gaps",
        action="store_true",
        help="Report every gap ever observed, even when later refilled"
    )

    inspect_parser = subparsers.add_parser("inspect", help="Show seen and missing ranges per partition")
    _add_scan_arguments(inspect_parser)
    inspect_parser.add_argument(
        "--rec-time",
        action="store_true",
        help="Use the reception time instead of the acquisition time"
    )

    return parser


COMMANDS = {
    "walk": walk_command,
    "check": check_command,
    "inspect": inspect_command,
}


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(
        settings.logging,
        level=args.log_level,
        format_type=args.log_format,
        command=args.command,
    )
    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    try:
        exit_code = COMMANDS[args.command](args, settings)
    except ConfigurationError as e:
        logger.error(f"Invalid options: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
