"""
Report rendering.

Walk and check results are rendered in one of four formats:

- column: aligned table followed by a summary line
- summary: the summary line alone
- csv: header row then one row per partition (walk) or gap (check)
- json: a single document stamped with the generation time and the
  scanned directories

Column and CSV timestamps follow the selected time format; JSON always
carries RFC 3339 timestamps.
"""

import csv
import json
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import TextIO

from upifinder.core.models import Coze, Gap
from upifinder.report.pretty import pretty_size, transform_upi
from upifinder.report.timefmt import format_duration, format_time

WALK_COLUMNS = (
    "UPI",
    "Total",
    "Uniq",
    "Size",
    "Invalid",
    "Ratio",
    "AcqStart",
    "AcqEnd",
    "SeqStart",
    "SeqEnd",
    "Missing",
)

CHECK_COLUMNS = (
    "UPI",
    "Starts",
    "Ends",
    "Duration",
    "Before",
    "After",
    "Missing",
)

COLUMN_SEPARATOR = " | "


def write_table(out: TextIO, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Write rows as left-aligned columns sized to their widest cell."""
    widths = [len(header) for header in headers]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def line(cells: Sequence[str]) -> str:
        return COLUMN_SEPARATOR.join(f"{cell:<{width}}" for cell, width in zip(cells, widths)).rstrip()

    out.write(line(headers) + "\n")
    out.write(COLUMN_SEPARATOR.join("-" * width for width in widths) + "\n")
    for row in rows:
        out.write(line(row) + "\n")


def _stamp(stamp: datetime | None) -> str:
    return format_time(stamp or datetime.now(timezone.utc))


# =======================
# WALK
# =======================

def walk_row(coze: Coze, time_format: str = "rfc3339") -> list[str]:
    first, last = coze.range()
    return [
        transform_upi(coze.upi),
        str(coze.count),
        str(coze.uniq),
        pretty_size(coze.size).strip(),
        str(coze.invalid),
        f"{coze.corrupted() * 100:.2f}%",
        format_time(coze.starts, time_format),
        format_time(coze.ends, time_format),
        str(first),
        str(last),
        str(coze.missing()),
    ]


def walk_summary(summary: Coze, missing: int = 0) -> str:
    return (
        f"{summary.count} files found ({pretty_size(summary.size).strip()}) - "
        f"uniq: {summary.uniq} - corrupted: {summary.invalid} "
        f"({summary.corrupted() * 100:.2f}%) - missing: {missing}"
    )


def render_walk(
    results: dict[str, Coze],
    output_format: str,
    out: TextIO,
    time_format: str = "rfc3339",
    dirs: Sequence[str] = (),
    stamp: datetime | None = None,
) -> Coze:
    """
    Render a walk report.

    Args:
        results: Cozes keyed by partition
        output_format: column, summary, csv or json
        out: Output stream
        time_format: rfc3339, unix or gps
        dirs: Scanned directories (json only)
        stamp: Generation time (json only, defaults to now)

    Returns:
        The summary Coze of all partitions

    Raises:
        ValueError: If output_format is unknown
    """
    summary = Coze.merge_summary(list(results.values()))
    missing = sum(coze.missing() for coze in results.values())
    rows = [walk_row(results[key], time_format) for key in sorted(results)]

    if output_format == "column":
        write_table(out, WALK_COLUMNS, rows)
        out.write("\n" + walk_summary(summary, missing) + "\n")
    elif output_format == "summary":
        out.write(walk_summary(summary, missing) + "\n")
    elif output_format == "csv":
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(WALK_COLUMNS)
        writer.writerows(rows)
    elif output_format == "json":
        status = []
        for key in sorted(results):
            coze = results[key]
            item = coze.model_dump(mode="json", by_alias=True)
            item["missing"] = coze.missing()
            status.append(item)
        document = {
            "dtstamp": _stamp(stamp),
            "dirs": list(dirs),
            "status": status,
        }
        json.dump(document, out)
        out.write("\n")
    else:
        raise ValueError(f"Unsupported format: {output_format}")
    return summary


# =======================
# CHECK
# =======================

def check_row(gap: Gap, time_format: str = "rfc3339") -> list[str]:
    return [
        transform_upi(gap.upi),
        format_time(gap.starts, time_format),
        format_time(gap.ends, time_format),
        format_duration(gap.duration),
        str(gap.before),
        str(gap.after),
        str(gap.count),
    ]


def check_summary(missing: int, duration: timedelta) -> str:
    return f"{missing} missing files ({format_duration(duration)})"


def render_check(
    gaps: list[Gap],
    output_format: str,
    out: TextIO,
    time_format: str = "rfc3339",
    dirs: Sequence[str] = (),
    stamp: datetime | None = None,
) -> tuple[int, timedelta]:
    """
    Render a check report.

    Args:
        gaps: Gaps sorted by partition then lower bound
        output_format: column, summary, csv or json
        out: Output stream
        time_format: rfc3339, unix or gps
        dirs: Scanned directories (json only)
        stamp: Generation time (json only, defaults to now)

    Returns:
        Total missing files and total gap duration

    Raises:
        ValueError: If output_format is unknown
    """
    missing = sum(gap.count for gap in gaps)
    duration = sum((gap.duration for gap in gaps), timedelta(0))

    if output_format == "column":
        write_table(out, CHECK_COLUMNS, [check_row(gap, time_format) for gap in gaps])
        out.write("\n" + check_summary(missing, duration) + "\n")
    elif output_format == "summary":
        out.write(check_summary(missing, duration) + "\n")
    elif output_format == "csv":
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(CHECK_COLUMNS)
        writer.writerows(check_row(gap, time_format) for gap in gaps)
    elif output_format == "json":
        grouped: dict[str, list[dict]] = {}
        for gap in gaps:
            grouped.setdefault(gap.upi, []).append(gap.model_dump(mode="json", by_alias=True))
        document = {
            "dtstamp": _stamp(stamp),
            "dirs": list(dirs),
            "count": len(gaps),
            "gaps": grouped,
            "missing": missing,
            "duration": int(duration.total_seconds()),
        }
        json.dump(document, out)
        out.write("\n")
    else:
        raise ValueError(f"Unsupported format: {output_format}")
    return missing, duration


# =======================
# INSPECT
# =======================

def render_inspect(results: dict[str, Coze], out: TextIO, time_format: str = "rfc3339") -> None:
    """Write a detailed block per partition: totals, seen ranges and missing ranges."""
    for index, key in enumerate(sorted(results)):
        coze = results[key]
        first, last = coze.range()
        if index:
            out.write("===\n")
        out.write(
            f"{transform_upi(coze.upi)} "
            f"({format_time(coze.starts, time_format)} - {format_time(coze.ends, time_format)})\n\n"
        )
        out.write(f"- Size   : {pretty_size(coze.size).strip()}\n")
        out.write(f"- Total  : {coze.total()}\n")
        out.write(f"- First  : {first}\n")
        out.write(f"- Last   : {last}\n")

        ranges = coze.ranges()
        if ranges:
            out.write(f"- Ranges : {len(ranges)}\n")
            for ix, run in enumerate(ranges, start=1):
                out.write(f"-- {ix}: {run.first} -> {run.last} (total: {run.count})\n")

        gaps = coze.missing_ranges()
        if gaps:
            out.write(f"- Gaps   : {len(gaps)}\n")
            for ix, hole in enumerate(gaps, start=1):
                out.write(f"-- {ix}: {hole.first} -> {hole.last} (missing: {hole.count - 2})\n")
        out.write("\n")
