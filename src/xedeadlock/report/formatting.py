"""Formatting utilities for deadlock reports."""

from datetime import datetime

from xedeadlock.constants import (
    EVENT_TIME_FORMAT,
    REPORT_COLUMNS,
    TABLE_QUERY_WIDTH,
)
from xedeadlock.models.report import CorrelatedPair, DeadlockReport


def format_event_time(moment: datetime) -> str:
    """
    Format an event time with millisecond precision.

    Args:
        moment: Event timestamp

    Returns:
        Formatted string (e.g., "2024-03-01 10:15:42.123")
    """
    return moment.strftime(EVENT_TIME_FORMAT)[:-3]


def format_cell(value: object) -> str:
    """Render a single cell; missing values become empty strings."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_event_time(value)
    return str(value)


def collapse_whitespace(value: str) -> str:
    """Join multi-line query text into a single line."""
    return " ".join(value.split())


def truncate(value: str, width: int) -> str:
    """
    Truncate text to a column width.

    Args:
        value: Text to truncate
        width: Maximum length, including the trailing ellipsis

    Returns:
        The text, shortened with "..." if it was too long
    """
    if width <= 3 or len(value) <= width:
        return value[:width] if width > 0 else ""
    return value[: width - 3] + "..."


def pair_cells(pair: CorrelatedPair, query_width: int | None) -> list[str]:
    """Render one pair as table cells."""
    cells = [format_cell(v) for v in pair.as_row().values()]
    query_index = REPORT_COLUMNS.index("Query")
    query = collapse_whitespace(cells[query_index])
    cells[query_index] = truncate(query, query_width) if query_width else query
    return cells


def format_table(
    pairs: list[CorrelatedPair], query_width: int | None = TABLE_QUERY_WIDTH
) -> list[str]:
    """
    Format pairs as an aligned text table.

    Args:
        pairs: Ordered pairs to render
        query_width: Max width of the Query column, None for no limit

    Returns:
        Table lines: header, separator, one line per pair
    """
    rows = [pair_cells(p, query_width) for p in pairs]
    widths = [len(c) for c in REPORT_COLUMNS]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row, strict=True)]

    def render(cells: list[str] | tuple[str, ...]) -> str:
        return "  ".join(c.ljust(w) for c, w in zip(cells, widths, strict=True)).rstrip()

    lines = [render(REPORT_COLUMNS), "  ".join("-" * w for w in widths)]
    lines.extend(render(row) for row in rows)
    return lines


def format_legend(report: DeadlockReport) -> list[str]:
    """Format the static column legend."""
    return ["Note", "-" * 4, *report.legend]


def format_report(
    report: DeadlockReport,
    include_legend: bool = True,
    query_width: int | None = TABLE_QUERY_WIDTH,
) -> str:
    """
    Format a complete report as text.

    The data table comes first, followed by the legend. An empty report
    still prints the header so the columns stay recognizable.

    Args:
        report: Analysis result
        include_legend: Append the column legend after the table
        query_width: Max width of the Query column

    Returns:
        Multi-line report text
    """
    lines = format_table(report.pairs, query_width=query_width)

    if report.is_empty:
        lines.append("(no deadlocks found)")

    if include_legend:
        lines.append("")
        lines.extend(format_legend(report))

    return "\n".join(lines)
