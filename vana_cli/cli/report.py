"""Rendering of refiner stats: JSON payloads and rich human-readable reports."""

import io
from dataclasses import dataclass
from typing import Optional

from rich.console import Console, Group, RenderableType
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from vana_cli.services._helpers import dump_json, parse_timestamp
from vana_cli.services.schemas.stats import (
    CombinedStatsResult,
    CredentialContext,
    ExecutionStats,
    IngestionStats,
    RecentError,
)
from vana_cli.utils.formatting import format_number, format_pair, format_title, mask_sensitive_value

RECENT_ERRORS_SHOWN = 3

NO_DATA_CAUSES: tuple[str, ...] = (
    "The refiner ID doesn't exist",
    "The refiner hasn't processed any data or jobs yet",
    "You don't have permission to view this refiner's stats",
    "One or both services are not configured",
)


@dataclass(frozen=True)
class ReportOptions:
    json: bool = False
    verbose: bool = False
    include_raw: bool = False


# ── value helpers ─────────────────────────────────────────────────────────────


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _positive(value: object) -> bool:
    return _is_number(value) and value > 0


def _fixed(value: object, digits: int) -> str:
    return f"{value:.{digits}f}" if _is_number(value) else str(value)


def _timestamp(value: str) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def sort_tally(tally: dict[str, int]) -> list[tuple[str, int]]:
    """Highest count first; equal counts keep their original order."""
    return sorted(tally.items(), key=lambda item: -item[1] if _is_number(item[1]) else 0)


def _metrics_table(title: str, rows: list[tuple[str, str]]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for metric, value in rows:
        table.add_row(escape(metric), escape(value))
    return table


def _tally_table(title: str, tally: dict[str, int]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Error Type", style="cyan")
    table.add_column("Count", style="red", justify="right")
    for error_type, count in sort_tally(tally):
        table.add_row(escape(str(error_type)), format_number(count))
    return table


# ── sections ──────────────────────────────────────────────────────────────────


def execution_section(stats: Optional[ExecutionStats], error: Optional[str]) -> RenderableType:
    title = "Refiner Execution (Refinement Service)"
    if stats is None:
        lines = [format_title(title), "[bright_black]No execution data available[/bright_black]"]
        if error:
            lines.append(f"[red]Error: {escape(error)}[/red]")
        return Text.from_markup("\n".join(lines))

    if stats.total_jobs == 0:
        return Text.from_markup(f"{format_title(title)}\nNo jobs have been processed yet")

    rows = [
        ("Total Jobs", format_number(stats.total_jobs)),
        ("Successful", format_number(stats.successful_jobs)),
        ("Failed", format_number(stats.failed_jobs)),
        ("Currently Processing", format_number(stats.processing_jobs)),
        ("In Queue", format_number(stats.submitted_jobs)),
    ]
    if _is_number(stats.success_rate):
        rows.append(("Success Rate", f"{stats.success_rate * 100:.1f}%"))
    if _positive(stats.average_processing_time_seconds):
        rows.append(("Avg Processing Time", f"{stats.average_processing_time_seconds:.1f}s"))
    if _positive(stats.jobs_per_hour):
        rows.append(("Jobs per Hour", f"{stats.jobs_per_hour:.2f}"))
    if stats.first_job_at:
        rows.append(("First Job", _timestamp(stats.first_job_at)))
    if stats.last_job_at:
        rows.append(("Last Job", _timestamp(stats.last_job_at)))
    if stats.processing_period_days:
        rows.append(("Processing Period", f"{_fixed(stats.processing_period_days, 1)} days"))
    return _metrics_table(title, rows)


def ingestion_section(stats: Optional[IngestionStats], error: Optional[str]) -> RenderableType:
    title = "Data Ingestion"
    if stats is None:
        lines = [format_title(title), "[bright_black]No ingestion data available[/bright_black]"]
        if error:
            lines.append(f"[red]Error: {escape(error)}[/red]")
        return Text.from_markup("\n".join(lines))

    if stats.total_file_contributions == 0:
        return Text.from_markup(f"{format_title(title)}\nNo data has been ingested yet")

    rows = [
        ("File Contributions", format_number(stats.total_file_contributions)),
        ("Total Data Rows", format_number(stats.total_data_rows)),
        ("Unique Contributors", format_number(stats.unique_contributors)),
    ]
    if stats.first_ingestion_at:
        rows.append(("First Ingestion", _timestamp(stats.first_ingestion_at)))
    if stats.last_ingestion_at:
        rows.append(("Last Ingestion", _timestamp(stats.last_ingestion_at)))
    if stats.ingestion_period_days:
        rows.append(("Ingestion Period", f"{_fixed(stats.ingestion_period_days, 1)} days"))
    rows.append(("Avg Rate/Hour", _fixed(stats.average_ingestion_rate_per_hour, 2)))

    parts: list[RenderableType] = [_metrics_table(title, rows)]
    if stats.rows_per_table:
        table = Table(title="Rows per Table", title_justify="left")
        table.add_column("Table", style="cyan")
        table.add_column("Rows", style="green", justify="right")
        for name, count in sort_tally(stats.rows_per_table):
            table.add_row(escape(str(name)), format_number(count))
        parts.append(table)
    return Group(*parts)


def query_section(stats: IngestionStats) -> Optional[RenderableType]:
    if not _positive(stats.total_queries_executed):
        return None
    rate = 0.0
    if _is_number(stats.successful_queries):
        rate = stats.successful_queries / stats.total_queries_executed * 100
    return _metrics_table(
        "Query Execution",
        [
            ("Total Queries", format_number(stats.total_queries_executed)),
            ("Successful", format_number(stats.successful_queries)),
            ("Failed", format_number(stats.failed_queries)),
            ("Success Rate", f"{rate:.1f}%"),
        ],
    )


def _recent_errors(errors: tuple[RecentError, ...]) -> Text:
    lines = ["Recent Execution Errors:"]
    for index, item in enumerate(errors[:RECENT_ERRORS_SHOWN], start=1):
        lines.append(f"  {index}. {escape(item.error)}")
        lines.append(f"     {escape(_timestamp(item.timestamp))}")
        if item.job_id:
            lines.append(f"     Job ID: {escape(str(item.job_id))}")
    return Text.from_markup("\n".join(lines))


def error_analysis_section(result: CombinedStatsResult) -> Optional[RenderableType]:
    query_errors = result.ingestion_stats.query_errors_by_type if result.ingestion_stats else {}
    execution_errors = result.execution_stats.error_types if result.execution_stats else {}
    if not query_errors and not execution_errors:
        return None

    parts: list[RenderableType] = [Text.from_markup(format_title("Error Analysis"))]
    if query_errors:
        parts.append(_tally_table("Query Errors", query_errors))
    if execution_errors:
        parts.append(_tally_table("Execution Errors", execution_errors))
    if result.execution_stats and result.execution_stats.recent_errors:
        parts.append(_recent_errors(result.execution_stats.recent_errors))
    return Group(*parts)


def _source_status(stats: object, error: Optional[str]) -> str:
    if stats is not None:
        return "Connected"
    if error:
        return "Error"
    return "Not configured"


def technical_section(result: CombinedStatsResult) -> RenderableType:
    rows: list[tuple[str, str]] = []
    if result.ingestion_stats and result.ingestion_stats.last_processed_block:
        rows.append(("Last Processed Block", format_number(result.ingestion_stats.last_processed_block)))
    rows.append(("Query Engine Status", _source_status(result.ingestion_stats, result.ingestion_error)))
    rows.append(
        ("Refinement Service Status", _source_status(result.execution_stats, result.execution_error))
    )
    return _metrics_table("Technical Details", rows)


# ── whole reports ─────────────────────────────────────────────────────────────


def build_report(result: CombinedStatsResult, verbose: bool = False) -> list[RenderableType]:
    parts: list[RenderableType] = [
        Text.from_markup(format_title(f"Refiner {result.refiner_id} - Comprehensive Statistics")),
        execution_section(result.execution_stats, result.execution_error),
        ingestion_section(result.ingestion_stats, result.ingestion_error),
    ]
    if result.ingestion_stats is not None:
        queries = query_section(result.ingestion_stats)
        if queries is not None:
            parts.append(queries)
    errors = error_analysis_section(result)
    if errors is not None:
        parts.append(errors)
    if verbose:
        parts.append(technical_section(result))
    return parts


def _availability(label: str, stats: object, error: Optional[str], empty_note: str) -> str:
    if error:
        return f"  {label}: [red]✗ {escape(error)}[/red]"
    if stats is not None:
        return f"  {label}: [green]✓ Connected ({empty_note})[/green]"
    return f"  {label}: [bright_black]Not configured[/bright_black]"


def build_no_data_report(result: CombinedStatsResult) -> list[RenderableType]:
    lines = [
        format_title(f"Refiner {result.refiner_id} - No Data Found"),
        "",
        "Data Availability:",
        _availability("Query Engine", result.ingestion_stats, result.ingestion_error, "no data ingested"),
        _availability(
            "Refinement Service", result.execution_stats, result.execution_error, "no jobs processed"
        ),
        "",
        "This could mean:",
        *(f"  • {escape(cause)}" for cause in NO_DATA_CAUSES),
    ]
    return [Text.from_markup("\n".join(lines))]


def build_verbose_header(refiner_id: int, credentials: CredentialContext) -> list[RenderableType]:
    lines = [
        format_title("Comprehensive Refiner Statistics"),
        format_pair("Refiner ID", str(refiner_id)),
        format_pair("Query Engine API", credentials.ingestion_endpoint or "Not configured"),
        format_pair("Refinement Service API", credentials.execution_endpoint or "Not configured"),
        format_pair("Private Key", mask_sensitive_value("wallet_private_key", credentials.private_key)),
        "",
    ]
    return [Text.from_markup("\n".join(lines))]


def render_json(result: CombinedStatsResult) -> str:
    return dump_json(result.to_dict())


def render_text(renderables: list[RenderableType], width: int = 120, color: bool = False) -> str:
    """Text of rich renderables; colour codes only when ``color`` is set."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        color_system="standard" if color else None,
        force_terminal=color,
        highlight=False,
    )
    for renderable in renderables:
        console.print(renderable)
    return buffer.getvalue()


def render(result: CombinedStatsResult, options: ReportOptions, width: int = 120, color: bool = False) -> str:
    """Complete stdout text for a result with data."""
    if options.json:
        return render_json(result) + "\n"
    text = render_text(build_report(result, verbose=options.verbose), width=width, color=color)
    if options.include_raw:
        text += "\n" + render_text([Text.from_markup(format_title("Raw API Responses"))], width=width, color=color)
        text += render_json(result) + "\n"
    return text
