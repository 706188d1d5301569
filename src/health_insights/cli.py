#!/usr/bin/env python3
"""
Health Insights CLI.

Readiness scores and weekly workout trends over a JSON snapshot of
exported health data.

Usage:
    health-insights readiness --data snapshot.json --date 2024-03-10
    health-insights readiness --data snapshot.json --store
    health-insights trends --data snapshot.json --weeks 4 --category run
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import Settings, load_settings
from .exceptions import HealthInsightsError, InvalidArgumentError
from .models import Progression, ReadinessRecord, TrendSummary
from .readiness import ReadinessScorer
from .repository import InMemoryMetricRepository
from .trends import COMBINED, TREND_VIEWS, TrendService

logger = logging.getLogger(__name__)

console = Console()


def get_zone_color(zone: str) -> str:
    """Get rich color for readiness zone."""
    colors = {
        "green": "green",
        "yellow": "yellow",
        "red": "red",
    }
    return colors.get(zone, "white")


def get_progression_color(progression: Progression) -> str:
    colors = {
        Progression.PROGRESSING: "green",
        Progression.STALLING: "yellow",
    }
    return colors.get(progression, "dim")


def parse_date_arg(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def load_snapshot(path: Path) -> Dict[str, Any]:
    """Read a JSON snapshot file.

    Raises:
        InvalidArgumentError: If the file is missing or is not a JSON object
    """
    try:
        snapshot = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise InvalidArgumentError(f"Snapshot file not found: {path}", field="data")
    except json.JSONDecodeError as e:
        raise InvalidArgumentError(f"Snapshot is not valid JSON: {e}", field="data") from e
    if not isinstance(snapshot, dict):
        raise InvalidArgumentError("Snapshot must be a JSON object", field="data")
    return snapshot


def save_readiness(path: Path, snapshot: Dict[str, Any], stored: List[ReadinessRecord]) -> None:
    """Merge stored readiness records into the snapshot file, one per date."""
    by_date = {row.get("date"): row for row in snapshot.get("readiness", [])}
    for record in stored:
        by_date[record.date.isoformat()] = record.to_dict()
    snapshot["readiness"] = [by_date[d] for d in sorted(by_date)]
    path.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")


# =============================================================================
# Rendering
# =============================================================================

def render_readiness(record: ReadinessRecord) -> None:
    """Print a readiness record as rich tables."""
    color = get_zone_color(record.zone)
    console.print()
    console.print(Panel(
        Text(f"{record.composite_score}/100  {record.zone.upper()}", style=f"bold {color}"),
        title=f"Readiness {record.date.isoformat()}",
        box=box.ROUNDED,
    ))

    table = Table(title="Components", box=box.ROUNDED)
    table.add_column("Factor", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Detail", style="dim")
    table.add_row(
        "HRV",
        str(record.hrv_score),
        f"{record.hrv:.0f} ms vs {record.hrv_baseline.mean:.1f} ± {record.hrv_baseline.sd:.1f} "
        f"(z {record.hrv_z:+.2f}, n={record.hrv_baseline.count})",
    )
    table.add_row(
        "Sleep",
        str(record.sleep_score),
        f"{record.sleep.sleep_hours:.1f} h asleep, {record.sleep.awake_minutes} min awake, "
        f"{record.sleep.wake_count} wakes",
    )
    table.add_row(
        "Training load",
        str(record.training_load_score),
        f"{record.training_load_minutes:.0f} min over {record.training_load_window_days} days "
        f"({record.training_load_level})",
    )
    console.print(table)

    sleep = Table(title="Sleep breakdown", box=box.SIMPLE)
    sleep.add_column("Component", style="cyan")
    sleep.add_column("Score", justify="right")
    for name, value in (
        ("Quantity", record.sleep.quantity_score),
        ("Quality", record.sleep.quality_score),
        ("Architecture", record.sleep.architecture_score),
        ("Physiology", record.sleep.physiology_score),
        ("Regularity", record.sleep.regularity_score),
        ("Subjective", record.sleep.subjective_score),
    ):
        sleep.add_row(name, f"{value:.1f}")
    console.print(sleep)

    for rec in record.recommendations:
        color = "red" if rec.priority == "high" else "yellow"
        console.print(f"[{color}]Recommendation ({rec.kind}):[/{color}] {rec.message}")
    console.print()


def render_trends(summary: TrendSummary) -> None:
    """Print a trend summary as a rich table."""
    console.print()
    if not summary.weeks:
        console.print(f"No {summary.category} workouts in the selected window.")
        console.print()
        return

    table = Table(title=f"Weekly Trends ({summary.category})", box=box.ROUNDED)
    table.add_column("Week", style="cyan")
    table.add_column("Category")
    table.add_column("Sessions", justify="right")
    table.add_column("Distance (km)", justify="right")
    table.add_column("Duration (min)", justify="right")
    table.add_column("Tonnage", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Progression")

    for week in summary.weeks:
        rate = f"{week.avg_rate:.2f} {week.rate_unit}" if week.avg_rate is not None else "-"
        table.add_row(
            week.week,
            week.category.value,
            str(week.session_count),
            f"{week.total_distance_km:.2f}",
            f"{week.total_duration_minutes:.0f}",
            f"{week.total_tonnage:.0f}" if week.total_tonnage else "-",
            rate,
            Text(week.progression.value, style=get_progression_color(week.progression)),
        )
    console.print(table)

    if summary.progressing:
        console.print(f"[green]Progressing:[/green] {', '.join(summary.progressing)}")
    if summary.stalling:
        console.print(f"[yellow]Stalling:[/yellow] {', '.join(summary.stalling)}")
    console.print()


# =============================================================================
# Commands
# =============================================================================

async def cmd_readiness(args, settings: Settings) -> None:
    """Compute (and optionally store) the readiness record for a date."""
    snapshot = load_snapshot(args.data)
    repository = InMemoryMetricRepository.from_snapshot(snapshot)
    scorer = ReadinessScorer(repository, settings)
    target = args.date or date.today()

    if args.store:
        record = await scorer.compute_and_store(target)
        save_readiness(args.data, snapshot, list(repository.readiness.values()))
    else:
        record = await scorer.compute_readiness(target)

    if args.json:
        console.print_json(record.to_json())
    else:
        render_readiness(record)
        if args.store:
            console.print(f"[green]Stored readiness for {target} in {args.data}[/green]")


async def cmd_trends(args, settings: Settings) -> None:
    """Show weekly workout trends."""
    snapshot = load_snapshot(args.data)
    service = TrendService(InMemoryMetricRepository.from_snapshot(snapshot), settings)
    summary = await service.compute_trends(
        weeks=args.weeks,
        category=args.category,
        end_date=args.end,
    )
    if args.json:
        console.print_json(json.dumps(summary.to_dict()))
    else:
        render_trends(summary)


COMMANDS = {
    "readiness": cmd_readiness,
    "trends": cmd_trends,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="health-insights",
        description="Health Insights - readiness scores and workout trends",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  health-insights readiness --data snapshot.json
  health-insights readiness --data snapshot.json --date 2024-03-10 --store
  health-insights trends --data snapshot.json --weeks 6 --category cycle
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Readiness command
    readiness_p = subparsers.add_parser("readiness", help="Compute the daily readiness score")
    readiness_p.add_argument("--data", type=Path, required=True, help="JSON snapshot file")
    readiness_p.add_argument(
        "--date", type=parse_date_arg, help="Date to score (YYYY-MM-DD), defaults to today"
    )
    readiness_p.add_argument(
        "--store", action="store_true", help="Write the record back into the snapshot"
    )
    readiness_p.add_argument("--json", action="store_true", help="Print raw JSON")

    # Trends command
    trends_p = subparsers.add_parser("trends", help="Show weekly workout trends")
    trends_p.add_argument("--data", type=Path, required=True, help="JSON snapshot file")
    trends_p.add_argument(
        "--weeks", "-w", type=int, help="Number of weeks to analyze (default from settings)"
    )
    trends_p.add_argument(
        "--category", "-c", choices=TREND_VIEWS, default=COMBINED, help="Discipline to show"
    )
    trends_p.add_argument(
        "--end", type=parse_date_arg, help="Last day included (YYYY-MM-DD), defaults to today"
    )
    trends_p.add_argument("--json", action="store_true", help="Print raw JSON")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return 1

    try:
        settings = load_settings()
    except InvalidArgumentError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        asyncio.run(COMMANDS[args.command](args, settings))
    except HealthInsightsError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
