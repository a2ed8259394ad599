"""CLI entry point for the row reconciler."""

import argparse
import asyncio
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from reconcile.config import settings
from reconcile.errors import FatalReconcileError
from reconcile.models import Alert, Entry
from reconcile.pipeline import log_alert, run_batch
from reconcile.reconcilers import RECONCILERS, Reconciler, get_reconciler
from reconcile.transport import build_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


# Key DictReader stores cells beyond the header under
EXTRA_CELLS = "__extra__"


def read_entries(input_path: Path) -> list[Entry]:
    """Read a CSV file into entries, numbering lines as they appear in the file."""
    entries = []
    with open(input_path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f, restkey=EXTRA_CELLS)
        for row in reader:
            if row.pop(EXTRA_CELLS, None):
                logger.warning(f"Ignoring cells beyond the header on line {reader.line_num}")
            entries.append(Entry(line=reader.line_num, data=dict(row)))
    return entries


def merge_rows(
    entries: list[Entry],
    results: list[list[dict[str, Any]]],
    columns: list[str],
) -> list[dict[str, Any]]:
    """Combine each entry's input columns with its output rows."""
    merged = []
    for entry, rows in zip(entries, results):
        if not rows:
            merged.append({**entry.data, **{column: None for column in columns}})
        for row in rows:
            merged.append({**entry.data, **row})
    return merged


def export_to_json(rows: list[dict[str, Any]], output_path: Path):
    """Export merged rows to a JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2)


def export_to_csv(rows: list[dict[str, Any]], output_path: Path):
    """Export merged rows to a CSV file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow({key: "" if value is None else value for key, value in row.items()})


def parse_parameters(pairs: list[str], parameters_path: Optional[Path] = None) -> dict[str, Any]:
    """Build reconciler parameters from a JSON file and key=value pairs."""
    parameters: dict[str, Any] = {}
    if parameters_path:
        with open(parameters_path, "r") as f:
            parameters.update(json.load(f))
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Parameter must look like key=value: {pair}")
        key, value = pair.split("=", 1)
        parameters[key.strip()] = value.strip()
    return parameters


async def run_reconciliation(
    reconciler_class: type[Reconciler],
    parameters: dict[str, Any],
    entries: list[Entry],
    concurrency: int,
) -> tuple[list[list[dict[str, Any]]], list[Alert]]:
    """Run a reconciler over every entry, collecting alerts as they are logged."""
    alerts: list[Alert] = []

    def alert(item: Alert):
        log_alert(item)
        alerts.append(item)

    async with build_client() as client:
        reconciler = reconciler_class(parameters, client, alert=alert)
        results = await run_batch(reconciler, entries, concurrency)
    return results, alerts


def print_reconcilers():
    """Print the available reconcilers with their parameters and columns."""
    for name, reconciler in RECONCILERS.items():
        print(f"\n{name}")
        print("  Parameters:")
        for parameter in reconciler.details.parameters:
            optional = "" if parameter.required else " [optional]"
            print(f"    {parameter.name}: {parameter.description}{optional}")
        print(f"  Columns: {', '.join(reconciler.details.column_names)}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Row Reconciler - enrich CSV rows from external lookup APIs"
    )
    parser.add_argument(
        "reconciler",
        nargs="?",
        help="Name of the reconciler to run (see --list)",
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        help="Input CSV file",
    )
    parser.add_argument(
        "--parameter", "-p",
        action="append",
        default=[],
        help="Reconciler parameter as key=value, may be repeated",
    )
    parser.add_argument(
        "--parameters",
        type=Path,
        help="JSON file of reconciler parameters",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("reconciled.json"),
        help="Output path, .json or .csv (default: reconciled.json)",
    )
    parser.add_argument(
        "--concurrency", "-c",
        type=int,
        default=settings.entry_concurrency,
        help=f"Entries processed at once (default: {settings.entry_concurrency})",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available reconcilers and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.list:
        print_reconcilers()
        return

    if not args.reconciler or not args.input:
        parser.error("a reconciler name and an input file are required")

    try:
        reconciler_class = get_reconciler(args.reconciler)
    except KeyError as e:
        logger.error(e.args[0])
        logger.info("Use --list to see the available reconcilers")
        sys.exit(1)

    if not args.input.exists():
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    try:
        parameters = parse_parameters(args.parameter, args.parameters)
        entries = read_entries(args.input)
        logger.info(f"Loaded {len(entries)} entries from {args.input}")
    except (ValueError, OSError) as e:
        logger.error(f"Failed to load input: {e}")
        sys.exit(1)

    try:
        results, alerts = asyncio.run(run_reconciliation(
            reconciler_class,
            parameters,
            entries,
            args.concurrency,
        ))
    except ValueError as e:
        logger.error(f"Invalid parameters for {args.reconciler}: {e}")
        sys.exit(1)
    except FatalReconcileError as e:
        logger.error(f"Reconciliation aborted: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)

    merged = merge_rows(entries, results, reconciler_class.details.column_names)
    if args.output.suffix.lower() == ".csv":
        export_to_csv(merged, args.output)
    else:
        export_to_json(merged, args.output)

    matched = sum(1 for rows in results if rows)
    logger.info(f"Matched {matched}/{len(entries)} entries, {len(alerts)} alerts")
    logger.info(f"Results exported to {args.output}")


if __name__ == "__main__":
    main()
