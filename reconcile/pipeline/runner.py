"""Per-entry orchestration and batch execution."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from reconcile.config import settings
from reconcile.errors import EntryError, EntryValidationError, FatalReconcileError
from reconcile.models import Alert, Entry

if TYPE_CHECKING:
    from reconcile.reconcilers.base import Reconciler

logger = logging.getLogger(__name__)
alert_logger = logging.getLogger("reconcile.alerts")

ALERT_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


def log_alert(alert: Alert):
    """Default diagnostic sink: write alerts to the log."""
    alert_logger.log(ALERT_LEVELS.get(alert.importance, logging.ERROR), alert.message)


async def run_entry(reconciler: "Reconciler", entry: Entry) -> list[dict[str, Any]]:
    """Locate, request, paginate and parse a single entry."""
    try:
        query = reconciler.locate(entry)
    except EntryValidationError as e:
        reconciler.alert(Alert(message=str(e), importance="error"))
        return []

    response = await reconciler.requestor.request(query)
    responses = await reconciler.paginator.expand(response)
    if not responses:
        return []

    rows = [row for page in responses for row in reconciler.parse(page, entry)]
    return reconciler.matcher.settle(rows, reconciler.not_found(entry))


async def run_batch(
    reconciler: "Reconciler",
    entries: Iterable[Entry],
    concurrency: Optional[int] = None,
) -> list[list[dict[str, Any]]]:
    """Reconcile many entries, returning each entry's rows in input order.

    Per-entry errors are reported as alerts and yield no rows. Fatal errors
    cancel the remaining entries and propagate.
    """
    semaphore = asyncio.Semaphore(concurrency or settings.entry_concurrency)

    async def run_one(entry: Entry) -> list[dict[str, Any]]:
        async with semaphore:
            try:
                return await run_entry(reconciler, entry)
            except EntryError as e:
                reconciler.alert(Alert(message=f"{e} (line {entry.line})", importance="error"))
                return []

    tasks = [asyncio.ensure_future(run_one(entry)) for entry in entries]
    try:
        return list(await asyncio.gather(*tasks))
    except FatalReconcileError as e:
        logger.error(f"Aborting batch: {e}")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
