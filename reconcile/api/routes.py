"""API routes for the row reconciler."""

import logging
from typing import Any, AsyncIterator

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, ValidationError

from reconcile.errors import InvalidCredential, RateLimitExceeded
from reconcile.models import Alert, Entry, ReconcilerDetails
from reconcile.pipeline import run_batch
from reconcile.config import settings
from reconcile.reconcilers import RECONCILERS, Reconciler, get_reconciler
from reconcile.transport import build_client

logger = logging.getLogger(__name__)

router = APIRouter()


class ReconcilerSummary(BaseModel):
    """A reconciler and its self-description."""
    name: str
    details: ReconcilerDetails


class ReconcileRequest(BaseModel):
    """Request body for reconciling a batch of entries."""
    parameters: dict[str, Any] = Field(default_factory=dict)
    entries: list[Entry]
    concurrency: int = Field(default_factory=lambda: settings.entry_concurrency, ge=1, le=100)


class ReconcileResponse(BaseModel):
    """Rows and diagnostics produced by a batch."""
    reconciler: str
    rows: list[list[dict[str, Any]]]
    alerts: list[Alert]


def find_reconciler(name: str) -> type[Reconciler]:
    """Look a reconciler up, answering 404 for unknown names."""
    try:
        return get_reconciler(name)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0])


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Provide an HTTP client for the duration of a request."""
    async with build_client() as client:
        yield client


@router.get("/reconcilers", response_model=list[ReconcilerSummary])
async def list_reconcilers():
    """List the available reconcilers."""
    return [
        ReconcilerSummary(name=name, details=reconciler.details)
        for name, reconciler in RECONCILERS.items()
    ]


@router.get("/reconcilers/{name}", response_model=ReconcilerSummary)
async def describe_reconciler(name: str):
    """Describe one reconciler's parameters and output columns."""
    reconciler = find_reconciler(name)
    return ReconcilerSummary(name=name, details=reconciler.details)


@router.post("/reconcilers/{name}", response_model=ReconcileResponse)
async def reconcile(
    name: str,
    request: ReconcileRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Reconcile a batch of entries, returning one list of rows per entry."""
    reconciler_class = find_reconciler(name)

    alerts: list[Alert] = []
    try:
        reconciler = reconciler_class(request.parameters, client, alert=alerts.append)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        rows = await run_batch(reconciler, request.entries, request.concurrency)
    except RateLimitExceeded as e:
        raise HTTPException(status_code=429, detail=str(e))
    except InvalidCredential as e:
        raise HTTPException(status_code=401, detail=str(e))

    logger.info(f"Reconciled {len(request.entries)} entries with {name}, {len(alerts)} alerts")
    return ReconcileResponse(reconciler=name, rows=rows, alerts=alerts)
