"""Data models for the row reconciler."""

from .entry import (
    Entry,
    Alert,
    Auth,
    Query,
    Response,
)
from .candidate import Candidate
from .details import (
    Parameter,
    Column,
    ReconcilerDetails,
)

__all__ = [
    "Entry",
    "Alert",
    "Auth",
    "Query",
    "Response",
    "Candidate",
    "Parameter",
    "Column",
    "ReconcilerDetails",
]
