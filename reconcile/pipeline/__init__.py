"""The per-entry enrichment pipeline."""

from .paginator import MAX_PAGES, Paginator, page_numbers
from .matcher import (
    Matcher,
    NoMatchPolicy,
    build_predicates,
    conform,
    normalise_name,
    normalise_company_name,
)
from .runner import log_alert, run_batch, run_entry

__all__ = [
    "MAX_PAGES",
    "Paginator",
    "page_numbers",
    "Matcher",
    "NoMatchPolicy",
    "build_predicates",
    "conform",
    "normalise_name",
    "normalise_company_name",
    "log_alert",
    "run_batch",
    "run_entry",
]
