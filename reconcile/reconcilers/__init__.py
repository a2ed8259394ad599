"""Reconciler modules, one per lookup."""

from .base import Reconciler
from .uk_company_officer_ids import UKCompanyOfficerIdsReconciler
from .uk_company_numbers import UKCompanyNumbersReconciler
from .company_officer_names import CompanyOfficerNamesReconciler

RECONCILERS: dict[str, type[Reconciler]] = {
    reconciler.name: reconciler
    for reconciler in (
        UKCompanyOfficerIdsReconciler,
        UKCompanyNumbersReconciler,
        CompanyOfficerNamesReconciler,
    )
}


def get_reconciler(name: str) -> type[Reconciler]:
    """Look a reconciler class up by name."""
    try:
        return RECONCILERS[name]
    except KeyError:
        raise KeyError(f"Unknown reconciler: {name}") from None


__all__ = [
    "Reconciler",
    "UKCompanyOfficerIdsReconciler",
    "UKCompanyNumbersReconciler",
    "CompanyOfficerNamesReconciler",
    "RECONCILERS",
    "get_reconciler",
]
