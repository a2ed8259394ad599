"""Reconcile individual names to UK company officer IDs."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from reconcile.errors import EntryValidationError
from reconcile.models import Candidate, Column, Entry, Parameter, Query, ReconcilerDetails, Response
from reconcile.pipeline import build_predicates
from .base import split_credentials
from .companies_house import CompaniesHouseReconciler


class OfficerIdsParameters(BaseModel):
    """Options for the officer ID reconciler."""

    api_key: list[str] = Field(default_factory=list, description="Companies House API keys")
    individual_name_field: str = Field(description="Individual name column")
    date_of_birth_field: Optional[str] = Field(default=None, description="ISO 8601 date of birth column")
    non_middle_name_match: bool = False
    precise_match: bool = False

    @field_validator("api_key", mode="before")
    @classmethod
    def split_keys(cls, value: Any) -> list[str]:
        return split_credentials(value)


class UKCompanyOfficerIdsReconciler(CompaniesHouseReconciler):
    """Look individuals up in the Companies House officer search."""

    name = "individual-names-to-uk-company-officer-ids"
    parameters_model = OfficerIdsParameters
    subject_key = "individualName"
    subject_label = "individual"

    details = ReconcilerDetails(
        parameters=[
            Parameter(name="api_key", description="A Companies House API key, or several separated by commas."),
            Parameter(name="individual_name_field", description="Individual name column."),
            Parameter(
                name="date_of_birth_field",
                description="Date of birth column, in ISO 8601 format. If given will use the month and year to filter results.",
                required=False,
            ),
            Parameter(
                name="non_middle_name_match",
                description="Match individual name only based on the first and last names. Ignores non-alphabetical differences and titles.",
                required=False,
            ),
            Parameter(
                name="precise_match",
                description="Match individual name precisely. Ignores non-alphabetical differences and titles.",
                required=False,
            ),
        ],
        columns=[
            Column(name="officerID"),
            Column(name="officerName"),
            Column(name="officerDateOfBirth"),
            Column(name="officerAddress"),
        ],
    )

    def predicates(self) -> list:
        return build_predicates(
            name_field=self.parameters.individual_name_field,
            date_of_birth_field=self.parameters.date_of_birth_field,
            precise_match=self.parameters.precise_match,
            non_middle_name_match=self.parameters.non_middle_name_match,
        )

    def locate(self, entry: Entry) -> Query:
        individual_name = entry.value(self.parameters.individual_name_field)
        if not individual_name:
            raise EntryValidationError(f"No individual name found on line {entry.line}")
        return self.search_query(f"{self.BASE_URL}/search/officers", individual_name)

    def candidates(self, response: Response) -> list[Candidate]:
        candidates = []
        for item in self.items(response):
            date_of_birth = item.get("date_of_birth") or {}
            candidates.append(Candidate(
                identifier=self._officer_id(item),
                name=item.get("title"),
                birth_year=date_of_birth.get("year"),
                birth_month=date_of_birth.get("month"),
                birth_day=date_of_birth.get("day"),
                address=item.get("address_snippet"),
                raw=item,
            ))
        return candidates

    def to_row(self, candidate: Candidate) -> dict[str, Any]:
        return {
            "officerID": candidate.identifier,
            "officerName": candidate.name,
            "officerDateOfBirth": candidate.date_of_birth,
            "officerAddress": candidate.address,
        }

    def not_found(self, entry: Entry) -> str:
        return f"Individual not found: {entry.value(self.parameters.individual_name_field)}"

    @staticmethod
    def _officer_id(item: dict) -> Optional[str]:
        """Officer links look like /officers/{id}/appointments."""
        link = (item.get("links") or {}).get("self")
        if not link:
            return None
        parts = link.split("/")
        return parts[2] if len(parts) > 2 and parts[2] else None
