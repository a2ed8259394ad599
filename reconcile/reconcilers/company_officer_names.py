"""Reconcile individual names to company officer names using OpenCorporates."""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from reconcile.errors import EntryValidationError
from reconcile.models import Candidate, Column, Entry, Parameter, Query, ReconcilerDetails, Response
from reconcile.pipeline import NoMatchPolicy, build_predicates
from .base import Reconciler, split_credentials

logger = logging.getLogger(__name__)


class OfficerNamesParameters(BaseModel):
    """Options for the OpenCorporates officer reconciler."""

    api_token: list[str] = Field(default_factory=list, description="OpenCorporates API tokens")
    individual_name_field: str = Field(description="Individual name column")
    individual_jurisdiction_field: Optional[str] = Field(
        default=None,
        description="Jurisdiction code column",
    )
    jurisdiction: Optional[str] = Field(
        default=None,
        description="Jurisdiction code applied to every entry, overriding the column",
    )
    date_of_birth_field: Optional[str] = None
    non_middle_name_match: bool = False
    precise_match: bool = False

    @field_validator("api_token", mode="before")
    @classmethod
    def split_tokens(cls, value: Any) -> list[str]:
        return split_credentials(value)


class CompanyOfficerNamesReconciler(Reconciler):
    """Search OpenCorporates for officers, failing entries that match nobody."""

    name = "individual-names-to-company-officer-names"
    parameters_model = OfficerNamesParameters
    BASE_URL = "https://api.opencorporates.com/v0.4.5"

    page_size = 100
    credential_param = "api_token"
    no_match_policy = NoMatchPolicy.RAISE

    details = ReconcilerDetails(
        parameters=[
            Parameter(
                name="api_token",
                description="An OpenCorporates API token, or several separated by commas.",
                required=False,
            ),
            Parameter(name="individual_name_field", description="Individual name column."),
            Parameter(
                name="individual_jurisdiction_field",
                description="Jurisdiction code column, such as 'gb'.",
                required=False,
            ),
            Parameter(
                name="jurisdiction",
                description="Jurisdiction code to search within for every row.",
                required=False,
            ),
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
            Column(name="officerName"),
            Column(name="officerPosition"),
            Column(name="companyName"),
            Column(name="companyNumber"),
        ],
    )

    def credentials(self) -> list[Optional[str]]:
        tokens = self.parameters.api_token or split_credentials(self.settings.opencorporates_api_token)
        if not tokens:
            logger.info("No OpenCorporates API token given, using the unauthenticated rate limit")
            return [None]
        return tokens

    def predicates(self) -> list:
        return build_predicates(
            name_field=self.parameters.individual_name_field,
            date_of_birth_field=self.parameters.date_of_birth_field,
            precise_match=self.parameters.precise_match,
            non_middle_name_match=self.parameters.non_middle_name_match,
        )

    def jurisdiction(self, entry: Entry) -> Optional[str]:
        if self.parameters.jurisdiction:
            return self.parameters.jurisdiction.strip()
        return entry.value(self.parameters.individual_jurisdiction_field)

    def locate(self, entry: Entry) -> Query:
        individual_name = entry.value(self.parameters.individual_name_field)
        if not individual_name:
            raise EntryValidationError(f"No individual name found on line {entry.line}")
        return self.search_query(individual_name, self.jurisdiction(entry))

    def search_query(self, individual_name: str, jurisdiction: Optional[str], page: int = 1) -> Query:
        params = {
            "q": individual_name.strip(),
            "per_page": self.page_size,
        }
        if jurisdiction:
            params["jurisdiction_code"] = jurisdiction
        if page > 1:
            params["page"] = page
        token = self.rotator.next()
        if token:
            params[self.credential_param] = token
        return Query(
            url=f"{self.BASE_URL}/officers/search",
            params=params,
            passthrough={
                "individualName": individual_name,
                "individualJurisdiction": jurisdiction,
                "page": page,
            },
        )

    def describe(self, query: Query) -> str:
        return f"individual {self._subject(query.passthrough)} on page {query.passthrough.get('page')}"

    def total_results(self, response: Response) -> int:
        results = (response.data or {}).get("results") or {}
        return results.get("total_count") or 0

    def page_query(self, response: Response, page: int) -> Query:
        return self.search_query(
            response.passthrough["individualName"],
            response.passthrough.get("individualJurisdiction"),
            page,
        )

    def candidates(self, response: Response) -> list[Candidate]:
        results = (response.data or {}).get("results") or {}
        candidates = []
        for wrapper in results.get("officers") or []:
            officer = wrapper.get("officer") or {}
            year, month, day = self._date_parts(officer.get("date_of_birth"))
            candidates.append(Candidate(
                identifier=str(officer["id"]) if officer.get("id") is not None else None,
                name=officer.get("name"),
                birth_year=year,
                birth_month=month,
                birth_day=day,
                address=officer.get("address"),
                position=officer.get("position"),
                raw=officer,
            ))
        return candidates

    def to_row(self, candidate: Candidate) -> dict[str, Any]:
        company = candidate.raw.get("company") or {}
        return {
            "officerName": candidate.name,
            "officerPosition": candidate.position,
            "companyName": company.get("name"),
            "companyNumber": company.get("company_number"),
        }

    def not_found(self, entry: Entry) -> str:
        passthrough = {
            "individualName": entry.value(self.parameters.individual_name_field),
            "individualJurisdiction": self.jurisdiction(entry),
        }
        return f"Individual not found: {self._subject(passthrough)}"

    @staticmethod
    def _subject(passthrough: dict) -> str:
        jurisdiction = passthrough.get("individualJurisdiction")
        name = passthrough.get("individualName")
        return f"{name} ({jurisdiction})" if jurisdiction else f"{name}"

    @staticmethod
    def _date_parts(value: Optional[str]) -> tuple[Optional[int], Optional[int], Optional[int]]:
        """Split a possibly partial ISO 8601 date into year, month and day."""
        parts: list[Optional[int]] = []
        for part in (value or "").split("-")[:3]:
            parts.append(int(part) if part.isdigit() else None)
        parts += [None] * (3 - len(parts))
        return parts[0], parts[1], parts[2]
