"""Reconcile company names to UK company numbers."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from reconcile.errors import EntryValidationError
from reconcile.models import Candidate, Column, Entry, Parameter, Query, ReconcilerDetails, Response
from reconcile.pipeline import build_predicates, normalise_company_name
from .base import split_credentials
from .companies_house import CompaniesHouseReconciler


class CompanyNumbersParameters(BaseModel):
    api_key: list[str] = Field(default_factory=list)
    company_name_field: str
    precise_match: bool = False

    @field_validator("api_key", mode="before")
    @classmethod
    def split_keys(cls, value: Any) -> list[str]:
        return split_credentials(value)


class UKCompanyNumbersReconciler(CompaniesHouseReconciler):
    """Look companies up in the Companies House company search."""

    name = "uk-company-names-to-uk-company-numbers"
    parameters_model = CompanyNumbersParameters
    subject_key = "companyName"
    subject_label = "company"

    details = ReconcilerDetails(
        parameters=[
            Parameter(name="api_key", description="A Companies House API key, or several separated by commas."),
            Parameter(name="company_name_field", description="Company name column."),
            Parameter(
                name="precise_match",
                description="Match company name precisely. Ignores punctuation and 'Limited' versus 'Ltd'.",
                required=False,
            ),
        ],
        columns=[
            Column(name="companyNumber"),
            Column(name="companyName"),
            Column(name="companyStatus"),
            Column(name="companyAddress"),
        ],
    )

    def predicates(self) -> list:
        return build_predicates(
            name_field=self.parameters.company_name_field,
            precise_match=self.parameters.precise_match,
            normalise=normalise_company_name,
        )

    def locate(self, entry: Entry) -> Query:
        company_name = entry.value(self.parameters.company_name_field)
        if not company_name:
            raise EntryValidationError(f"No company name found on line {entry.line}")
        return self.search_query(f"{self.BASE_URL}/search/companies", company_name)

    def candidates(self, response: Response) -> list[Candidate]:
        return [
            Candidate(
                identifier=item.get("company_number"),
                name=item.get("title"),
                address=item.get("address_snippet"),
                raw=item,
            )
            for item in self.items(response)
        ]

    def to_row(self, candidate: Candidate) -> dict[str, Any]:
        return {
            "companyNumber": candidate.identifier,
            "companyName": candidate.name,
            "companyStatus": candidate.raw.get("company_status"),
            "companyAddress": candidate.address,
        }
