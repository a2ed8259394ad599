"""Shared behaviour for the UK Companies House search API."""

from typing import Optional

from reconcile.models import Auth, Query, Response
from .base import Reconciler, split_credentials


class CompaniesHouseReconciler(Reconciler):
    """Search endpoints of the Companies House API, authenticated by API key."""

    BASE_URL = "https://api.company-information.service.gov.uk"

    page_size = 100
    # Passthrough key holding the searched-for term
    subject_key: str = "subject"
    subject_label: str = "subject"

    def credentials(self) -> list[Optional[str]]:
        keys = self.parameters.api_key or split_credentials(self.settings.companies_house_api_key)
        if not keys:
            raise ValueError("A Companies House API key is required")
        return keys

    def auth(self) -> Auth:
        """Basic auth with the next API key and a blank password."""
        return Auth(username=self.rotator.next(), password="")

    def search_query(self, url: str, term: str, page: int = 1) -> Query:
        params = {
            "q": term.strip(),
            "items_per_page": self.page_size,
        }
        if page > 1:
            params["start_index"] = (page - 1) * self.page_size
        return Query(
            url=url,
            auth=self.auth(),
            params=params,
            passthrough={self.subject_key: term, "page": page},
        )

    def describe(self, query: Query) -> str:
        subject = query.passthrough.get(self.subject_key)
        page = query.passthrough.get("page")
        return f"{self.subject_label} {subject} on page {page}"

    def total_results(self, response: Response) -> int:
        return (response.data or {}).get("total_results") or 0

    def page_query(self, response: Response, page: int) -> Query:
        return self.search_query(response.url, response.passthrough[self.subject_key], page)

    def items(self, response: Response) -> list[dict]:
        return (response.data or {}).get("items") or []
