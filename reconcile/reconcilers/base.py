"""Abstract base class for reconcilers."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

import httpx
from pydantic import BaseModel

from reconcile.config import Settings, settings as default_settings
from reconcile.models import Alert, Candidate, Entry, Query, ReconcilerDetails, Response
from reconcile.pipeline import (
    MAX_PAGES,
    Matcher,
    NoMatchPolicy,
    Paginator,
    conform,
    log_alert,
    run_entry,
)
from reconcile.transport import CredentialRotator, Requestor


def split_credentials(value: Any) -> list[str]:
    """Accept one credential, a comma-separated string or a list of them."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValueError("Credentials must be a string or a list of strings")
    credentials = []
    for credential in value:
        if not isinstance(credential, str):
            raise ValueError("Credentials must be a string or a list of strings")
        if credential.strip():
            credentials.append(credential.strip())
    return credentials


class Reconciler(ABC):
    """Enrich entries by looking them up in one external API.

    Subclasses describe how to build a query from an entry, how to read
    candidates from a response and how to map a candidate to an output row.
    Requesting, pagination, matching and the no-match policy are shared.
    """

    name: str = "base"
    details: ReconcilerDetails = ReconcilerDetails()
    parameters_model: type[BaseModel] = BaseModel

    page_size: int = 100
    max_pages: int = MAX_PAGES
    credential_param: Optional[str] = None
    no_match_policy: NoMatchPolicy = NoMatchPolicy.EMPTY

    def __init__(
        self,
        parameters: Union[BaseModel, dict[str, Any]],
        client: httpx.AsyncClient,
        alert: Callable[[Alert], None] = log_alert,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        if isinstance(parameters, self.parameters_model):
            self.parameters = parameters
        else:
            self.parameters = self.parameters_model.model_validate(parameters)
        self.alert = alert

        self.rotator = CredentialRotator(self.credentials())
        self.requestor = Requestor(
            client,
            limit=len(self.rotator) * self.settings.request_fanout_factor,
            alert=alert,
            describe=self.describe,
            credential_param=self.credential_param,
        )
        self.paginator = Paginator(
            request=self.requestor.request,
            total_results=self.total_results,
            page_query=self.page_query,
            page_size=self.page_size,
            max_pages=self.max_pages,
        )
        self.matcher = Matcher(self.predicates(), on_no_match=self.no_match_policy)

    @abstractmethod
    def credentials(self) -> list[Optional[str]]:
        """Return the credentials to rotate through."""
        pass

    @abstractmethod
    def locate(self, entry: Entry) -> Query:
        """
        Build the first-page query for an entry.

        Raises:
            EntryValidationError: the entry lacks the identifying field
        """
        pass

    @abstractmethod
    def describe(self, query: Query) -> str:
        """Describe the subject and page of a query for diagnostics."""
        pass

    @abstractmethod
    def candidates(self, response: Response) -> list[Candidate]:
        """Read the candidate records from a response."""
        pass

    @abstractmethod
    def to_row(self, candidate: Candidate) -> dict[str, Any]:
        """Map a matched candidate to an output row."""
        pass

    def predicates(self) -> list:
        """Build the match predicates from the parameters."""
        return []

    def total_results(self, response: Response) -> int:
        """Total number of results the search reports, across all pages."""
        return 0

    def page_query(self, response: Response, page: int) -> Query:
        """Build the query for a later page of the search behind a response."""
        raise NotImplementedError(f"{self.name} does not paginate")

    def not_found(self, entry: Entry) -> str:
        """Message used when an entry matches nothing."""
        return f"No match found on line {entry.line}"

    def parse(self, response: Optional[Response], entry: Entry) -> list[dict[str, Any]]:
        """Match the candidates in one response and map them to output rows."""
        if response is None:
            return []
        matched = self.matcher.filter(self.candidates(response), entry)
        columns = self.details.column_names
        return [conform(self.to_row(candidate), columns) for candidate in matched]

    async def run(self, entry: Entry) -> list[dict[str, Any]]:
        """Reconcile a single entry."""
        return await run_entry(self, entry)
