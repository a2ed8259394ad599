"""Request execution with response classification and a concurrency ceiling."""

import asyncio
import logging
from typing import Callable, Optional

import httpx

from reconcile.errors import InvalidCredential, RateLimitExceeded, RemoteClientError
from reconcile.models import Alert, Query, Response

logger = logging.getLogger(__name__)


class Requestor:
    """Perform API calls for one reconciler instance.

    All calls share one semaphore, so the number of requests in flight never
    exceeds ``limit`` however many entries are processed at once. Nothing is
    retried: rate limits and bad credentials raise, other failures are
    reported through ``alert`` and the call yields no response.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        limit: int,
        alert: Callable[[Alert], None],
        describe: Callable[[Query], str],
        credential_param: Optional[str] = None,
    ):
        if limit < 1:
            raise ValueError("Request limit must be at least 1")
        self.client = client
        self.limit = limit
        self.alert = alert
        self.describe = describe
        self.credential_param = credential_param
        self._semaphore = asyncio.Semaphore(limit)

    async def request(self, query: Optional[Query]) -> Optional[Response]:
        """Send a query, turning per-call failures into alerts."""
        if query is None:
            return None
        try:
            return await self.send(query)
        except RemoteClientError as e:
            self.alert(Alert(message=str(e), importance="error"))
            return None

    async def send(self, query: Query) -> Response:
        """Send a query and classify the outcome."""
        auth = (query.auth.username, query.auth.password) if query.auth else None

        async with self._semaphore:
            logger.debug(f"GET {query.url} {self._loggable(query.params)}")
            try:
                response = await self.client.get(query.url, params=query.params, auth=auth)
            except httpx.TimeoutException:
                raise RemoteClientError(f"Timed out for {self.describe(query)}")
            except httpx.RequestError as e:
                raise RemoteClientError(f"Request failed for {self.describe(query)}: {e}")

        status = response.status_code
        if status == 429:
            raise RateLimitExceeded()
        if status == 401:
            raise InvalidCredential(self.credential(query))
        if status >= 400:
            raise RemoteClientError(
                f"Received code {status} for {self.describe(query)}",
                status=status,
            )

        try:
            data = response.json()
        except ValueError:
            raise RemoteClientError(
                f"Received invalid JSON for {self.describe(query)}",
                status=status,
            )

        return Response(
            status=status,
            data=data,
            url=query.url,
            auth=query.auth,
            passthrough=query.passthrough,
        )

    def credential(self, query: Query) -> Optional[str]:
        """Name the credential a query was sent with."""
        if query.auth:
            return query.auth.username
        if self.credential_param:
            return query.params.get(self.credential_param)
        return None

    def _loggable(self, params: dict) -> dict:
        if self.credential_param and self.credential_param in params:
            return {**params, self.credential_param: "***"}
        return params
