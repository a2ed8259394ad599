"""Expansion of a first response into all of its result pages."""

import asyncio
import logging
import math
from typing import Awaitable, Callable, Optional

from reconcile.models import Query, Response

logger = logging.getLogger(__name__)

# The lookup APIs reject page indices beyond this, so larger result sets are truncated.
MAX_PAGES = 10


def page_numbers(total_results: int, page_size: int, max_pages: int = MAX_PAGES) -> list[int]:
    """Return the follow-up pages to request after the first one."""
    if page_size < 1:
        raise ValueError("Page size must be at least 1")
    page_total = math.ceil(total_results / page_size)
    return list(range(2, min(page_total, max_pages) + 1))


class Paginator:
    """Fetch every page of a search concurrently and return them in page order."""

    def __init__(
        self,
        request: Callable[[Query], Awaitable[Optional[Response]]],
        total_results: Callable[[Response], int],
        page_query: Callable[[Response, int], Query],
        page_size: int,
        max_pages: int = MAX_PAGES,
    ):
        self.request = request
        self.total_results = total_results
        self.page_query = page_query
        self.page_size = page_size
        self.max_pages = max_pages

    async def expand(self, response: Optional[Response]) -> Optional[list[Response]]:
        """Return the first response followed by one response per further page."""
        if response is None:
            return None

        total = self.total_results(response)
        pages = page_numbers(total, self.page_size, self.max_pages)
        if not pages:
            return [response]

        if math.ceil(total / self.page_size) > self.max_pages:
            logger.info(
                f"{total} results for {response.passthrough}, "
                f"only the first {self.max_pages} pages will be fetched"
            )

        queries = [self.page_query(response, page) for page in pages]
        tasks = [asyncio.ensure_future(self.request(query)) for query in queries]
        try:
            page_responses = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        received = [page for page in page_responses if page is not None]
        received.sort(key=lambda page: page.page)
        return [response] + received
