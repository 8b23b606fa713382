"""Last-request-wins list refresh"""
from typing import Any, List, Optional
import logging

from .api_client import WorkforceClient
from .result import Result

logger = logging.getLogger(__name__)


class LatestRequestGuard:
    """Hands out increasing tickets; only the newest ticket's response may be applied"""

    def __init__(self):
        self._latest = 0

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    def is_latest(self, ticket: int) -> bool:
        return ticket == self._latest


class EmployeeSearch:
    """State of one employee list widget"""

    def __init__(self, client: WorkforceClient, page_size: int = 20):
        self._client = client
        self._page_size = page_size
        self._guard = LatestRequestGuard()
        self.query: Optional[str] = None
        self.loading = False
        self.result: Optional[Result[Any]] = None
        # Queries whose results were shown, in order
        self.applied: List[Optional[str]] = []

    async def search(self, term: Optional[str]) -> bool:
        """Run a search; returns False when a newer search overtook this one"""
        ticket = self._guard.begin()
        self.query = term
        self.loading = True

        result = await self._client.search_employees(term, limit=self._page_size)
        if not self._guard.is_latest(ticket):
            logger.debug(f"Discarding stale results for {term!r}")
            return False

        self.result = result
        self.loading = False
        self.applied.append(term)
        return True

    async def retry(self) -> bool:
        return await self.search(self.query)

    @property
    def items(self) -> List[Any]:
        if self.result is None or not self.result.ok:
            return []
        return self.result.value["items"]
