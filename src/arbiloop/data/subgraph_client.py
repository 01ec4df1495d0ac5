"""Paginated pair retrieval from a Uniswap V2 style subgraph."""
import asyncio
from typing import Any, Dict, List, Optional
import aiohttp
from loguru import logger
from arbiloop.config import DatasetConfig
from arbiloop.infrastructure.error_handling import SubgraphError, async_retry_with_backoff

PAIRS_QUERY = """
query Pairs($first: Int!, $skip: Int!) {
  pairs(first: $first, skip: $skip, orderBy: reserveUSD, orderDirection: desc) {
    id
    token0 {
      id
      symbol
      name
    }
    token1 {
      id
      symbol
      name
    }
    reserve0
    reserve1
    reserveUSD
    token0Price
    token1Price
  }
}
"""

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class SubgraphClient:
    """Fetches pair records page by page, highest TVL first."""

    def __init__(
        self,
        config: DatasetConfig | None = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or DatasetConfig()
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SubgraphClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.cleanup()

    async def initialize(self):
        """Initialize async resources."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout)
            )
            self._owns_session = True

    async def cleanup(self):
        """Cleanup async resources."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    @async_retry_with_backoff(max_retries=3, exceptions=TRANSPORT_ERRORS)
    async def fetch_page(self, first: int, skip: int) -> List[Dict[str, Any]]:
        """One page of pairs; transport errors are retried with backoff."""
        await self.initialize()
        payload = {"query": PAIRS_QUERY, "variables": {"first": first, "skip": skip}}

        async with self.session.post(self.config.resolved_subgraph_url, json=payload) as response:
            response.raise_for_status()
            body = await response.json()

        if body.get("errors"):
            raise SubgraphError(f"Subgraph returned errors: {body['errors']}")
        pairs = (body.get("data") or {}).get("pairs")
        if pairs is None:
            raise SubgraphError("Subgraph response has no pairs field")
        return pairs

    async def fetch_all(self, max_pages: Optional[int] = None) -> List[Dict[str, Any]]:
        """Every pair, stopping at the first page shorter than the batch size."""
        batch_size = self.config.batch_size
        all_pairs: List[Dict[str, Any]] = []
        skip = 0
        pages = 0

        while True:
            logger.info(f"Fetching pairs {skip} to {skip + batch_size}...")
            try:
                pairs = await self.fetch_page(batch_size, skip)
            except TRANSPORT_ERRORS as e:
                raise SubgraphError(f"Failed to fetch pairs at offset {skip}: {e}") from e

            all_pairs.extend(pairs)
            skip += batch_size
            pages += 1

            if len(pairs) < batch_size:
                break
            if max_pages is not None and pages >= max_pages:
                break

        logger.info(f"Retrieved {len(all_pairs)} pairs")
        return all_pairs
