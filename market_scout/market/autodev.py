"""auto.dev listings API client (retrieval collaborator)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field

from market_scout.config.settings import AutoDevConfig, get_settings
from market_scout.market.exceptions import RetrievalError

logger = structlog.get_logger()

MAX_PAGE_LIMIT = 100


class AutoDevSearchParams(BaseModel):
    """Query for ``GET /listings``. Ranges use the provider's ``"lo-hi"`` form."""

    year: str | None = Field(default=None, description='e.g. "2003-2004"')
    make: str | None = None
    model: str | None = None
    trim: str | None = None
    transmission: str | None = None
    exterior_color: str | None = None
    price: str | None = Field(default=None, description='e.g. "0-30000"')
    miles: str | None = Field(default=None, description='e.g. "0-80000"')
    state: str | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=MAX_PAGE_LIMIT)
    sort: str | None = None

    def to_query(self) -> dict[str, str]:
        """Provider query-string parameters."""
        query: dict[str, str] = {"page": str(self.page), "limit": str(self.limit)}
        mapping = {
            "sort": self.sort,
            "vehicle.year": self.year,
            "vehicle.make": self.make,
            "vehicle.model": self.model,
            "vehicle.trim": self.trim,
            "vehicle.transmission": self.transmission,
            "vehicle.exteriorColor": self.exterior_color,
            "retailListing.price": self.price,
            "retailListing.miles": self.miles,
            "retailListing.state": self.state,
        }
        query.update({key: value for key, value in mapping.items() if value})
        return query


class AutoDevClient:
    """Thin async client for the auto.dev listings endpoint.

    Requests are never retried; callers apply their own turn timeout.
    """

    def __init__(
        self,
        config: AutoDevConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: API configuration. If None, uses settings.autodev.
            client: Pre-built HTTP client (mainly for tests).
        """
        self._config = config or get_settings().autodev
        self._client = client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
        )

    async def __aenter__(self) -> "AutoDevClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def search_listings(self, params: AutoDevSearchParams) -> list[dict[str, Any]]:
        """Fetch one page of raw listings.

        Raises:
            RetrievalError: Missing API key, transport failure, non-2xx status
                or an unexpected response body.
        """
        api_key = self._config.api_key.get_secret_value()
        if not api_key:
            raise RetrievalError("Missing AUTODEV_API_KEY")

        query = params.to_query()
        logger.debug("Searching auto.dev listings", query=query)

        try:
            response = await self._client.get(
                "/listings",
                params=query,
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as e:
            raise RetrievalError(f"auto.dev request failed: {e}") from e

        if response.status_code >= 400:
            raise RetrievalError(f"auto.dev error {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError as e:
            raise RetrievalError("auto.dev returned a non-JSON body") from e

        data = body.get("data") if isinstance(body, dict) else None
        if data is None:
            return []
        if not isinstance(data, list):
            raise RetrievalError("auto.dev response 'data' is not a list")
        return data
