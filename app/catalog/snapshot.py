"""
==============================================================================
Authoritative Snapshot Module
==============================================================================

Retrieval of the bundled product catalog, the source of truth for shared
products.

The location is either a file path (the catalog shipped with the
application) or an http(s) URL. Remote catalogs are fetched with httpx.

==============================================================================
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import httpx

from app.catalog.codec import decode_structured
from app.catalog.models import Product
from app.core.exceptions import FetchError


# Module logger
logger = logging.getLogger(__name__)


class SnapshotSource:
    """
    Reads the authoritative catalog from disk or over HTTP.

    Attributes:
        location: File path or http(s) URL
        timeout: Seconds to wait for a remote catalog

    Example:
        >>> source = SnapshotSource("data/productos.json")
        >>> products = await source.fetch()
    """

    def __init__(
        self,
        location: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self._location = location
        self._timeout = timeout
        self._transport = transport

    @property
    def location(self) -> str:
        return self._location

    @property
    def is_remote(self) -> bool:
        return self._location.lower().startswith(("http://", "https://"))

    async def fetch_text(self) -> str:
        """
        Retrieve the raw catalog document.

        Raises:
            FetchError: If the file cannot be read or the request fails
        """
        if self.is_remote:
            return await self._fetch_remote()
        return self._read_file()

    async def fetch(self) -> List[Product]:
        """
        Retrieve and parse the catalog.

        Raises:
            FetchError: If the snapshot is unavailable
            FormatError: If the snapshot is malformed
        """
        text = await self.fetch_text()
        products = decode_structured(text)
        logger.debug(f"Fetched {len(products)} products from {self._location}")
        return products

    async def _fetch_remote(self) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(self._location)
        except httpx.HTTPError as e:
            raise FetchError(
                f"Could not fetch product catalog: {e}",
                {"location": self._location},
            ) from e

        if not response.is_success:
            raise FetchError(
                f"Product catalog request failed with status {response.status_code}",
                {"location": self._location, "status": response.status_code},
            )
        return response.text

    def _read_file(self) -> str:
        path = Path(self._location)
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(
                f"Could not read product catalog: {e}",
                {"location": self._location},
            ) from e
