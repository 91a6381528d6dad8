"""Resolves an AssetRef locator to raw image bytes.

Locators:
    http(s)://...   fetched with httpx, transient transport errors retried
    file:///abs     read from an absolute path
    anything else   resolved under the upload directory (a leading "/" is
                    treated as relative to it, like a public URL path)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import httpx

from layerforge.engine.design import SUPPORTED_MIME_TYPES, AssetRef
from layerforge.errors import AssetUnavailable

logger = logging.getLogger(__name__)


class AssetSource(Protocol):
    async def fetch(self, asset: AssetRef) -> bytes:
        """Return the asset's bytes or raise AssetUnavailable."""
        ...


class LocatorAssetSource:
    """Default AssetSource: local upload directory plus remote URLs."""

    def __init__(
        self,
        upload_dir: str | Path,
        retries: int = 2,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.upload_dir = Path(upload_dir).resolve()
        self.retries = max(0, retries)
        self.timeout = timeout
        self._client = client

    def resolve(self, url: str) -> str | Path:
        """Remote URL (returned unchanged) or a local file path.

        Raises ValueError for locators that cannot be parsed.
        """
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            return url
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))

        path = (self.upload_dir / url.lstrip("/")).resolve()
        if not path.is_relative_to(self.upload_dir):
            raise AssetUnavailable(f"Asset path escapes the upload directory: {url}")
        return path

    async def fetch(self, asset: AssetRef) -> bytes:
        if asset.mime_type not in SUPPORTED_MIME_TYPES:
            raise AssetUnavailable(
                f"Unsupported asset type {asset.mime_type!r} for asset {asset.id}",
                asset_id=asset.id,
            )

        try:
            location = self.resolve(asset.url)
        except ValueError as e:
            raise AssetUnavailable(
                f"Malformed locator for asset {asset.id}: {e}",
                asset_id=asset.id,
            ) from e
        if isinstance(location, Path):
            return await asyncio.to_thread(self._read_file, asset, location)
        return await self._fetch_remote(asset, location)

    def _read_file(self, asset: AssetRef, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except (OSError, ValueError) as e:
            raise AssetUnavailable(
                f"Cannot read asset {asset.id} at {path}: {e}",
                asset_id=asset.id,
            ) from e

    async def _fetch_remote(self, asset: AssetRef, url: str) -> bytes:
        if self._client is not None:
            return await self._get_with_retries(self._client, asset, url)
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await self._get_with_retries(client, asset, url)

    async def _get_with_retries(
        self,
        client: httpx.AsyncClient,
        asset: AssetRef,
        url: str,
    ) -> bytes:
        last_error: Exception | None = None
        for attempt in range(self.retries + 1):
            try:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
            except httpx.HTTPStatusError as e:
                # Only transport errors are retried
                raise AssetUnavailable(
                    f"Asset {asset.id} fetch returned HTTP {e.response.status_code}",
                    asset_id=asset.id,
                ) from e
            except httpx.InvalidURL as e:
                raise AssetUnavailable(
                    f"Malformed locator for asset {asset.id}: {e}",
                    asset_id=asset.id,
                ) from e
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "Asset %s fetch attempt %d/%d failed: %s",
                    asset.id,
                    attempt + 1,
                    self.retries + 1,
                    e,
                )

        raise AssetUnavailable(
            f"Asset {asset.id} unreachable after {self.retries + 1} attempts",
            asset_id=asset.id,
        ) from last_error
