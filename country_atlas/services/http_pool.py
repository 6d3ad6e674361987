"""
Shared HTTP Client Pool Service

Provides one reusable httpx.AsyncClient for every World Bank request so the
three concurrent fetches of an aggregation run share connections instead of
opening a client each.
"""

from __future__ import annotations

import logging
from typing import Optional, Dict, Any

import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)


class HTTPClientPool:
    """
    Singleton HTTP client pool for all external API calls.

    The client is created lazily on first use and lives until close() is
    called on application shutdown.
    """

    _instance: Optional[HTTPClientPool] = None
    _client: Optional[httpx.AsyncClient] = None

    def __new__(cls) -> HTTPClientPool:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the HTTP client pool if not already done."""
        if self._client is None:
            self._initialize_client()

    @staticmethod
    def _initialize_client() -> None:
        """Create a shared AsyncClient with connection pooling."""
        settings = get_settings()

        limits = httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10,
            keepalive_expiry=5.0,
        )

        HTTPClientPool._client = httpx.AsyncClient(
            limits=limits,
            timeout=httpx.Timeout(settings.http_timeout),
            headers={
                "User-Agent": settings.user_agent,
                "Accept": "application/json",
            },
            http2=True,
            follow_redirects=True,
        )

        logger.info(
            f"HTTP Client Pool initialized: max_connections=20, timeout={settings.http_timeout}s"
        )

    @classmethod
    def get_client(cls) -> httpx.AsyncClient:
        """Get the shared HTTP client instance."""
        cls()
        if HTTPClientPool._client is None:
            HTTPClientPool._initialize_client()
        return HTTPClientPool._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared HTTP client pool."""
        if HTTPClientPool._client:
            await HTTPClientPool._client.aclose()
            HTTPClientPool._client = None
            logger.info("HTTP Client Pool closed")

    @classmethod
    def get_stats(cls) -> Dict[str, Any]:
        """Get current pool status without creating a client."""
        client = HTTPClientPool._client
        if client is None:
            return {"status": "not_initialized"}

        return {
            "status": "active",
            "is_closed": client.is_closed,
            "timeout": client.timeout.read,
        }


def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared HTTP client pool.

    This function should be used instead of creating new AsyncClient instances.
    """
    return HTTPClientPool.get_client()


async def close_http_pool() -> None:
    """Close the HTTP client pool (called on application shutdown)."""
    await HTTPClientPool.close()
