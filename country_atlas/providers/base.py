"""Base provider class with common HTTP and envelope error handling."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import DecodeError, TransportError

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Base class for data providers.

    Provides common functionality:
    - One GET per call, no retry (the transport's own timeout applies)
    - Mapping of httpx failures to TransportError
    - Mapping of unparsable bodies to DecodeError
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """Initialize base provider.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the canonical provider name used in logs and error details."""
        pass

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Issue one GET request and return the parsed JSON body.

        Raises:
            TransportError: On connection failures and non-2xx responses
            DecodeError: If the body is not valid JSON
        """
        try:
            response = await client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportError(
                f"{self.provider_name} returned HTTP {status} for {url}",
                provider=self.provider_name,
                url=url,
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Could not reach {self.provider_name} at {url}: {e.__class__.__name__}: {e}",
                provider=self.provider_name,
                url=url,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(
                f"{self.provider_name} returned a body that is not valid JSON for {url}",
                provider=self.provider_name,
                url=url,
            ) from e

    def _split_envelope(self, payload: Any, url: str) -> List[Any]:
        """Validate the ``[metadata, rows]`` envelope and return its two parts.

        A one-element ``[{"message": [...]}]`` payload is how the API reports
        bad requests with a 200 status; it is surfaced as a DecodeError
        carrying the API's own message.
        """
        if isinstance(payload, list) and payload and isinstance(payload[0], dict) and "message" in payload[0]:
            messages = payload[0]["message"]
            detail = "Unknown error"
            if isinstance(messages, list) and messages and isinstance(messages[0], dict):
                detail = messages[0].get("value") or messages[0].get("key") or detail
            raise DecodeError(
                f"{self.provider_name} rejected the request for {url}: {detail}",
                provider=self.provider_name,
                url=url,
            )

        if not isinstance(payload, list) or len(payload) != 2:
            shape = f"list of {len(payload)}" if isinstance(payload, list) else type(payload).__name__
            raise DecodeError(
                f"{self.provider_name} response for {url} is not a [metadata, rows] pair (got {shape})",
                provider=self.provider_name,
                url=url,
            )
        return payload
