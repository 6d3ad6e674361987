from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx


class MockURL:
    def __init__(self, url: str):
        self._url = url

    def __str__(self) -> str:
        return self._url


class MockRequest:
    def __init__(self, url: str):
        self.url = MockURL(url)


class MockAsyncResponse:
    def __init__(
        self,
        json_data: Any,
        *,
        headers: Optional[Dict[str, str]] = None,
        request_url: Optional[str] = None,
        status_code: int = 200,
        invalid_json: bool = False,
    ) -> None:
        self._json = json_data
        self._invalid_json = invalid_json
        self.headers = headers or {}
        self.request = MockRequest(request_url or "https://example.com/mock")
        self.status_code = status_code
        self.content = json_data is not None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=self.request,
                response=self,
            )

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json


class HeldResponse:
    """A response that is only delivered once ``release`` is set."""

    def __init__(self, response: Union[MockAsyncResponse, Exception]) -> None:
        self.response = response
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.cancelled = False


Route = Union[MockAsyncResponse, Exception, HeldResponse]


class MockAsyncClient:
    """Fake httpx.AsyncClient answering by URL substring.

    Concurrent fetches reach ``get`` in scheduling order, so responses are
    matched on the URL rather than popped in sequence. An Exception route is
    raised instead of returning a response.
    """

    def __init__(self, routes: Dict[str, Route]) -> None:
        self._routes = routes
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    def _match(self, url: str) -> Route:
        # Longest fragment first so "/indicator/SP.POP.TOTL" beats "/country"
        for fragment in sorted(self._routes, key=len, reverse=True):
            if fragment in url:
                return self._routes[fragment]
        raise AssertionError(f"No mock response for {url}")

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None, **_kwargs) -> MockAsyncResponse:
        base_url = url if isinstance(url, str) else str(url)
        self.calls.append((base_url, params))
        route = self._match(base_url)

        if isinstance(route, HeldResponse):
            route.started.set()
            try:
                await route.release.wait()
            except asyncio.CancelledError:
                route.cancelled = True
                raise
            route = route.response

        if isinstance(route, Exception):
            raise route
        route.request = MockRequest(base_url)
        return route


def run(coro):
    """Helper to run async functions in synchronous tests."""
    return asyncio.run(coro)


# World Bank payload builders

def country_row(
    code: str,
    name: str,
    region_id: str,
    region_value: str,
    capital: str,
    row_id: str | None = None,
) -> Dict[str, Any]:
    return {
        "id": row_id or f"{code}X",
        "iso2Code": code,
        "name": name,
        "region": {"id": region_id, "iso2code": region_id[:2], "value": region_value},
        "adminregion": {"id": "", "iso2code": "", "value": ""},
        "incomeLevel": {"id": "HIC", "iso2code": "XD", "value": "High income"},
        "lendingType": {"id": "LNX", "iso2code": "XX", "value": "Not classified"},
        "capitalCity": capital,
        "longitude": "",
        "latitude": "",
    }


def country_payload(rows: List[Dict[str, Any]]) -> List[Any]:
    return [
        {"page": 1, "pages": 1, "per_page": "300", "total": len(rows)},
        rows,
    ]


def indicator_row(code: str, iso3: str | None, value: float | None, indicator: str = "SP.POP.TOTL") -> Dict[str, Any]:
    return {
        "indicator": {"id": indicator, "value": "Population, total"},
        "country": {"id": code, "value": code},
        "countryiso3code": iso3,
        "date": "2022",
        "value": value,
        "unit": "",
        "obs_status": "",
        "decimal": 0,
    }


def indicator_payload(rows: List[Dict[str, Any]]) -> List[Any]:
    return [
        {
            "page": 1,
            "pages": 1,
            "per_page": 300,
            "total": len(rows),
            "sourceid": "2",
            "lastupdated": "2024-06-28",
        },
        rows,
    ]

