from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
import logging

from pydantic import ValidationError

from ..config import Settings, get_settings
from ..exceptions import DataProviderError, DecodeError
from ..models import (
    CountryEntry,
    CountryResponse,
    IndicatorRecord,
    IndicatorResponse,
    IndicatorTable,
)
from ..services.http_pool import get_http_client
from .base import BaseProvider

logger = logging.getLogger(__name__)


def reduce_indicator_records(records: Iterable[IndicatorRecord]) -> IndicatorTable:
    """Collapse indicator observations into a code -> value table.

    Records without a value are dropped; when a code repeats, the last value
    seen wins.
    """
    table: IndicatorTable = {}
    for record in records:
        if record.value is None:
            continue
        table[record.country.id] = record.value
    return table


class WorldBankProvider(BaseProvider):
    """World Bank country directory and indicator provider.

    The directory is the authoritative list of countries, so its failures
    propagate. Indicators only enrich that list, so their failures are
    logged and reported as an empty table.
    """

    INDICATOR_MAPPINGS: Dict[str, str] = {
        # Population
        "POPULATION": "SP.POP.TOTL",
        "POPULATION_TOTAL": "SP.POP.TOTL",
        # GDP Indicators
        "GDP": "NY.GDP.MKTP.CD",
        "GDP_CURRENT_USD": "NY.GDP.MKTP.CD",
    }

    @property
    def provider_name(self) -> str:
        """Return canonical provider name for logging and error details."""
        return "WorldBank"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        settings = settings or get_settings()
        super().__init__(timeout=settings.http_timeout)
        self.base_url = settings.worldbank_base_url.rstrip("/")
        self.per_page = settings.worldbank_per_page
        self.year = settings.indicator_year

    def _indicator_code(self, indicator: str) -> str:
        """Map a friendly indicator name to its series code; codes pass through."""
        key = indicator.strip().upper().replace(" ", "_")
        return self.INDICATOR_MAPPINGS.get(key, indicator.strip())

    def country_url(self) -> str:
        return f"{self.base_url}/country"

    def indicator_url(self, indicator: str) -> str:
        return f"{self.base_url}/country/all/indicator/{self._indicator_code(indicator)}"

    def _country_params(self) -> Dict[str, Any]:
        return {"format": "json", "per_page": self.per_page}

    def _indicator_params(self) -> Dict[str, Any]:
        return {"format": "json", "date": self.year, "per_page": self.per_page}

    async def fetch_countries(self) -> List[CountryEntry]:
        """Fetch and decode the full country directory.

        Raises:
            TransportError: On network failure or non-2xx status
            DecodeError: If the envelope or any row fails to decode, or a
                country code appears twice
        """
        url = self.country_url()
        client = get_http_client()
        payload = await self._get_json(client, url, params=self._country_params())
        metadata, rows = self._split_envelope(payload, url)

        try:
            response = CountryResponse.model_validate({"metadata": metadata, "countries": rows})
        except ValidationError as e:
            raise DecodeError(
                f"Country directory from {url} does not match the expected schema: "
                f"{e.error_count()} error(s), first: {_first_error(e)}",
                provider=self.provider_name,
                url=url,
            ) from e

        seen: set[str] = set()
        for entry in response.countries:
            if entry.iso2_code in seen:
                raise DecodeError(
                    f"Country directory from {url} lists code {entry.iso2_code!r} more than once",
                    provider=self.provider_name,
                    url=url,
                )
            seen.add(entry.iso2_code)

        if response.metadata.pages > 1:
            logger.warning(
                f"Country directory spans {response.metadata.pages} pages of {response.metadata.per_page}; "
                f"only the first page is used"
            )
        logger.info(f"Fetched {len(response.countries)} directory entries from {url}")
        return response.countries

    async def _fetch_indicator_records(self, indicator: str) -> List[IndicatorRecord]:
        url = self.indicator_url(indicator)
        client = get_http_client()
        payload = await self._get_json(client, url, params=self._indicator_params())
        metadata, rows = self._split_envelope(payload, url)

        if rows is None:
            # The API answers [metadata, null] when a series has no observations
            logger.debug(f"No observations for {indicator} in {self.year}")
            rows = []

        try:
            response = IndicatorResponse.model_validate({"metadata": metadata, "entries": rows})
        except ValidationError as e:
            raise DecodeError(
                f"Indicator {indicator} from {url} does not match the expected schema: "
                f"{e.error_count()} error(s), first: {_first_error(e)}",
                provider=self.provider_name,
                url=url,
            ) from e
        return response.entries

    async def fetch_indicator_table(self, indicator: str) -> IndicatorTable:
        """Fetch one indicator for all countries and reduce it to a table.

        Never raises for provider failures: enrichment is best-effort, so a
        failing series is logged and reported as an empty table.
        """
        try:
            records = await self._fetch_indicator_records(indicator)
        except DataProviderError as e:
            logger.warning(f"Indicator {indicator} unavailable, continuing without it: {e.message}")
            return {}
        except Exception as e:
            logger.warning(
                f"Unexpected error fetching indicator {indicator}, continuing without it: {e}",
                exc_info=True,
            )
            return {}

        table = reduce_indicator_records(records)
        logger.info(f"Indicator {indicator}: {len(table)} values from {len(records)} records")
        return table


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid')}"
