"""
Country aggregation pipeline.

Fans out the directory fetch and both indicator fetches concurrently, joins
them, then merges, filters and groups synchronously. Only the directory is
required: indicator failures arrive here as empty tables.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Dict, Iterable, List, Optional

from ..config import Settings, get_settings
from ..exceptions import DataProviderError, DirectoryUnavailableError
from ..models import CountryEntry, GroupedResult, IndicatorTable, freeze_groups
from ..providers.worldbank import WorldBankProvider

logger = logging.getLogger(__name__)

# Region id the directory uses for rows that are not countries
NOT_APPLICABLE_REGION_ID = "NA"
AGGREGATE_MARKER = "aggregate"


def merge_indicators(
    countries: Iterable[CountryEntry],
    population: IndicatorTable,
    gdp: IndicatorTable,
) -> List[CountryEntry]:
    """Attach indicator values to directory entries by two-letter code.

    Fields stay unset when the code has no value in the table.
    """
    merged: List[CountryEntry] = []
    for country in countries:
        update: Dict[str, object] = {}
        code = country.iso2_code
        if code in population:
            update["population"] = int(population[code])
        if code in gdp:
            update["gdp"] = gdp[code]
        merged.append(country.model_copy(update=update) if update else country)
    return merged


def is_country(entry: CountryEntry) -> bool:
    """False for aggregates, not-applicable regions and rows without a capital."""
    if AGGREGATE_MARKER in entry.region.value.lower():
        return False
    if entry.region.id == NOT_APPLICABLE_REGION_ID:
        return False
    return entry.capital_city != ""


def filter_countries(countries: Iterable[CountryEntry]) -> List[CountryEntry]:
    return [c for c in countries if is_country(c)]


def group_by_region(countries: Iterable[CountryEntry]) -> GroupedResult:
    """Group by trimmed region label, keeping each region's input order."""
    groups: Dict[str, List[CountryEntry]] = {}
    for country in countries:
        groups.setdefault(country.region.value.strip(), []).append(country)
    return freeze_groups(groups)


def unmatched_codes(countries: Iterable[CountryEntry], table: IndicatorTable) -> List[str]:
    """Indicator codes that match no directory entry, sorted."""
    known = {c.iso2_code for c in countries}
    return sorted(code for code in table if code not in known)


class CountryAggregator:
    """Runs one fetch -> merge -> filter -> group pass."""

    def __init__(
        self,
        provider: Optional[WorldBankProvider] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.provider = provider or WorldBankProvider(settings)
        self.population_indicator = settings.population_indicator
        self.gdp_indicator = settings.gdp_indicator

    async def aggregate(self) -> GroupedResult:
        """Fetch all three datasets concurrently and build the grouped result.

        Raises:
            DirectoryUnavailableError: If the country directory fetch fails.
                Outstanding indicator fetches are cancelled and discarded.
        """
        directory_task = asyncio.create_task(self.provider.fetch_countries())
        population_task = asyncio.create_task(
            self.provider.fetch_indicator_table(self.population_indicator)
        )
        gdp_task = asyncio.create_task(self.provider.fetch_indicator_table(self.gdp_indicator))
        tasks = (directory_task, population_task, gdp_task)

        try:
            try:
                countries = await directory_task
            except DataProviderError as e:
                logger.error(f"Aggregation aborted, country directory unavailable: {e.message}")
                raise DirectoryUnavailableError(e) from e

            population, gdp = await asyncio.gather(population_task, gdp_task)
        finally:
            await _cancel_pending(tasks)

        return self.build(countries, population, gdp)

    def build(
        self,
        countries: List[CountryEntry],
        population: IndicatorTable,
        gdp: IndicatorTable,
    ) -> GroupedResult:
        """Synchronous merge, filter and group over fully fetched inputs."""
        for name, table in ((self.population_indicator, population), (self.gdp_indicator, gdp)):
            missing = unmatched_codes(countries, table)
            if missing:
                logger.info(
                    f"{len(missing)} {name} codes match no directory entry: {', '.join(missing[:10])}"
                )

        merged = merge_indicators(countries, population, gdp)
        filtered = filter_countries(merged)
        grouped = group_by_region(filtered)
        logger.info(
            f"Aggregated {len(filtered)} of {len(countries)} directory entries into {len(grouped)} regions"
        )
        return grouped


async def _cancel_pending(tasks: Iterable[asyncio.Task]) -> None:
    """Cancel and reap any task that has not finished yet."""
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    for task in pending:
        with contextlib.suppress(asyncio.CancelledError):
            await task
