#!/usr/bin/env python3
"""
World Countries

Fetches the World Bank country directory together with population and GDP,
and prints the countries grouped by region.

Usage:
    python scripts/fetch_countries.py            # Readable listing
    python scripts/fetch_countries.py --json     # Same JSON as GET /api/countries
    python scripts/fetch_countries.py --region "Europe & Central Asia"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from country_atlas.config import get_settings
from country_atlas.models import CountriesResponse, CountryEntry
from country_atlas.services.http_pool import close_http_pool
from country_atlas.services.session import CountrySession, Error, Loaded

logging.basicConfig(
    level=getattr(logging, get_settings().log_level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def format_row(country: CountryEntry) -> str:
    parts = [f"{country.flag} {country.name}", country.capital_city, country.iso2_code]
    if country.population is not None:
        parts.append(f"{country.population:,} people")
    if country.gdp is not None:
        parts.append(f"${country.gdp:,.0f}")
    return "  " + " | ".join(parts)


def print_listing(response: CountriesResponse, region: Optional[str] = None) -> None:
    for group in response.regions:
        if region and group.name != region:
            continue
        print(group.name)
        for country in sorted(group.countries, key=lambda c: c.name):
            print(format_row(country))
        print()


async def main() -> int:
    parser = argparse.ArgumentParser(description="List World Bank countries grouped by region")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a listing")
    parser.add_argument("--region", "-r", type=str, help="Only print this region")
    args = parser.parse_args()

    session = CountrySession()
    try:
        state = await session.run()
    finally:
        await close_http_pool()

    if isinstance(state, Error):
        logger.error(state.message)
        return 1
    if not isinstance(state, Loaded):
        return 1

    response = CountriesResponse.from_grouped(state.result)
    if args.json:
        print(response.model_dump_json(by_alias=True, indent=2))
    else:
        print_listing(response, region=args.region)
        logger.info(f"{response.countryCount} countries in {response.regionCount} regions")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
