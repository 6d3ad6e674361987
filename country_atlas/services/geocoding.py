"""
Geocoding collaborator interface.

Locating a capital city is done by an external geocoder and has no effect
on the aggregation result. This module only fixes the seam: what a geocoder
must provide and how its answer becomes a map region for one country.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from ..models import CountryEntry

logger = logging.getLogger(__name__)

DEFAULT_SPAN_DEGREES = 10.0


class Coordinate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class MapRegion(BaseModel):
    """Area to display around a located capital."""
    center: Coordinate
    latitude_delta: float = DEFAULT_SPAN_DEGREES
    longitude_delta: float = DEFAULT_SPAN_DEGREES


class CapitalGeocoder(Protocol):
    async def locate(self, capital_city: str) -> Optional[Coordinate]:
        """Return the capital's coordinate, or None if it cannot be found."""
        ...


async def map_region_for(entry: CountryEntry, geocoder: CapitalGeocoder) -> Optional[MapRegion]:
    """Map region centred on the entry's capital, or None when it cannot be located."""
    if not entry.capital_city:
        return None
    coordinate = await geocoder.locate(entry.capital_city)
    if coordinate is None:
        logger.info(f"Could not find location for {entry.name} ({entry.capital_city})")
        return None
    return MapRegion(center=coordinate)
