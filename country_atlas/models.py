"""
World Bank response models.

The country and indicator endpoints wrap their rows in the same two-element
envelope, but their pagination headers encode ``per_page`` differently
(string vs integer). Each endpoint family gets its own strict header model
so a change on either side surfaces as a decode failure instead of being
silently coerced.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Annotated, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, computed_field

# Offset between an ASCII capital letter and its regional indicator symbol
REGIONAL_INDICATOR_OFFSET = 127397

# JSON numbers only (ints allowed), no inf/nan from overflowing literals like 1e400
FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]


class RegionDescriptor(BaseModel):
    """Region a directory row belongs to (also used for aggregate buckets)."""
    model_config = ConfigDict(frozen=True)

    id: str
    value: str


class CountryEntry(BaseModel):
    """One row of the country directory, optionally enriched with indicators."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    iso2_code: str = Field(alias="iso2Code", min_length=1)
    name: str
    capital_city: str = Field(alias="capitalCity")
    region: RegionDescriptor
    population: Optional[int] = None
    gdp: Optional[float] = None

    @computed_field  # type: ignore[misc]
    @property
    def flag(self) -> str:
        """Emoji flag built from the two-letter code."""
        return "".join(
            chr(REGIONAL_INDICATOR_OFFSET + ord(ch))
            for ch in self.iso2_code.upper()
            if "A" <= ch <= "Z"
        )


class CountryResponseMetadata(BaseModel):
    """Pagination header of the /country endpoint."""
    page: StrictInt
    pages: StrictInt
    per_page: StrictStr  # String in country endpoint
    total: StrictInt


class IndicatorResponseMetadata(BaseModel):
    """Pagination header of the /indicator endpoints."""
    page: StrictInt
    pages: StrictInt
    per_page: StrictInt  # Indicator endpoint uses Int
    total: StrictInt
    lastupdated: StrictStr


class IndicatorCountry(BaseModel):
    id: StrictStr  # ISO2 code, same code space as CountryEntry.iso2_code
    value: Optional[StrictStr] = None


class IndicatorRecord(BaseModel):
    """One observation of an indicator for one country."""
    country: IndicatorCountry
    countryiso3code: Optional[StrictStr] = None  # Present in the feed, never used as a join key
    date: Optional[StrictStr] = None
    value: Optional[FiniteFloat] = None


class CountryResponse(BaseModel):
    metadata: CountryResponseMetadata
    countries: List[CountryEntry]


class IndicatorResponse(BaseModel):
    metadata: IndicatorResponseMetadata
    entries: List[IndicatorRecord]


IndicatorTable = Dict[str, float]
GroupedResult = Mapping[str, Tuple[CountryEntry, ...]]


def freeze_groups(groups: Dict[str, List[CountryEntry]]) -> GroupedResult:
    """Wrap grouped entries in a read-only mapping of tuples."""
    return MappingProxyType({region: tuple(entries) for region, entries in groups.items()})


# API response models

class RegionGroup(BaseModel):
    name: str
    countries: List[CountryEntry]


class CountriesResponse(BaseModel):
    regions: List[RegionGroup]
    regionCount: int
    countryCount: int

    @classmethod
    def from_grouped(cls, result: GroupedResult) -> "CountriesResponse":
        """Regions sorted by name; countries keep pipeline order."""
        regions = [
            RegionGroup(name=name, countries=list(result[name]))
            for name in sorted(result)
        ]
        return cls(
            regions=regions,
            regionCount=len(regions),
            countryCount=sum(len(r.countries) for r in regions),
        )


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    devMode: bool
    services: Dict[str, str]
