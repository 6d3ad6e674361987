from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, status

from .config import Settings, get_settings
from .models import CountriesResponse, HealthResponse
from .services.http_pool import HTTPClientPool, close_http_pool
from .services.session import CountrySession, Error, Loaded

settings: Settings = get_settings()

logger = logging.getLogger("country_atlas")
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    # === STARTUP ===
    logger.info("Initializing HTTP client pool...")
    HTTPClientPool()
    logger.info(f"country-atlas API ready (World Bank at {settings.worldbank_base_url})")

    yield

    # === SHUTDOWN ===
    await close_http_pool()


app = FastAPI(title="country-atlas API", version="1.0.0", lifespan=lifespan)


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.environment or "development",
        devMode=settings.dev_mode,
        services={
            "worldbank": settings.worldbank_base_url,
            "httpPool": HTTPClientPool.get_stats()["status"],
        },
    )


@app.get("/api/countries", response_model=CountriesResponse)
async def countries() -> CountriesResponse:
    """Run one aggregation session and return countries grouped by region."""
    session = CountrySession()
    state = await session.run()

    if isinstance(state, Loaded):
        return CountriesResponse.from_grouped(state.result)

    message = state.message if isinstance(state, Error) else "Country data is still loading"
    logger.warning(f"/api/countries failed: {message}")
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)
