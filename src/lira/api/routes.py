"""
Lira Checker API Routes

Unsupported currencies are a client error (400); upstream failures are
reported as 502 without taking the process down.
"""

import logging
from datetime import datetime, timezone
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from lira import __version__
from lira.api.schemas import (
    ConversionItem,
    ErrorResponse,
    HealthResponse,
    RatesResponse,
)
from lira.config import Settings
from lira.converter import CurrencyConverter
from lira.models import ConversionError, NoTargets, TooManyTargets, UnknownCurrency
from lira.providers.base import RateProviderError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Rates"])


def get_converter(request: Request) -> CurrencyConverter:
    return request.app.state.converter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": details,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


def _raise_for(e: Exception) -> NoReturn:
    """Translate converter/provider exceptions into HTTP errors."""
    if isinstance(e, UnknownCurrency):
        raise _error(
            status.HTTP_400_BAD_REQUEST,
            "LIRA_UNKNOWN_CURRENCY",
            str(e),
            {"currency": e.code, "reason": e.reason}
        ) from e
    if isinstance(e, NoTargets):
        raise _error(
            status.HTTP_400_BAD_REQUEST,
            "LIRA_NO_TARGETS",
            str(e)
        ) from e
    if isinstance(e, TooManyTargets):
        raise _error(
            status.HTTP_400_BAD_REQUEST,
            "LIRA_TOO_MANY_TARGETS",
            str(e),
            {"requested": e.requested, "limit": e.limit}
        ) from e
    if isinstance(e, RateProviderError):
        raise _error(
            status.HTTP_502_BAD_GATEWAY,
            "LIRA_UPSTREAM_UNAVAILABLE",
            "Unable to fetch requested info",
            {"provider": e.provider, "error_type": e.error_type}
        ) from e
    raise e


def _split_codes(raw: str) -> list[str]:
    return [part for part in (code.strip() for code in raw.split(",")) if part]


@router.get(
    "/status",
    response_class=PlainTextResponse,
    summary="Plain-text status of the configured currency",
    responses={
        503: {"description": "No rates cached and upstream unavailable"},
    }
)
async def get_status(
    converter: CurrencyConverter = Depends(get_converter),
    settings: Settings = Depends(get_app_settings)
) -> PlainTextResponse:
    """
    e.g. "Lira Status as of 2026-01-15 10:21:07 (UTC): 1 Turkish Lira is equal to ..."

    Served from an expired snapshot when the refresh fails.
    """
    try:
        line = await converter.status(settings.status_base, settings.status_target_list)
    except (RateProviderError, ConversionError) as e:
        # ConversionError here means STATUS_BASE / STATUS_TARGETS is misconfigured
        logger.error(f"Status unavailable: {e}")
        return PlainTextResponse(
            "No status available",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    snapshot = converter.cached_snapshot
    updated = (snapshot.updated if snapshot else None) or "unknown"
    return PlainTextResponse(f"Lira Status as of {updated} (UTC): {line}")


@router.get(
    "/convert/{base}",
    response_model=RatesResponse,
    summary="All known rates for a base currency",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown currency"},
        502: {"model": ErrorResponse, "description": "Upstream unavailable"},
    }
)
async def get_rates(
    base: str,
    converter: CurrencyConverter = Depends(get_converter)
) -> RatesResponse:
    try:
        snapshot, results = await converter.rates_for(base)
    except (ConversionError, RateProviderError) as e:
        _raise_for(e)

    return RatesResponse(
        base=base.strip().upper(),
        results=results,
        updated=snapshot.updated
    )


@router.get(
    "/convert/{base}/{targets}",
    response_model=list[ConversionItem],
    summary="Convert a base currency into one or more targets",
    description="`targets` is a comma-separated list, e.g. /convert/try/eur,usd",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown currency, missing or too many targets"},
        502: {"model": ErrorResponse, "description": "Upstream unavailable"},
    }
)
async def get_conversions(
    base: str,
    targets: str,
    converter: CurrencyConverter = Depends(get_converter)
) -> list[ConversionItem]:
    try:
        results = await converter.convert_many(base, _split_codes(targets))
    except (ConversionError, RateProviderError) as e:
        _raise_for(e)

    return [
        ConversionItem(
            **result.model_dump(),
            base_name=converter.name_for(result.base_currency),
            target_name=converter.name_for(result.target_currency)
        )
        for result in results
    ]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Health check for load balancers and monitoring",
    responses={
        503: {"model": ErrorResponse, "description": "Service unavailable"},
    }
)
async def health_check(
    converter: CurrencyConverter = Depends(get_converter)
) -> HealthResponse:
    """
    HTTP 200 while the primary provider is reachable or rates are still
    cached; HTTP 503 otherwise.
    """
    providers = await converter.fetcher.health_check_all()
    primary = converter.fetcher.primary.PROVIDER_NAME
    snapshot = converter.cached_snapshot
    age = converter.cache_age()

    if not providers.get(primary) and snapshot is None:
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "LIRA_UNHEALTHY",
            "Service is not healthy",
            {"providers": providers, "cache": "empty"}
        )

    return HealthResponse(
        status="healthy" if providers.get(primary) else "degraded",
        version=__version__,
        providers=providers,
        cache_age_seconds=age,
        cache_fetched_at=snapshot.fetched_at_utc if snapshot else None,
        cache_fresh=age is not None and age <= converter.ttl_seconds,
        cached_currencies=len(snapshot.rates) if snapshot else 0,
        unnamed_currencies=converter.unknown_currency_codes()
    )
