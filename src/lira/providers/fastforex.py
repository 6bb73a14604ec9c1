"""
FastForex API Client (Primary Provider)

API Documentation: https://fastforex.readme.io/
"""

import logging

import httpx

from lira.config import Settings, get_settings
from lira.providers.base import BaseRateProvider, ProviderRates, RateProviderError

logger = logging.getLogger(__name__)


class FastForexClient(BaseRateProvider):
    """
    Client for FastForex `fetch-all` rates.
    
    Response format:
    {"base": "USD", "results": {"EUR": 0.92, "TRY": 32.1}, "updated": "2026-01-15 10:21:07", "ms": 5}
    """
    
    PROVIDER_NAME = "fastforex"
    
    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.fastforex_base_url,
            timeout=settings.request_timeout_seconds,
            transport=transport
        )
        self.api_key = settings.fastforex_api_key
    
    async def fetch_rates(self, base: str) -> ProviderRates:
        if not self.api_key:
            raise RateProviderError(
                message="FastForex key not configured",
                provider=self.PROVIDER_NAME,
                error_type="CONFIG_ERROR",
                details={"hint": "Set FASTFOREX_API_KEY environment variable"}
            )
        
        data = await self._get_json(
            "/fetch-all",
            params={"from": base.upper(), "api_key": self.api_key}
        )
        
        # FastForex reports failures with a 200 and an "error" field
        if "error" in data:
            raise RateProviderError(
                message=f"API error: {data['error']}",
                provider=self.PROVIDER_NAME,
                error_type="API_ERROR",
                details={"error": data["error"]}
            )
        
        rates = self._extract_rates(data, "results")
        updated = data.get("updated")
        
        logger.info(f"FastForex fetched {len(rates)} rates for base {base} (updated {updated})")
        return ProviderRates(rates, updated)
    
    async def health_check(self) -> bool:
        """Check if FastForex is reachable with the configured key."""
        if not self.api_key:
            return False
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get(
                    f"{self.base_url}/usage",
                    params={"api_key": self.api_key}
                )
                return response.status_code == 200
        except httpx.HTTPError:
            return False
