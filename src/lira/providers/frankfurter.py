"""
Frankfurter API Client (Secondary Provider)

Free ECB reference rates; used to fill currencies the primary provider
does not cover. API Documentation: https://frankfurter.dev/
"""

import logging

import httpx

from lira.config import Settings, get_settings
from lira.providers.base import BaseRateProvider, ProviderRates

logger = logging.getLogger(__name__)


class FrankfurterClient(BaseRateProvider):
    """
    Client for Frankfurter.dev latest exchange rates.
    
    Response format: {"amount": 1.0, "base": "USD", "date": "2026-01-15", "rates": {"EUR": 0.92, "CNY": 7.1}}
    """
    
    PROVIDER_NAME = "frankfurter"
    
    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.frankfurter_base_url,
            timeout=settings.request_timeout_seconds,
            transport=transport
        )
    
    async def fetch_rates(self, base: str) -> ProviderRates:
        data = await self._get_json("/v1/latest", params={"base": base.upper()})
        
        rates = self._extract_rates(data, "rates")
        updated = data.get("date")
        
        logger.info(f"Frankfurter fetched {len(rates)} rates for base {base} (date {updated})")
        return ProviderRates(rates, updated)
    
    async def health_check(self) -> bool:
        """Check if Frankfurter API is reachable."""
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get(f"{self.base_url}/v1/currencies")
                return response.status_code == 200
        except httpx.HTTPError:
            return False
