from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

import requests
from requests import Response

from config import config
from domain.errors import ProviderUnavailable
from domain.fees import DexFeeRates, FeeRateProvider, ProviderFeeRates

logger = logging.getLogger(__name__)


class FeeRatesAPIError(Exception):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class FeeRatesClient:
    """Blocking client for the JSON fee rate service.

    Every endpoint answers with an object mapping keys to decimal rates (numbers or strings). A single
    attempt is made per call; there is no retry adapter.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            msg = "base_url must be provided"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_diboas_fees(self) -> dict[str, Decimal]:
        return self._get_rate_table("/fees/diboas")

    def get_network_fees(self) -> dict[str, Decimal]:
        return {chain.upper(): rate for chain, rate in self._get_rate_table("/fees/network").items()}

    def get_payment_provider_fees(self) -> ProviderFeeRates:
        payload = self._request("GET", "/fees/providers")
        onramp = payload.get("onramp")
        offramp = payload.get("offramp")
        if not isinstance(onramp, dict) or not isinstance(offramp, dict):
            raise FeeRatesAPIError("Fee rate service payload missing onramp or offramp", payload=payload)
        return ProviderFeeRates(onramp=self._parse_rates(onramp), offramp=self._parse_rates(offramp))

    def get_dex_fees(self) -> DexFeeRates:
        rates = self._get_rate_table("/fees/dex")
        if "standard" not in rates:
            raise FeeRatesAPIError("Fee rate service payload missing the standard DEX rate", payload=rates)
        return DexFeeRates(standard=rates["standard"])

    def _get_rate_table(self, path: str) -> dict[str, Decimal]:
        return self._parse_rates(self._request("GET", path))

    def _request(self, method: str, path: str) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            message, payload = self._extract_error(resp)
            raise FeeRatesAPIError(message, status_code=status_code, payload=payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise FeeRatesAPIError("Fee rate service request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise FeeRatesAPIError("Fee rate service returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise FeeRatesAPIError("Fee rate service returned unexpected payload type", payload=payload_raw)

        return payload_raw

    @staticmethod
    def _parse_rates(raw: Mapping[str, Any]) -> dict[str, Decimal]:
        parsed: dict[str, Decimal] = {}
        for key, value in raw.items():
            if value is None:
                continue
            try:
                parsed[str(key)] = Decimal(str(value))
            except InvalidOperation as exc:
                raise FeeRatesAPIError(f"Fee rate for {key} is not numeric", payload=dict(raw)) from exc
        return parsed

    @staticmethod
    def _extract_error(response: Response | None) -> tuple[str, Any | None]:
        message = "Fee rate service request failed"
        payload: Any | None = None
        if response is None:
            return message, payload

        try:
            payload = response.json()
            if isinstance(payload, dict):
                message = payload.get("message") or payload.get("error") or message
        except ValueError:
            payload = response.text
        return message, payload


class HttpFeeRateProvider(FeeRateProvider):
    """``FeeRateProvider`` backed by the fee rate service; requests run in a worker thread."""

    provider_name = "Fee rate service"

    def __init__(self, *, client: FeeRatesClient) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, *, session: requests.Session | None = None) -> HttpFeeRateProvider:
        settings = config()
        if not settings.fee_rates_url:
            msg = "fee_rates_url must be configured to use the fee rate service"
            raise ValueError(msg)
        client = FeeRatesClient(base_url=settings.fee_rates_url, timeout=settings.fee_rates_timeout, session=session)
        return cls(client=client)

    async def get_diboas_fees(self) -> Mapping[str, Decimal]:
        return await self._call(self.client.get_diboas_fees)

    async def get_network_fees(self) -> Mapping[str, Decimal]:
        return await self._call(self.client.get_network_fees)

    async def get_payment_provider_fees(self) -> ProviderFeeRates:
        return await self._call(self.client.get_payment_provider_fees)

    async def get_dex_fees(self) -> DexFeeRates:
        return await self._call(self.client.get_dex_fees)

    async def _call(self, fetch: Any) -> Any:
        try:
            return await asyncio.to_thread(fetch)
        except FeeRatesAPIError as exc:
            logger.warning("Fee rate service call failed (status=%s): %s", exc.status_code, exc)
            raise ProviderUnavailable(self.provider_name) from exc


__all__ = ["FeeRatesAPIError", "FeeRatesClient", "HttpFeeRateProvider"]
