"""Typed Python SDK for the FTZ HTS lookup API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests  # type: ignore[import-untyped]
from pydantic import BaseModel


class HTSEnvelope(BaseModel):
    success: bool
    data: Any = None
    meta: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class DutyRateResp(BaseModel):
    hts_code: str
    country_of_origin: str
    general_rate: str
    applicable_rate: str
    is_preferential: bool
    is_duty_free: bool
    trade_agreement: Optional[str] = None
    calculation_date: str
    notes: List[str]
    requirements: List[str]


class HTSClientError(RuntimeError):
    """Raised when the API answers with a failure envelope."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class HTSConfig:
    """Configuration for :class:`HTSClient`."""

    base_url: Optional[str] = None
    token: Optional[str] = None

    @property
    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url
        env_value = os.getenv("FTZ_HTS_BASE_URL")
        if env_value:
            return env_value
        return "http://localhost:8000"

    @property
    def resolved_token(self) -> Optional[str]:
        return self.token or os.getenv("FTZ_HTS_TOKEN")


class HTSClient:
    """High-level synchronous client for ``/api/hts``."""

    def __init__(self, cfg: Optional[HTSConfig] = None, session: Optional[requests.Session] = None):
        self.cfg = cfg or HTSConfig()
        self._session = session or requests.Session()
        token = self.cfg.resolved_token
        if token:
            self._session.headers.setdefault("Authorization", f"Bearer {token}")

    @property
    def endpoint(self) -> str:
        return f"{self.cfg.resolved_base_url.rstrip('/')}/api/hts"

    def _unwrap(self, response: Any) -> HTSEnvelope:
        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise HTSClientError(response.status_code, "Response was not JSON") from None
        if not isinstance(payload, dict) or not payload.get("success"):
            message = "Request failed"
            if isinstance(payload, dict):
                message = payload.get("error") or payload.get("message") or message
            raise HTSClientError(response.status_code, message)
        return HTSEnvelope.model_validate(payload)

    def _get(self, action: str, **params: Any) -> HTSEnvelope:
        query = {key: value for key, value in params.items() if value is not None}
        query["action"] = action
        return self._unwrap(self._session.get(self.endpoint, params=query))

    def _post(self, action: str, body: Optional[Dict[str, Any]] = None) -> HTSEnvelope:
        return self._unwrap(
            self._session.post(self.endpoint, params={"action": action}, json=body or {})
        )

    # -- search ---------------------------------------------------------------

    def search(
        self,
        term: str,
        search_type: str = "description",
        limit: int = 100,
        country_of_origin: Optional[str] = None,
        category: Optional[str] = None,
    ) -> HTSEnvelope:
        """Search HTS codes.

        Args:
            term: Query text; fewer than two characters yields no results.
            search_type: ``"description"`` or ``"code"``.
            limit: Maximum results; non-positive disables truncation.
            country_of_origin: Annotate hits with a country-specific rate.
            category: Exact category filter.
        Returns:
            The success envelope with the result rows in ``data``.
        """

        return self._get(
            "search",
            q=term,
            type=search_type,
            limit=limit,
            countryOfOrigin=country_of_origin,
            category=category,
        )

    def search_by_description(
        self, term: str, limit: int = 100, country_of_origin: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return self.search(term, "description", limit, country_of_origin).data

    def search_by_code(
        self, term: str, limit: int = 50, country_of_origin: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return self.search(term, "code", limit, country_of_origin).data

    # -- lookups ------------------------------------------------------------

    def get_by_hts_code(self, hts_code: str, country_of_origin: Optional[str] = None) -> Dict[str, Any]:
        return self._get("code", htsCode=hts_code, countryOfOrigin=country_of_origin).data

    def calculate_duty_rate(self, hts_code: str, country_of_origin: str) -> DutyRateResp:
        envelope = self._post(
            "duty-rate", {"htsCode": hts_code, "countryOfOrigin": country_of_origin}
        )
        return DutyRateResp.model_validate(envelope.data)

    def get_popular_codes(self, limit: int = 20, **filters: Optional[str]) -> HTSEnvelope:
        return self._get("popular", limit=limit, **filters)

    def get_countries(self, **filters: Optional[str]) -> HTSEnvelope:
        return self._get("countries", **filters)

    def browse(self, **options: Any) -> HTSEnvelope:
        return self._get("browse", **options)

    def get_status(self) -> Dict[str, Any]:
        return self._get("status").data

    def refresh_data(self) -> Dict[str, Any]:
        """Trigger the (simulated) reference data refresh; needs a token."""
        return self._post("refresh").data
