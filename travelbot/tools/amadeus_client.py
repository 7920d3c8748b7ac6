# Role: External tool adapter for flight search (Amadeus self-service API). Handles the OAuth2
# client-credentials token, the flight-offers search and airport lookup. Plain requests, no SDK.

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

import travelbot.config as config
from travelbot.core.errors import FlightSearchError
from travelbot.models.flight import FlightSearchParams

DEFAULT_BASE_URL = "https://test.api.amadeus.com"
TOKEN_SAFETY_MARGIN_SECONDS = 5 * 60


@dataclass
class TokenCache:
    """Access token plus absolute expiry (epoch seconds). Injected so tests can control time."""

    access_token: Optional[str] = None
    expires_at: float = 0.0
    clock: Callable[[], float] = time.time

    def get(self) -> Optional[str]:
        # Key line: treat the token as expired 5 minutes early so it never dies mid-request.
        if self.access_token and self.clock() < self.expires_at - TOKEN_SAFETY_MARGIN_SECONDS:
            return self.access_token
        return None

    def store(self, access_token: str, expires_in: int) -> None:
        self.access_token = access_token
        self.expires_at = self.clock() + expires_in

    def clear(self) -> None:
        self.access_token = None
        self.expires_at = 0.0


class AmadeusClient:
    TOKEN_PATH = "/v1/security/oauth2/token"
    FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
    LOCATIONS_PATH = "/v1/reference-data/locations"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        token_cache: Optional[TokenCache] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 15,
    ) -> None:
        self.client_id = client_id or os.getenv("AMADEUS_CLIENT_ID")
        self.client_secret = client_secret or os.getenv("AMADEUS_CLIENT_SECRET")
        self.base_url = (base_url or os.getenv("AMADEUS_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.token_cache = token_cache or TokenCache()
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get_token(self) -> str:
        # 1) Reuse cached token while valid
        # 2) Otherwise client-credentials grant and cache with its expires_in
        token = self.token_cache.get()
        if token:
            return token

        if not (self.client_id and self.client_secret):
            raise FlightSearchError("Missing AMADEUS_CLIENT_ID / AMADEUS_CLIENT_SECRET")

        try:
            r = self.session.post(
                f"{self.base_url}{self.TOKEN_PATH}",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise FlightSearchError(f"Amadeus auth request failed: {e}") from e

        if r.status_code != 200:
            raise FlightSearchError("Amadeus authentication failed", status_code=r.status_code)

        payload = r.json()
        self.token_cache.store(payload["access_token"], int(payload.get("expires_in", 1799)))
        if config.DEBUG:
            print("AMADEUS: new access token cached")
        return payload["access_token"]

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        token = self._get_token()
        try:
            r = self.session.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise FlightSearchError(f"Amadeus request failed: {e}") from e

        if r.status_code == 401:
            # Key line: token revoked/expired server-side -> drop it so the next call re-authenticates.
            self.token_cache.clear()
            raise FlightSearchError("Amadeus token rejected", status_code=401)

        if r.status_code >= 400:
            detail = ""
            try:
                errors = r.json().get("errors") or []
                if errors:
                    detail = f": {errors[0].get('detail') or errors[0].get('title')}"
            except ValueError:
                pass
            raise FlightSearchError(f"Amadeus request failed ({r.status_code}){detail}", status_code=r.status_code)

        return r.json()

    def search_flight_offers(self, params: FlightSearchParams, currency_code: str = "BRL") -> List[dict]:
        query = params.to_query()
        query["currencyCode"] = currency_code

        if config.DEBUG:
            print("\n--- AMADEUS SEARCH ---")
            print("QUERY:", query)

        payload = self._get(self.FLIGHT_OFFERS_PATH, query)
        offers = payload.get("data") or []

        if config.DEBUG:
            print("OFFERS:", len(offers))
            print("----------------------\n")
        return offers

    def search_airports(self, keyword: str, max_items: int = 10) -> List[dict]:
        # Role: city/airport autocomplete -> compact [{name, iataCode, subType, cityName, countryCode}].
        if not keyword or len(keyword.strip()) < 2:
            return []

        payload = self._get(
            self.LOCATIONS_PATH,
            {"keyword": keyword.strip(), "subType": "AIRPORT,CITY", "page[limit]": max_items},
        )

        out = []
        for item in payload.get("data") or []:
            code = item.get("iataCode")
            if not code:
                continue
            address = item.get("address") or {}
            out.append(
                {
                    "name": item.get("name"),
                    "iataCode": code,
                    "subType": item.get("subType"),
                    "cityName": address.get("cityName"),
                    "countryCode": address.get("countryCode"),
                }
            )
        return out
