from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

LOGGER = logging.getLogger(__name__)


class StoreError(Exception):
    """The hosted database could not be read."""


class StoreUnavailableError(StoreError):
    """Network failure or non-success HTTP status."""


class StorePayloadError(StoreError):
    """The response body was not the JSON array we asked for."""


class StoreClient:
    """
    Read-only client for the league's hosted database REST endpoint.

    Tables are read through ``/rest/v1/<table>`` with equality filters
    (``column=eq.value``) and ``order=column.desc`` ordering.
    """

    REST_PATH = "/rest/v1"

    TOURNAMENTS_TABLE = "tournaments"
    MATCH_RESULTS_TABLE = "match_results"
    REGISTRATIONS_TABLE = "tournament_registrations"
    BLADES_TABLE = "Beyblade - Blades"
    RATCHETS_TABLE = "Beyblade - Ratchets"
    BITS_TABLE = "Beyblade - Bit"

    RETRY_429_SLEEP_SECONDS = 10

    def __init__(self, base_url: str, api_key: str, timeout_seconds: int = 20):
        if not base_url:
            raise ValueError("Hosted store URL is required")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def table_url(
        self,
        table: str,
        select: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
    ) -> str:
        params: List[tuple] = [("select", select)]
        for column, value in (filters or {}).items():
            params.append((column, f"eq.{value}"))
        if order:
            params.append(("order", order))
        return f"{self.base_url}{self.REST_PATH}/{quote(table)}?{urlencode(params)}"

    def _get_json(self, url: str, retry_429: bool = True) -> Any:
        req = Request(url, headers=self.headers, method="GET")
        try:
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                body = resp.read().decode("utf-8")
        except HTTPError as exc:
            if exc.code == 429 and retry_429:
                LOGGER.warning("Rate limited by hosted store; retrying once in %ss", self.RETRY_429_SLEEP_SECONDS)
                time.sleep(self.RETRY_429_SLEEP_SECONDS)
                return self._get_json(url, retry_429=False)
            raise StoreUnavailableError(f"HTTP {exc.code} from hosted store for {url}") from exc
        except URLError as exc:
            raise StoreUnavailableError(f"Hosted store unreachable: {exc.reason}") from exc

        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise StorePayloadError(f"Hosted store returned non-JSON payload for {url}") from exc

    def select(
        self,
        table: str,
        select: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        payload = self._get_json(self.table_url(table, select=select, filters=filters, order=order))
        if not isinstance(payload, list):
            raise StorePayloadError(f"Expected a list of rows from '{table}', got {type(payload).__name__}")
        LOGGER.debug("Fetched %s rows from %s", len(payload), table)
        return payload

    # --- Read surface shared with the local Database mirror ---

    def get_tournaments(self) -> List[Dict[str, Any]]:
        return self.select(
            self.TOURNAMENTS_TABLE,
            select="id,name,status,tournament_date",
            order="tournament_date.desc",
        )

    def get_match_results(self, tournament_id: Any) -> List[Dict[str, Any]]:
        return self.select(self.MATCH_RESULTS_TABLE, filters={"tournament_id": tournament_id})

    def get_all_match_results(self) -> List[Dict[str, Any]]:
        return self.select(self.MATCH_RESULTS_TABLE)

    def get_part_rows(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "blade": self.select(self.BLADES_TABLE),
            "ratchet": self.select(self.RATCHETS_TABLE),
            "bit": self.select(self.BITS_TABLE),
        }

    def get_registrations(self, tournament_id: Any) -> List[Dict[str, Any]]:
        return self.select(
            self.REGISTRATIONS_TABLE,
            select="player_name,status,tournament_beyblades(beyblade_name)",
            filters={"tournament_id": tournament_id, "status": "confirmed"},
        )

    def close(self) -> None:
        """Nothing to release; present so callers can treat both sources alike."""
