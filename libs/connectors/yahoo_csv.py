# connectors/yahoo_csv.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import requests

from libs.connectors.config import get_settings
from libs.contracts.errors import FetchFailure
from libs.contracts.period import Frequency

# s n x l1 d1 t1 c1 p o h g v r r5 y j k  -> the 17-field quote layout
QUOTE_TAGS = "snxl1d1t1c1pohgvrr5yjk"


@dataclass(slots=True)
class YahooCsvSource:
    """
    Legacy Yahoo Finance CSV endpoints (quotes.csv / table.csv).

    Both calls are plain blocking GETs with a timeout; any network error or
    non-2xx status becomes FetchFailure carrying the status and a body excerpt.
    """

    quote_url: str = ""
    history_url: str = ""
    timeout_sec: float = 0.0
    session: Optional[requests.Session] = field(default=None, repr=False)

    source_name: str = "Yahoo Finance"

    def __post_init__(self) -> None:
        cfg = get_settings()
        self.quote_url = self.quote_url or cfg.YAHOO_QUOTE_URL
        self.history_url = self.history_url or cfg.YAHOO_HISTORY_URL
        self.timeout_sec = self.timeout_sec or cfg.TIMEOUT_SEC

    def fetch_quote(self, symbol: str) -> str:
        params = {"s": symbol, "f": QUOTE_TAGS}
        return self._get(self.quote_url, params, symbol)

    def fetch_history(self, symbol: str, start: date, freq: Frequency) -> str:
        params = {
            "s": symbol,
            "a": start.month - 1,   # start month, zero-based
            "b": start.day,         # start day
            "c": start.year,        # start year
            "g": Frequency.parse(freq).value,
        }
        return self._get(self.history_url, params, symbol)

    def _get(self, url: str, params: dict, symbol: str) -> str:
        http = self.session or requests
        try:
            r = http.get(url, params=params, timeout=self.timeout_sec)
        except requests.RequestException as exc:
            raise FetchFailure(
                f"Unable to read data from {self.source_name}: {exc}",
                value=symbol,
                source=self.source_name,
            ) from exc
        try:
            r.raise_for_status()
        except requests.HTTPError as exc:
            # keep the server's message for diagnosis
            raise FetchFailure(
                f"{self.source_name} request failed: status={r.status_code}, body={r.text[:500]}",
                value=symbol,
                source=self.source_name,
            ) from exc
        return r.text
