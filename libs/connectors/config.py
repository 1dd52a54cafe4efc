# libs/connectors/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

SourceName = Literal["yfinance", "yahoo_csv"]


class MarketSettings(BaseSettings):
    """
    环境变量示例：
      MARKET_QUOTE_SOURCE=yfinance
      MARKET_HISTORY_SOURCE=yahoo_csv
      MARKET_TIMEOUT_SEC=15
      MARKET_LOG_LEVEL=DEBUG
    """

    # Data sources
    QUOTE_SOURCE: SourceName = "yfinance"
    HISTORY_SOURCE: SourceName = "yfinance"

    # Network timeout per request (seconds); surfaces as FetchFailure
    TIMEOUT_SEC: float = 15.0

    # Ticker defaults
    DEFAULT_PERIOD: str = "3y"
    DEFAULT_FREQ: str = "w"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Legacy Yahoo Finance CSV endpoints
    YAHOO_QUOTE_URL: str = "http://finance.yahoo.com/d/quotes.csv"
    YAHOO_HISTORY_URL: str = "http://ichart.finance.yahoo.com/table.csv"

    model_config = SettingsConfigDict(env_prefix="MARKET_")


@lru_cache
def get_settings() -> MarketSettings:
    return MarketSettings()
