# test/conftest.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Tuple

import pytest

from libs.contracts.errors import FetchFailure
from libs.contracts.period import Frequency
from libs.observability.logging import setup_logging

# one logging config for the whole session, every level passes
setup_logging("DEBUG", json=False)

F_QUOTE = (
    '"F","Ford Motor Company","NYSE",16.24,"11/19/2010","4:00pm",+0.12,16.12,'
    '16.20,16.35,16.05,53129100,"N/A",0.45,"N/A",9.40,17.42'
)

F_HISTORY = """Date,Open,High,Low,Close,Volume,Adj Close
2010-11-15,16.50,16.80,15.90,16.24,60000000,16.24
2010-11-08,16.90,17.40,16.30,16.60,70000000,16.60
2010-11-01,16.10,17.00,15.90,16.90,90000000,16.90
2010-10-25,14.80,16.20,14.70,16.12,80000000,16.12
"""


@dataclass
class FakeQuoteSource:
    record: str = F_QUOTE
    fail: bool = False
    calls: List[str] = field(default_factory=list)
    source_name: str = "fake"

    def fetch_quote(self, symbol: str) -> str:
        self.calls.append(symbol)
        if self.fail:
            raise FetchFailure("quote source down", value=symbol, source=self.source_name)
        return self.record


@dataclass
class FakeHistorySource:
    text: str = F_HISTORY
    fail: bool = False
    calls: List[Tuple[str, date, Frequency]] = field(default_factory=list)
    source_name: str = "fake"

    def fetch_history(self, symbol: str, start: date, freq: Frequency) -> str:
        self.calls.append((symbol, start, freq))
        if self.fail:
            raise FetchFailure("history source down", value=symbol, source=self.source_name)
        return self.text


@pytest.fixture
def quote_source() -> FakeQuoteSource:
    return FakeQuoteSource()


@pytest.fixture
def history_source() -> FakeHistorySource:
    return FakeHistorySource()


@pytest.fixture
def fixed_today():
    return lambda: date(2010, 11, 20)
