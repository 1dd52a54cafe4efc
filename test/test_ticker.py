# test/test_ticker.py
from datetime import date

import pytest
import structlog
from structlog.testing import capture_logs

from apps.api.services.ticker import Ticker
from libs.contracts.errors import EmptyHistory, FetchFailure, InvalidFormat, MalformedQuote, MalformedRow
from libs.contracts.period import Frequency, PeriodSpec
from libs.connectors.base import HistorySourcePort, QuoteSourcePort
from conftest import FakeHistorySource, FakeQuoteSource


def make(symbol="f", period="3y", freq="w", **kw):
    kw.setdefault("quote_source", FakeQuoteSource())
    kw.setdefault("history_source", FakeHistorySource())
    kw.setdefault("today", lambda: date(2010, 11, 20))
    return Ticker.create(symbol, period, freq, **kw)


def test_fakes_satisfy_ports(quote_source, history_source):
    assert isinstance(quote_source, QuoteSourcePort)
    assert isinstance(history_source, HistorySourcePort)


def test_create_fetches_quote_and_history(quote_source, history_source, fixed_today):
    t = Ticker.create("f", quote_source=quote_source, history_source=history_source, today=fixed_today)
    assert t.symbol == "F"
    assert quote_source.calls == ["F"]
    assert t.quote.name == "Ford Motor Company"
    assert t.quote.pe == "N/A"
    assert t.quote.source == "fake"

    sym, start, freq = history_source.calls[0]
    assert sym == "F" and freq is Frequency.WEEKLY
    # 3y = 1095.75 days -> 1096
    assert start == date(2007, 11, 20)

    h = t.history
    assert len(h) == 4
    assert h.dates[0] == date(2010, 10, 25) and h.dates[-1] == date(2010, 11, 15)
    assert h.period == PeriodSpec.parse("3y") and h.freq is Frequency.WEEKLY
    assert t.volatility() > 0


def test_empty_period_and_freq_mean_defaults():
    t = make("XOM", "", "d")
    assert t.period == PeriodSpec.parse("3y")
    assert t.freq is Frequency.DAILY
    t2 = make("XOM", None, "")
    assert str(t2.period) == "3y" and t2.freq is Frequency.WEEKLY


def test_create_validates_before_fetching():
    qs, hs = FakeQuoteSource(), FakeHistorySource()
    with pytest.raises(InvalidFormat):
        make(period="5x", quote_source=qs, history_source=hs)
    with pytest.raises(InvalidFormat):
        make(freq="u", quote_source=qs, history_source=hs)
    assert qs.calls == [] and hs.calls == []


def test_create_propagates_refresh_errors():
    with pytest.raises(FetchFailure):
        make(quote_source=FakeQuoteSource(fail=True))
    with pytest.raises(MalformedQuote):
        make(quote_source=FakeQuoteSource(record='"F","Ford"'))
    with pytest.raises(EmptyHistory):
        make(history_source=FakeHistorySource(text="Date,Open,High,Low,Close,Volume,Adj Close\n"))


def test_refresh_history_reuses_current_values():
    hs = FakeHistorySource()
    t = make(period="1y", freq="m", history_source=hs)
    t.refresh_history(reference_date=date(2020, 1, 1))
    sym, start, freq = hs.calls[-1]
    assert freq is Frequency.MONTHLY
    assert start == date(2019, 1, 1)  # 365.25 -> 365


def test_refresh_history_replaces_period_and_freq():
    hs = FakeHistorySource()
    t = make(history_source=hs)
    old = t.history
    new = t.refresh_history("10y", "m", reference_date=date(2020, 1, 1))
    assert t.history is new and new is not old
    assert str(t.period) == "10y" and t.freq is Frequency.MONTHLY
    # 10y = 3652.5 -> 3653 days
    assert (date(2020, 1, 1) - hs.calls[-1][1]).days == 3653


def test_failed_history_refresh_leaves_state_untouched():
    hs = FakeHistorySource()
    t = make(history_source=hs)
    before = (t.history, t.period, t.freq)

    hs.fail = True
    with pytest.raises(FetchFailure):
        t.refresh_history("10y", "d")
    assert (t.history, t.period, t.freq) == before

    hs.fail = False
    hs.text = "Date,Open,High,Low,Close,Volume,Adj Close\n2010-11-15,1,2\n"
    with pytest.raises(MalformedRow):
        t.refresh_history()
    assert t.history is before[0]

    with pytest.raises(InvalidFormat):
        t.refresh_history("y5")
    assert t.period is before[1]


def test_failed_quote_refresh_keeps_previous_snapshot():
    qs = FakeQuoteSource()
    t = make(quote_source=qs)
    snap = t.quote
    qs.fail = True
    with pytest.raises(FetchFailure):
        t.refresh_quote()
    assert t.quote is snap


def test_quote_refresh_replaces_snapshot():
    qs = FakeQuoteSource()
    t = make(quote_source=qs)
    snap = t.quote
    qs.record = qs.record.replace("16.24", "17.00", 1)
    new = t.refresh_quote()
    assert t.quote is new and new is not snap
    assert new.last_price == 17.0 and snap.last_price == pytest.approx(16.24)


def test_blank_symbol_rejected():
    with pytest.raises(ValueError):
        make(symbol="  ")


def test_refresh_logs_structured_events():
    log = structlog.get_logger()
    with capture_logs() as logs:
        make(logger=log)
    events = [e["event"] for e in logs]
    assert "quote.refreshed" in events
    assert "history.refreshed" in events
    hist = next(e for e in logs if e["event"] == "history.refreshed")
    assert hist["rows"] == 4 and hist["symbol"] == "F"


def test_failure_is_logged_with_error_code():
    with capture_logs() as logs:
        with pytest.raises(FetchFailure):
            make(quote_source=FakeQuoteSource(fail=True), logger=structlog.get_logger())
    failed = [e for e in logs if e["event"] == "quote.failed"]
    assert failed and failed[0]["error_code"] == "FETCH_FAILURE"


def test_statistics_before_history_fetch():
    t = Ticker("F", quote_source=FakeQuoteSource(), history_source=FakeHistorySource())
    with pytest.raises(RuntimeError):
        t.volatility()
