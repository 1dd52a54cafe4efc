# test/test_cli.py
import pytest

from apps.cli import report
from conftest import FakeHistorySource, FakeQuoteSource


@pytest.fixture
def fakes(monkeypatch):
    qs, hs = FakeQuoteSource(), FakeHistorySource()
    seen = []

    def quote_source(name):
        seen.append(("quote", name))
        return qs

    def history_source(name):
        seen.append(("history", name))
        return hs

    monkeypatch.setattr(report, "get_quote_source", quote_source)
    monkeypatch.setattr(report, "get_history_source", history_source)
    return qs, hs, seen


def test_prints_report(fakes, capsys):
    qs, hs, _ = fakes
    assert report.main(["f", "--period", "1y", "--freq", "m"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Ford Motor Company")
    assert "Monthly Price History: 25-Oct-2010 to 15-Nov-2010" in out
    assert qs.calls == ["F"] and hs.calls[0][0] == "F"


def test_source_flag_picks_both_adapters(fakes):
    _, _, seen = fakes
    report.main(["F", "--source", "yahoo_csv"])
    assert seen == [("quote", "yahoo_csv"), ("history", "yahoo_csv")]


def test_bad_period_exits_1(fakes, capsys):
    qs, _, _ = fakes
    assert report.main(["F", "--period", "3q"]) == 1
    err = capsys.readouterr().err
    assert "INVALID_FORMAT" in err and "'3q'" in err
    assert qs.calls == []


def test_fetch_failure_exits_1(fakes, capsys):
    qs, _, _ = fakes
    qs.fail = True
    assert report.main(["F"]) == 1
    assert "FETCH_FAILURE" in capsys.readouterr().err


def test_unknown_freq_rejected_by_argparse(fakes):
    with pytest.raises(SystemExit):
        report.main(["F", "--freq", "q"])
