# test/test_field_parser.py
import math

from libs.transforms.field_parser import is_number, parse_record, to_number_or_text


def test_quoted_name_and_numeric_tail():
    assert parse_record('F,"Ford Motor Company",NYSE,12.34') == ["F", "Ford Motor Company", "NYSE", 12.34]


def test_quoted_field_keeps_embedded_delimiter():
    out = parse_record('"Exxon, Mobil",XOM,"NYSE",73.10')
    assert out[0] == "Exxon, Mobil"
    assert out[1:] == ["XOM", "NYSE", 73.10]
    assert len(out) == 4


def test_empty_fields_keep_their_position():
    assert parse_record("a,,b") == ["a", "", "b"]
    assert parse_record("a,b,") == ["a", "b", ""]
    assert parse_record(",a") == ["", "a"]


def test_whitespace_and_quotes_stripped():
    assert parse_record('  "XOM" , 1.5 ,  "N/A"  \r\n') == ["XOM", 1.5, "N/A"]


def test_non_numeric_text_is_kept():
    out = parse_record('"N/A","4:00pm","11/19/2010","+0.25%",-0.35')
    assert out == ["N/A", "4:00pm", "11/19/2010", "+0.25%", -0.35]
    assert [is_number(v) for v in out] == [False, False, False, False, True]


def test_integers_stay_integers():
    v = to_number_or_text("53129100")
    assert v == 53129100 and isinstance(v, int)
    assert isinstance(to_number_or_text("1e3"), float)


def test_nan_text_is_not_a_number():
    assert to_number_or_text("NaN") == "NaN"
    assert math.isinf(to_number_or_text("Inf"))


def test_empty_record():
    assert parse_record("") == []
    assert parse_record("   ") == []
    assert parse_record(None) == []


def test_unbalanced_quote_is_best_effort():
    out = parse_record('"Ford Motor,F,12.5')
    assert out  # never raises
    assert all(isinstance(v, (str, int, float)) for v in out)
    assert out[-1] == 12.5


def test_other_delimiter():
    assert parse_record("a;1;\"x;y\"", delimiter=";") == ["a", 1, "x;y"]


def test_space_after_closing_quote_keeps_positions():
    assert parse_record('"Exxon, Mobil" ,XOM,73.1') == ["Exxon, Mobil", "XOM", 73.1]
    out = parse_record('"XOM" , "Exxon, Mobil"  ,"NYSE",73.10')
    assert out == ["XOM", "Exxon, Mobil", "NYSE", 73.1]
