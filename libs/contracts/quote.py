# libs/contracts/quote.py
from __future__ import annotations

from typing import Final, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from libs.contracts.errors import MalformedQuote
from libs.transforms.field_parser import NumberOrText, is_number

# Positional layout of a quote record (Yahoo tags s n x l1 d1 t1 c1 p o h g v r r5 y j k)
QUOTE_FIELDS: Final[Tuple[str, ...]] = (
    "symbol",       # s : Symbol
    "name",         # n : Name
    "exchange",     # x : Exchange
    "last_price",   # l1: Price of last trade
    "last_date",    # d1: Date of last trade
    "last_time",    # t1: Time of last trade
    "day_change",   # c1: Day change
    "prev_close",   # p : Previous close
    "day_open",     # o : Day open
    "day_high",     # h : Day high
    "day_low",      # g : Day low
    "day_volume",   # v : Day volume
    "pe",           # r : Price/Earnings
    "peg",          # r5: Price/Earnings growth
    "div_yield",    # y : Dividend yield [%]
    "year_low",     # j : 52-week low
    "year_high",    # k : 52-week high
)


class QuoteSnapshot(BaseModel):
    """
    Point-in-time quote for one symbol.

    Every market field is number-or-text: a source may send "N/A" where a
    number is expected, and that text is kept as-is. A snapshot is never
    mutated; each refresh builds a new one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str = ""
    symbol: NumberOrText
    name: NumberOrText
    exchange: NumberOrText
    last_price: NumberOrText
    last_date: NumberOrText
    last_time: NumberOrText
    day_change: NumberOrText
    prev_close: NumberOrText
    day_open: NumberOrText
    day_high: NumberOrText
    day_low: NumberOrText
    day_volume: NumberOrText
    pe: NumberOrText
    peg: NumberOrText
    div_yield: NumberOrText
    year_low: NumberOrText
    year_high: NumberOrText

    @classmethod
    def ingest(cls, fields: Sequence[NumberOrText], *, source: str = "") -> "QuoteSnapshot":
        """Map the 17-position layout onto named attributes; extra fields are ignored."""
        if fields is None or len(fields) < len(QUOTE_FIELDS):
            n = 0 if fields is None else len(fields)
            raise MalformedQuote(
                f"quote record has {n} fields, expected at least {len(QUOTE_FIELDS)}",
                value=list(fields or []),
            )
        return cls(source=source, **dict(zip(QUOTE_FIELDS, fields)))

    def numeric(self, field: str) -> float | None:
        """Field as float, or None when the source sent text."""
        v = getattr(self, field)
        return float(v) if is_number(v) else None

    def change_pct(self) -> float | None:
        """Percent change of last price vs previous close."""
        last, prev = self.numeric("last_price"), self.numeric("prev_close")
        if last is None or not prev:
            return None
        return 100.0 * (last - prev) / prev
