# libs/transforms/report.py
from __future__ import annotations

from typing import Optional

import pandas as pd

from libs.contracts.errors import InsufficientData
from libs.contracts.history import HistorySeries
from libs.contracts.quote import QuoteSnapshot
from libs.transforms.field_parser import NumberOrText, is_number

RULE = "-" * 47


def fmt_num(v: NumberOrText, spec: str = "6.2f", suffix: str = "") -> str:
    """Number -> formatted; text (e.g. 'N/A') -> right-aligned as-is."""
    if is_number(v):
        return f"{v:{spec}}{suffix}"
    width = spec.split(".")[0] or "0"
    return f"{str(v):>{width}}"


def render_report(quote: QuoteSnapshot, history: Optional[HistorySeries] = None) -> str:
    """
    Plain-text summary of a quote and (optionally) its price history.

    Text-valued quote fields are printed verbatim; annualized statistics print
    'n/a' when the series is too short.
    """
    lines = [f"{str(quote.name):<17s} ({quote.exchange}:{quote.symbol})", RULE]
    lines.append(f"Last Trade:         {fmt_num(quote.last_price)}  ({quote.last_time} {quote.last_date})")

    pct = quote.change_pct()
    pct_txt = f"({pct:4.2f}%)" if pct is not None else "(n/a)"
    lines.append(f"Daily Change:       {fmt_num(quote.day_change)}  {pct_txt}")
    lines.append(f"Prev. Close:        {fmt_num(quote.prev_close)}")
    lines.append(f"Day Open:           {fmt_num(quote.day_open)}")
    lines.append(f"Day Range:          {fmt_num(quote.day_low)} - {fmt_num(quote.day_high)}")
    lines.append(f"52wk Range:         {fmt_num(quote.year_low)} - {fmt_num(quote.year_high)}")
    lines.append(f"P/E                 {fmt_num(quote.pe)}")
    lines.append(f"Dividend Yield      {fmt_num(quote.div_yield, suffix='%')}")

    if history is not None and len(history):
        dates = history.dates
        lines.append("")
        lines.append(
            f"{history.freq.label} Price History: {dates[0].strftime('%d-%b-%Y')} to {dates[-1].strftime('%d-%b-%Y')}"
        )
        lines.append(RULE + "-")
        lines.append(f"Volatility:         {_pct(history.volatility)} (annualized)")
        lines.append(f"Mean Log Return:    {_pct(history.mean_log_return)} (annualized)")
    return "\n".join(lines) + "\n"


def history_frame(history: HistorySeries) -> pd.DataFrame:
    """Bars plus `price` and `log_return` columns, for plotting / export."""
    df = history.to_frame()
    df["log_return"] = history.log_return()
    return df


def _pct(stat) -> str:
    try:
        return f"{100 * stat():6.2f}%"
    except InsufficientData:
        return "   n/a"
