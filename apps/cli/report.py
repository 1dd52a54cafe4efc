# apps/cli/report.py
"""
Print a quote + price-history report for one symbol.

Run:
    $ ticker-report XOM --period 10y --freq m
    $ python -m apps.cli.report F --source yahoo_csv
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from libs.connectors.config import get_settings
from libs.connectors.registry import get_history_source, get_quote_source, list_sources
from libs.contracts.errors import TickerError
from libs.observability.logging import setup_logging
from libs.transforms.report import render_report
from apps.api.services.ticker import Ticker


def build_parser() -> argparse.ArgumentParser:
    cfg = get_settings()
    p = argparse.ArgumentParser(prog="ticker-report", description="Quote and historical volatility report.")
    p.add_argument("symbol", help="Ticker symbol, case insensitive (e.g. F, XOM).")
    p.add_argument("--period", default=cfg.DEFAULT_PERIOD,
                   help="Lookback as <count><d|w|m|y> (default: %(default)s).")
    p.add_argument("--freq", default=cfg.DEFAULT_FREQ, choices=["d", "w", "m"],
                   help="History frequency (default: %(default)s).")
    p.add_argument("--source", default=None, choices=list_sources(),
                   help="Data source for both quote and history (default: MARKET_* settings).")
    p.add_argument("--log-level", default="WARNING")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, json=False)

    cfg = get_settings()
    try:
        t = Ticker.create(
            args.symbol,
            args.period,
            args.freq,
            quote_source=get_quote_source(args.source or cfg.QUOTE_SOURCE),
            history_source=get_history_source(args.source or cfg.HISTORY_SOURCE),
        )
    except TickerError as exc:
        # 报告错误类型 + 出错的输入，便于定位
        print(f"error: {exc.error_code}: {exc.message} (input: {exc.value!r})", file=sys.stderr)
        return 1

    sys.stdout.write(render_report(t.quote, t.history))
    return 0


if __name__ == "__main__":
    sys.exit(main())
