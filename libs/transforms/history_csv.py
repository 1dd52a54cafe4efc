# libs/transforms/history_csv.py
from __future__ import annotations

from typing import List

from libs.contracts.history import HistoryRow
from libs.transforms.field_parser import parse_record

HISTORY_HEADER = ["Date", "Open", "High", "Low", "Close", "Volume", "Adj Close"]


def rows_from_csv(text: str, *, has_header: bool = True, delimiter: str = ",") -> List[HistoryRow]:
    """
    Split history CSV text into HistoryRow objects.

    The first non-blank line is the header and is skipped; blank lines are
    ignored. Row order is left as delivered (Yahoo: newest first); ordering
    is HistorySeries.ingest's job, as is rejecting incomplete rows.
    """
    lines = [ln for ln in (text or "").splitlines() if ln.strip()]
    if has_header and lines:
        lines = lines[1:]
    out: List[HistoryRow] = []
    for ln in lines:
        fields = parse_record(ln, delimiter)
        # dates like 20200108 come back numeric; keep them as text
        if fields and not isinstance(fields[0], str):
            fields[0] = str(fields[0])
        out.append(HistoryRow.from_fields(fields))
    return out
