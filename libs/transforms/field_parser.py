# libs/transforms/field_parser.py
from __future__ import annotations

import csv
import math
import re
from typing import List, Union

# Quote fields are either numbers or opaque text ("N/A", "4:00pm", "+1.2%").
# Consumers branch on isinstance(v, str); numbers are never forced.
NumberOrText = Union[int, float, str]

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$|^[+-]?inf(inity)?$", re.IGNORECASE)


def parse_record(record: str, delimiter: str = ",") -> List[NumberOrText]:
    """
    Parse one delimited text record into typed fields.

    - double-quoted fields may contain the delimiter
    - surrounding quotes and whitespace are stripped from every field
    - empty fields are kept as "" (positions never shift)
    - each field becomes int/float when it looks numeric, else stays str

    Never raises on malformed input; an unbalanced quote yields a best-effort
    string field.

    >>> parse_record('F,"Ford Motor Company",NYSE,12.34')
    ['F', 'Ford Motor Company', 'NYSE', 12.34]
    """
    text = (record or "").strip()
    if not text:
        return []
    return [to_number_or_text(f) for f in split_fields(text, delimiter)]


def split_fields(text: str, delimiter: str = ",") -> List[str]:
    """Tokenize a single line; quotes and surrounding whitespace removed."""
    if text.count('"') % 2:
        # unbalanced quote: plain split, stray quotes dropped below
        return [_clean(f) for f in text.split(delimiter)]
    # non-strict: text after a closing quote ('"a, b" ,') stays in the field
    rows = list(csv.reader([text], delimiter=delimiter, quotechar='"', skipinitialspace=True, strict=False))
    return [_clean(f) for f in (rows[0] if rows else [])]


def to_number_or_text(field: str) -> NumberOrText:
    s = field.strip()
    if _INT_RE.match(s):
        return int(s)
    if _FLOAT_RE.match(s):
        v = float(s)
        if not math.isnan(v):
            return v
    return s


def is_number(v: NumberOrText) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _clean(field: str) -> str:
    s = field.strip()
    if len(s) > 1 and s[0] == '"' and s[-1] == '"':
        s = s[1:-1]
    elif s.startswith('"'):
        s = s[1:]
    elif s.endswith('"'):
        s = s[:-1]
    return s.strip()
