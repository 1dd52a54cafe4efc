# libs/contracts/period.py
from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Dict, Final

from pydantic import BaseModel, ConfigDict, Field

from libs.contracts.errors import InvalidFormat

# ---- 枚举：历史数据频率 / 回看单位 ----
class Frequency(StrEnum):
    DAILY = "d"
    WEEKLY = "w"
    MONTHLY = "m"

    @property
    def label(self) -> str:
        return {"d": "Daily", "w": "Weekly", "m": "Monthly"}[self.value]

    @classmethod
    def parse(cls, text: "str | Frequency") -> "Frequency":
        """'d' / ' W ' / Frequency.DAILY -> Frequency; anything else -> InvalidFormat."""
        if isinstance(text, Frequency):
            return text
        s = str(text if text is not None else "").strip().lower()
        try:
            return cls(s)
        except ValueError:
            raise InvalidFormat("Frequency must be 'd', 'm', or 'w'", value=text) from None


class PeriodUnit(StrEnum):
    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"


DAYS_PER_YEAR: Final[float] = 365.25

UNIT_DAYS: Final[Dict[PeriodUnit, float]] = {
    PeriodUnit.DAY: 1.0,
    PeriodUnit.WEEK: 7.0,
    PeriodUnit.MONTH: DAYS_PER_YEAR / 12,
    PeriodUnit.YEAR: DAYS_PER_YEAR,
}

_PERIOD_RE = re.compile(r"^(\d+)([dwmy])$")


def round_half_up(x: float) -> int:
    """Nearest integer, .5 goes up (730.5 -> 731). Python's round() would give 730."""
    return int(math.floor(x + 0.5))


class PeriodSpec(BaseModel):
    """
    Lookback window such as '3y', '26w', '90d', '6m'.

    lookback_days = count * UNIT_DAYS[unit]; the start date offsets a
    reference date by that count rounded half up.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
    count: int = Field(ge=0)
    unit: PeriodUnit

    @classmethod
    def parse(cls, text: "str | PeriodSpec") -> "PeriodSpec":
        if isinstance(text, PeriodSpec):
            return text
        s = str(text if text is not None else "").strip().lower()
        m = _PERIOD_RE.match(s)
        if m is None:
            raise InvalidFormat("Invalid Period Specification", value=text)
        return cls(count=int(m.group(1)), unit=PeriodUnit(m.group(2)))

    def lookback_days(self) -> float:
        return self.count * UNIT_DAYS[self.unit]

    def start_date(self, reference_date: date) -> date:
        """reference_date - round_half_up(lookback_days), as a calendar date."""
        ref = reference_date.date() if isinstance(reference_date, datetime) else reference_date
        try:
            return ref - timedelta(days=round_half_up(self.lookback_days()))
        except OverflowError:
            raise InvalidFormat(
                f"Period reaches before {date.min.isoformat()}", value=str(self)
            ) from None

    def __str__(self) -> str:
        return f"{self.count}{self.unit.value}"
