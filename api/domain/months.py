# SPDX-License-Identifier: Apache-2.0

"""
Calendar month values for report ranges.

Reports are keyed by ``YYYY-MM`` strings. This module turns those keys into
an ordered value type so ranges can be validated and walked month by month,
rolling over year boundaries.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List

MONTH_KEY_PATTERN = re.compile(r'^(\d{4})-(0[1-9]|1[0-2])$')

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]


@dataclass(frozen=True, order=True)
class MonthKey:
    """A calendar month, ordered chronologically."""
    year: int
    month: int

    @classmethod
    def parse(cls, value: str) -> "MonthKey":
        """
        Parse a ``YYYY-MM`` key.

        Raises:
            ValueError: If the value is not a zero-padded year-month key
        """
        if not isinstance(value, str):
            raise ValueError(f"Month key must be a string, got {type(value).__name__}")

        match = MONTH_KEY_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Invalid month key '{value}', expected YYYY-MM")

        return cls(int(match.group(1)), int(match.group(2)))

    def add_months(self, count: int) -> "MonthKey":
        """Return the month ``count`` months later (negative goes back)."""
        index = self.year * 12 + (self.month - 1) + count
        return MonthKey(index // 12, index % 12 + 1)

    def months_until(self, other: "MonthKey") -> int:
        """Number of months from this month to ``other`` (0 when equal)."""
        return (other.year - self.year) * 12 + (other.month - self.month)

    @property
    def name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``November 2024``."""
        return f"{self.name} {self.year}"

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def iter_months(start: MonthKey, end: MonthKey) -> Iterator[MonthKey]:
    """Yield every month from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current = current.add_months(1)


def month_range(start: MonthKey, end: MonthKey) -> List[MonthKey]:
    """List every month from ``start`` to ``end`` inclusive (empty if reversed)."""
    return list(iter_months(start, end))


def count_months(start: MonthKey, end: MonthKey) -> int:
    """Number of months in the inclusive range, 0 if reversed."""
    return max(start.months_until(end) + 1, 0)
