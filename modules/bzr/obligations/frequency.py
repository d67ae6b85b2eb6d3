"""Parsing of free-text inspection and exam frequencies.

Frequencies are written by people ("godišnje", "na 6 meseci",
"svake 2 godine", sometimes in Cyrillic). Text that matches no known
pattern falls back to an annual cadence.
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Optional, Sequence

DEFAULT_MONTHS = 12

_CYRILLIC = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "ђ": "dj", "е": "e",
    "ж": "z", "з": "z", "и": "i", "ј": "j", "к": "k", "л": "l", "љ": "lj",
    "м": "m", "н": "n", "њ": "nj", "о": "o", "п": "p", "р": "r", "с": "s",
    "т": "t", "ћ": "c", "у": "u", "ф": "f", "х": "h", "ц": "c", "ч": "c",
    "џ": "dz", "ш": "s",
}
_LATIN_DIACRITICS = {"š": "s", "đ": "dj", "č": "c", "ć": "c", "ž": "z"}

# Checked in order; more specific phrases come before the generic annual one
# because "polugodisnje" also contains "godisnj".
_RAW_PATTERNS: Sequence[tuple[Sequence[str], int]] = (
    (("polugodisnj", "6 mesec", "sest mesec", "svakih 6"), 6),
    (("kvartaln", "tromesecn", "3 mesec", "tri mesec", "svaka 3 mesec"), 3),
    (("2 godin", "dve godin", "svake 2", "dvogodisnj", "24 mesec"), 24),
    (("3 godin", "tri godin", "svake 3", "trogodisnj", "36 mesec"), 36),
    (("5 godin", "pet godin", "svakih 5", "svake 5", "petogodisnj"), 60),
    (("mesecn", "svakog meseca", "1 mesec"), 1),
    (("godisnj", "1 godin", "12 mesec", "svake godine"), 12),
)

_PATTERNS = tuple(
    (re.compile("|".join(r"\b" + re.escape(needle) for needle in needles)), months)
    for needles, months in _RAW_PATTERNS
)


def normalize(text: str) -> str:
    lowered = text.strip().lower()
    out = []
    for ch in lowered:
        out.append(_CYRILLIC.get(ch) or _LATIN_DIACRITICS.get(ch) or ch)
    return " ".join("".join(out).split())


def parse_frequency_to_months(frequency: Optional[str]) -> int:
    if not frequency:
        return DEFAULT_MONTHS
    text = normalize(frequency)
    for pattern, months in _PATTERNS:
        if pattern.search(text):
            return months
    return DEFAULT_MONTHS


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month."""
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


__all__ = ["DEFAULT_MONTHS", "add_months", "normalize", "parse_frequency_to_months"]
