"""
Text helpers for the activity feed.
Identity-field normalisation, 12-hour clock parsing and CSV line splitting.

Usage:
    from scripts.lib.parsing import normalize_text, parse_time, parse_csv_line

    normalize_text("  RAHUL  sharma. ")   # "Rahul Sharma"
    parse_time("2:15 PM")                 # 855
    parse_csv_line('a,"b,c",d')           # ["a", "b,c", "d"]
"""
import re
from typing import List, Optional

MINUTES_PER_DAY = 24 * 60

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Canonical display form for names, zones and cities.

    Punctuation becomes a space, whitespace runs collapse, and every word is
    capitalised from a fully lower-cased string, so "MUMBAI-west" and
    "mumbai west" both group as "Mumbai West".
    """
    if not text:
        return ""
    clean = _NON_ALNUM_RE.sub(" ", text)
    clean = _WHITESPACE_RE.sub(" ", clean).strip().lower()
    return " ".join(word[:1].upper() + word[1:] for word in clean.split(" "))


def parse_clock(time_str: str) -> Optional[int]:
    """Parse "H:MM AM/PM" into minutes since midnight, or None if unparseable.

    Anything without a PM marker is read as AM. Seconds and other trailing
    parts are ignored; a missing or non-numeric minute counts as 0, and an
    empty hour (":30 PM") counts as hour 0.
    """
    if not time_str:
        return None

    clean = time_str.upper().strip()
    is_pm = "PM" in clean
    parts = clean.split(" ")[0].split(":")

    try:
        hours = int(parts[0]) if parts[0] else 0
    except ValueError:
        return None

    minutes = 0
    if len(parts) > 1:
        try:
            minutes = int(parts[1])
        except ValueError:
            minutes = 0

    if is_pm and hours != 12:
        hours += 12
    elif not is_pm and hours == 12:
        hours = 0

    total = hours * 60 + minutes
    if not 0 <= total < MINUTES_PER_DAY:
        return None
    return total


def parse_time(time_str: str) -> int:
    """Minutes since midnight for a 12-hour clock string; 0 on any failure.

    0 is therefore both midnight and "unparseable". Use parse_clock() when
    the difference matters.
    """
    minutes = parse_clock(time_str)
    return minutes if minutes is not None else 0


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as a 12-hour label, e.g. 570 -> "9:30 AM"."""
    hours, mins = divmod(minutes, 60)
    meridiem = "PM" if hours >= 12 else "AM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {meridiem}"


def _strip_quotes(field: str) -> str:
    if field.startswith('"') and field.endswith('"'):
        return field[1:-1]
    return field


def parse_csv_line(line: str) -> List[str]:
    """Split one CSV line on commas that are not inside double quotes.

    Every quote character flips the in-quotes state, so an unbalanced quote
    swallows the remaining commas of the line. Doubled quotes are not
    unescaped.
    """
    fields: List[str] = []
    start = 0
    in_quotes = False

    for i, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append(_strip_quotes(line[start:i]))
            start = i + 1

    fields.append(_strip_quotes(line[start:]))
    return fields
