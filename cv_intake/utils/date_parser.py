"""Parse the free-text dates found on CVs ("Jan 2020", "2019", "03/2021", "Present")."""

import re
from datetime import date
from typing import List, Optional, Tuple

MONTHS_ABBR = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sept|sep|oct|nov|dec)"
MONTHS_FULL = (
    r"(?:january|february|march|april|may|june|july|august|september|october|november|december)"
)
MONTH_WORD = rf"(?:{MONTHS_FULL}|{MONTHS_ABBR})"

YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
ANY_YEAR_RE = re.compile(r"\b\d{4}\b")
MONTH_YEAR_RE = re.compile(rf"\b{MONTH_WORD}\.?\s+(?:19|20)\d{{2}}\b", re.IGNORECASE)
NUMERIC_MONTH_YEAR_RE = re.compile(r"\b(0?[1-9]|1[0-2])[/.](?:19|20)\d{2}\b")
CURRENT_RE = re.compile(r"\b(?:present|current|now|today)\b", re.IGNORECASE)

# Tokens that may appear on a line holding nothing but a date range
_DATE_FILLER_RE = re.compile(
    rf"{MONTH_WORD}\.?|\b\d{{1,2}}[/.]\d{{4}}\b|\b\d{{4}}\b|present|current|now|today|\bto\b|\buntil\b|[-–—/|,.()\s]",
    re.IGNORECASE,
)


def contains_date(line: str) -> bool:
    """True when the line holds a 4-digit year or a month-year pair."""
    if not line:
        return False
    return bool(ANY_YEAR_RE.search(line) or MONTH_YEAR_RE.search(line))


def is_date_range_line(line: str) -> bool:
    """
    True when the line is only a date or date range, e.g. "Jan 2020 - Present".
    Such lines carry separators like " - " but must not be taken for job entries.
    """
    if not contains_date(line):
        return False
    return _DATE_FILLER_RE.sub("", line).strip() == ""


def extract_date_range(line: str) -> Tuple[Optional[str], Optional[str], bool]:
    """
    Pull (start, end, is_current) out of a line.
    Month-year tokens are preferred over bare years; a single date is both start
    and end unless the line says present/current/now, in which case end is "Present".
    """
    is_current = bool(CURRENT_RE.search(line or ""))
    tokens: List[str] = [m.group(0) for m in MONTH_YEAR_RE.finditer(line or "")]
    if not tokens:
        tokens = [m.group(0) for m in NUMERIC_MONTH_YEAR_RE.finditer(line or "")]
    if not tokens:
        tokens = YEAR_RE.findall(line or "")
    start = tokens[0] if tokens else None
    if len(tokens) > 1:
        end = tokens[1]
    elif is_current:
        end = "Present"
    else:
        end = start
    return (start, end, is_current)


def parse_cv_date(raw_text: Optional[str]) -> Optional[date]:
    """
    Parse a CV date into a date on the first of the month.
    Handles: "Jan 2020", "January 2020", "2020", "03/2020", "2020-03", "2020-03-14".
    Returns None for "Present", empty or unparseable values.
    """
    if not raw_text or not raw_text.strip():
        return None

    text = raw_text.strip().lower()
    if CURRENT_RE.fullmatch(text):
        return None

    # ---- ISO-style: 2020-03 or 2020-03-14 ----
    m = re.search(r"\b((?:19|20)\d{2})-(\d{1,2})(?:-(\d{1,2}))?\b", text)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3) or 1))
        except ValueError:
            pass

    # ---- Month name + year: Jan 2020 / January, 2020 ----
    m = re.search(rf"({MONTH_WORD})\.?\s*,?\s*((?:19|20)\d{{2}})", text)
    if m:
        try:
            return date(int(m.group(2)), _month_num(m.group(1)), 1)
        except (ValueError, KeyError):
            pass

    # ---- Numeric month/year: 03/2020 or 3.2020 ----
    m = re.search(r"\b(\d{1,2})[/.]((?:19|20)\d{2})\b", text)
    if m:
        try:
            return date(int(m.group(2)), int(m.group(1)), 1)
        except ValueError:
            pass

    # ---- Bare year ----
    m = YEAR_RE.search(text)
    if m:
        return date(int(m.group(0)), 1, 1)

    return None


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (negative when end precedes start)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def _month_num(mon_str: str) -> int:
    s = mon_str.lower()[:3]
    months = [
        "jan", "feb", "mar", "apr", "may", "jun",
        "jul", "aug", "sep", "oct", "nov", "dec",
    ]
    for i, m in enumerate(months, 1):
        if s == m or mon_str.lower().startswith(m):
            return i
    raise KeyError(mon_str)
