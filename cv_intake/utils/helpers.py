"""Helper utilities shared by the CV parsers."""

import re
from typing import Iterable, List, Optional

EMAIL_PATTERN = r"(?<![A-Za-z0-9._%+-])[A-Za-z0-9._%+-][A-Za-z0-9._%+'-]*@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"
PHONE_PATTERN = r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"

_EMAIL_RE = re.compile(EMAIL_PATTERN)
_PHONE_RE = re.compile(PHONE_PATTERN)


def extract_emails(text: str) -> List[str]:
    """Extract email addresses from text using regex."""
    if not text:
        return []
    return list(dict.fromkeys(_EMAIL_RE.findall(text)))


def first_email(text: str) -> Optional[str]:
    emails = extract_emails(text)
    return emails[0] if emails else None


def first_phone(text: str) -> Optional[str]:
    """First phone-shaped match with inner whitespace collapsed."""
    if not text:
        return None
    m = _PHONE_RE.search(text)
    if not m:
        return None
    return re.sub(r"\s+", " ", m.group(0)).strip()


def unique(items: Iterable[str]) -> List[str]:
    """Drop duplicates (case-insensitive), keeping first-seen order and spelling."""
    seen: set[str] = set()
    result: List[str] = []
    for item in items:
        key = item.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(item.strip())
    return result


def none_if_blank(value: Optional[str]) -> Optional[str]:
    """Map empty / whitespace-only strings to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
