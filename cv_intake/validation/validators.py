"""Pure field validators and helpers for profile completion."""

import math
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

from cv_intake.schemas.parsed_cv import Skills, WorkExperienceEntry
from cv_intake.schemas.validation import FieldValidationStatus
from cv_intake.utils.date_parser import months_between, parse_cv_date
from cv_intake.validation.constants import (
    EXPERIENCE_YEARS_MAX,
    EXPERIENCE_YEARS_MIN,
    PROFICIENCY_MAX,
    PROFICIENCY_MIN,
    REQUIRED_MESSAGE_KEYS,
    SUMMARY_MIN_LENGTH,
    VALIDATION_MESSAGES,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LINKEDIN_URL_RE = re.compile(r"^(https?://)?(www\.)?linkedin\.com/in/[\w-]+/?$", re.IGNORECASE)
GENERIC_URL_RE = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)/?$", re.IGNORECASE)
HOSTNAME_RE = re.compile(r"^[a-z0-9.-]+$|^\[[0-9a-f:.]+\]$", re.IGNORECASE)


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def is_valid_phone(phone: str) -> bool:
    """7-15 digits once every non-digit is stripped."""
    digits = re.sub(r"\D", "", phone or "")
    return 7 <= len(digits) <= 15


def _parses_as_url(url: str) -> bool:
    candidate = url if url.lower().startswith("http") else f"https://{url}"
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not hostname:
        return False
    return HOSTNAME_RE.match(hostname) is not None and not re.search(r"\s", parsed.netloc)


def is_valid_url(url: str) -> bool:
    """
    Permissive URL check: the protocol is optional.

    LinkedIn profile URLs are accepted first, then anything that parses as an
    http(s) URL once "https://" is prepended, then a bare domain pattern.
    """
    if not url or not url.strip():
        return False
    trimmed = url.strip()
    if LINKEDIN_URL_RE.match(trimmed):
        return True
    if _parses_as_url(trimmed):
        return True
    return GENERIC_URL_RE.match(trimmed) is not None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def is_valid_proficiency(level: Any) -> bool:
    number = _as_number(level)
    return number is not None and PROFICIENCY_MIN <= number <= PROFICIENCY_MAX


def is_valid_experience_years(years: Any) -> bool:
    number = _as_number(years)
    return number is not None and EXPERIENCE_YEARS_MIN <= number <= EXPERIENCE_YEARS_MAX


def field_status(
    is_valid: bool,
    message: str = "",
    severity: str = "error",
    required: bool = True,
) -> FieldValidationStatus:
    return FieldValidationStatus(is_valid=is_valid, message=message, severity=severity, required=required)


def _required_message(field_name: str) -> str:
    key = REQUIRED_MESSAGE_KEYS.get(field_name)
    if key:
        return VALIDATION_MESSAGES[key]
    return f"Please provide {field_name.replace('_', ' ')}"


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (int, float)):
        return value == 0
    return not value


def validate_core_field(field_name: str, value: Any, required: bool = True) -> FieldValidationStatus:
    """Presence check, then format check for email, phone, portfolio_url, summary and experience years."""
    if _is_blank(value):
        if required:
            return field_status(False, _required_message(field_name), "error", True)
        return field_status(True, "", "info", False)

    if field_name == "email" and isinstance(value, str) and not is_valid_email(value):
        return field_status(False, VALIDATION_MESSAGES["EMAIL_INVALID"], "error", required)

    if field_name == "phone" and isinstance(value, str) and not is_valid_phone(value):
        return field_status(False, VALIDATION_MESSAGES["PHONE_INVALID"], "error", required)

    if field_name == "portfolio_url" and isinstance(value, str) and not is_valid_url(value):
        return field_status(False, VALIDATION_MESSAGES["PORTFOLIO_INVALID"], "error", required)

    if field_name == "professional_summary" and isinstance(value, str) and len(value) < SUMMARY_MIN_LENGTH:
        return field_status(False, VALIDATION_MESSAGES["SUMMARY_TOO_SHORT"], "warning", required)

    if field_name == "total_experience_years" and not is_valid_experience_years(value):
        return field_status(False, VALIDATION_MESSAGES["EXPERIENCE_YEARS_INVALID"], "error", required)

    return field_status(True, "", "info", required)


def calculate_total_experience(
    work_experience: Sequence[WorkExperienceEntry],
    today: Optional[date] = None,
) -> float:
    """
    Sum of months across entries with a parseable start date, in years (1 decimal).
    Current or open-ended entries run to `today`; entries ending before they start count 0.
    """
    if not work_experience:
        return 0.0
    today = today or date.today()
    total_months = 0
    for exp in work_experience:
        start = parse_cv_date(exp.start_date)
        if start is None:
            continue
        end = today if exp.is_current else (parse_cv_date(exp.end_date) or today)
        if end > start:
            total_months += months_between(start, end)
    return math.floor(total_months / 12 * 10 + 0.5) / 10


def get_all_skills(skills: Optional[Skills]) -> List[str]:
    return skills.all_skills() if skills else []


def get_all_languages(skills: Optional[Skills]) -> List[str]:
    if not skills:
        return []
    return [lang.name for lang in skills.languages if lang.name]


def lookup_proficiency(proficiency_map: Mapping[str, Any], name: str) -> Any:
    """Exact key first, then a case-insensitive match."""
    if name in proficiency_map:
        return proficiency_map[name]
    lowered = name.strip().lower()
    for key, level in proficiency_map.items():
        if key.strip().lower() == lowered:
            return level
    return None


def all_rated(names: Sequence[str], proficiency_map: Optional[Dict[str, Any]]) -> bool:
    """True when there is at least one name and every name has a rating in range."""
    proficiency_map = proficiency_map or {}
    return bool(names) and all(
        is_valid_proficiency(lookup_proficiency(proficiency_map, name)) for name in names
    )
