"""Utility exports."""

from .date_parser import contains_date, extract_date_range, parse_cv_date
from .helpers import extract_emails, first_email, first_phone, none_if_blank, unique
from .logger import get_logger

__all__ = [
    "get_logger",
    "extract_emails",
    "first_email",
    "first_phone",
    "none_if_blank",
    "unique",
    "contains_date",
    "extract_date_range",
    "parse_cv_date",
]
