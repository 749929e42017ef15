"""Profile-completion validation: field validators and the weighted MVP rubric."""

from .profile_validation import (
    DEFAULT_WEIGHTS,
    get_profile_completion_status,
    validate_profile_completion,
)
from .validators import (
    calculate_total_experience,
    is_valid_email,
    is_valid_experience_years,
    is_valid_phone,
    is_valid_proficiency,
    is_valid_url,
    validate_core_field,
)

__all__ = [
    "DEFAULT_WEIGHTS",
    "get_profile_completion_status",
    "validate_profile_completion",
    "calculate_total_experience",
    "is_valid_email",
    "is_valid_experience_years",
    "is_valid_phone",
    "is_valid_proficiency",
    "is_valid_url",
    "validate_core_field",
]
