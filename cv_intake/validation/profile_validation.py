"""
Weighted MVP profile-completion check.

Fourteen points in four groups (core profile 8, work experience 2, skills 2,
languages 2). The weighted percentage is progress feedback; `is_valid` is
the strict gate and needs every point satisfied.
"""

from typing import Dict, List, Optional, Tuple

from cv_intake.schemas.parsed_cv import ParsedCVData
from cv_intake.schemas.validation import (
    FieldValidationStatus,
    GroupStatus,
    MVPData,
    OverallStatus,
    ProfileCompletionStatus,
    ValidationResult,
    ValidationWeights,
)
from cv_intake.utils.logger import get_logger
from cv_intake.validation.constants import (
    MVP_REQUIRED_FIELDS,
    TOTAL_VALIDATION_POINTS,
    VALIDATION_MESSAGES,
    WARNING_THRESHOLD,
)
from cv_intake.validation.validators import (
    all_rated,
    calculate_total_experience,
    field_status,
    get_all_languages,
    get_all_skills,
    validate_core_field,
)

logger = get_logger(__name__)

DEFAULT_WEIGHTS = ValidationWeights()

# (missing_fields, suggestions, field_validation) for one group
_GroupCheck = Tuple[List[str], List[str], Dict[str, FieldValidationStatus]]


def _total_experience(data: ParsedCVData, mvp_data: MVPData) -> float:
    return mvp_data.total_experience_years or calculate_total_experience(data.work_experience)


def _core_fields(data: ParsedCVData, mvp_data: MVPData) -> Dict[str, object]:
    return {
        "name": data.personal.name,
        "email": data.personal.email,
        "phone": data.personal.phone,
        "title": mvp_data.title,
        "availability": mvp_data.availability,
        "portfolio_url": data.personal.portfolio or data.personal.linkedin,
        "professional_summary": data.personal.summary,
        "total_experience_years": _total_experience(data, mvp_data),
    }


def _validate_core_profile(data: ParsedCVData, mvp_data: MVPData) -> _GroupCheck:
    missing: List[str] = []
    suggestions: List[str] = []
    field_validation: Dict[str, FieldValidationStatus] = {}

    for field_name, value in _core_fields(data, mvp_data).items():
        status = validate_core_field(field_name, value)
        field_validation[field_name] = status
        if not status.is_valid:
            missing.append(field_name)
            suggestions.append(status.message)
    return missing, suggestions, field_validation


def _validate_work_experience(data: ParsedCVData) -> _GroupCheck:
    if not data.work_experience:
        message = VALIDATION_MESSAGES["WORK_EXPERIENCE_REQUIRED"]
        return ["work_experience"], [message], {"work_experience": field_status(False, message)}

    missing: List[str] = []
    suggestions: List[str] = []
    field_validation: Dict[str, FieldValidationStatus] = {}

    missing_industries = any(not exp.industry for exp in data.work_experience)
    if missing_industries:
        missing.append("work_experience_industries")
        suggestions.append(VALIDATION_MESSAGES["WORK_EXPERIENCE_INDUSTRY_REQUIRED"])

    # company names are not a rubric point: surfaced as a warning only
    if any(not exp.company for exp in data.work_experience):
        suggestions.append(VALIDATION_MESSAGES["WORK_EXPERIENCE_COMPANY_REQUIRED"])
        field_validation["work_experience_companies"] = field_status(
            False, VALIDATION_MESSAGES["WORK_EXPERIENCE_COMPANY_REQUIRED"], "warning", False
        )

    field_validation["work_experience"] = field_status(
        not missing_industries,
        VALIDATION_MESSAGES["WORK_EXPERIENCE_INCOMPLETE"] if missing_industries else "",
    )
    return missing, suggestions, field_validation


def _validate_rated_group(
    key: str,
    names: List[str],
    proficiency_map: Dict[str, float],
    required_message: str,
    proficiency_message: str,
) -> _GroupCheck:
    if not names:
        return [key], [required_message], {key: field_status(False, required_message)}

    rated = all_rated(names, proficiency_map)
    if rated:
        return [], [], {key: field_status(True)}
    return (
        [f"{key}_proficiency"],
        [proficiency_message],
        {key: field_status(False, proficiency_message)},
    )


def get_profile_completion_status(
    data: ParsedCVData,
    mvp_data: Optional[MVPData] = None,
) -> ProfileCompletionStatus:
    """Per-group completed/total counts. A core point counts only when its field validator passes."""
    mvp_data = mvp_data or MVPData()

    points = {
        name: validate_core_field(name, value).is_valid
        for name, value in _core_fields(data, mvp_data).items()
    }

    has_experience = bool(data.work_experience)
    points["has_work_experience"] = has_experience
    points["work_experience_industries"] = has_experience and all(
        exp.industry for exp in data.work_experience
    )

    skills = get_all_skills(data.skills)
    points["has_skills"] = bool(skills)
    points["skills_proficiency"] = all_rated(skills, mvp_data.skills_proficiency)

    languages = get_all_languages(data.skills)
    points["has_languages"] = bool(languages)
    points["languages_proficiency"] = all_rated(languages, mvp_data.languages_proficiency)

    groups = {}
    for group, names in MVP_REQUIRED_FIELDS.items():
        fields = {name: points[name] for name in names}
        groups[group] = GroupStatus(completed=sum(fields.values()), total=len(fields), fields=fields)

    completed = sum(g.completed for g in groups.values())
    return ProfileCompletionStatus(
        **groups,
        overall=OverallStatus(
            completed_fields=completed,
            total_fields=TOTAL_VALIDATION_POINTS,
            percentage=int(completed / TOTAL_VALIDATION_POINTS * 100 + 0.5),
        ),
    )


def calculate_weighted_completion(status: ProfileCompletionStatus, weights: ValidationWeights) -> int:
    weighted = (
        status.core_profile.percentage * weights.core_profile
        + status.work_experience.percentage * weights.work_experience
        + status.skills.percentage * weights.skills
        + status.languages.percentage * weights.languages
    )
    # half-up, not banker's rounding
    return min(100, max(0, int(weighted + 0.5)))


def validate_profile_completion(
    data: ParsedCVData,
    mvp_data: Optional[MVPData] = None,
    weights: ValidationWeights = DEFAULT_WEIGHTS,
) -> ValidationResult:
    """
    Check a parsed CV plus user-declared MVP data against the completion rubric.

    Pure: never raises for incomplete data, and identical inputs give identical results.

    Returns:
        ValidationResult with the weighted percentage, the missing rubric
        points, one suggestion per problem and per-field statuses.
    """
    mvp_data = mvp_data or MVPData()
    missing_fields: List[str] = []
    suggestions: List[str] = []
    field_validation: Dict[str, FieldValidationStatus] = {}

    checks = [
        _validate_core_profile(data, mvp_data),
        _validate_work_experience(data),
        _validate_rated_group(
            "skills",
            get_all_skills(data.skills),
            mvp_data.skills_proficiency,
            VALIDATION_MESSAGES["SKILLS_REQUIRED"],
            VALIDATION_MESSAGES["SKILLS_PROFICIENCY_REQUIRED"],
        ),
        _validate_rated_group(
            "languages",
            get_all_languages(data.skills),
            mvp_data.languages_proficiency,
            VALIDATION_MESSAGES["LANGUAGES_REQUIRED"],
            VALIDATION_MESSAGES["LANGUAGES_PROFICIENCY_REQUIRED"],
        ),
    ]
    for missing, group_suggestions, group_fields in checks:
        missing_fields.extend(missing)
        suggestions.extend(group_suggestions)
        field_validation.update(group_fields)

    completion = calculate_weighted_completion(get_profile_completion_status(data, mvp_data), weights)
    is_valid = not missing_fields
    if is_valid:
        severity = "complete"
    elif completion > WARNING_THRESHOLD:
        severity = "warning"
    else:
        severity = "error"

    logger.debug("Profile completion %s%% (%s missing)", completion, len(missing_fields))
    return ValidationResult(
        is_valid=is_valid,
        missing_fields=missing_fields,
        suggestions=suggestions,
        completion_percentage=completion,
        field_validation=field_validation,
        severity=severity,
    )
