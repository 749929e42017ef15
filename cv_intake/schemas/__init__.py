"""Schema exports."""

from .parsed_cv import (
    Award,
    Certification,
    CVParserResult,
    EducationEntry,
    ExtractedText,
    LanguageSkill,
    ParsedCVData,
    ParsingOptions,
    PersonalInfo,
    Project,
    Publication,
    Skills,
    WorkExperienceEntry,
)
from .validation import (
    FieldValidationStatus,
    GroupStatus,
    MVPData,
    OverallStatus,
    ParsedDataCheck,
    ProfileCompletionStatus,
    ValidationResult,
    ValidationWeights,
)

__all__ = [
    "Award",
    "Certification",
    "CVParserResult",
    "EducationEntry",
    "ExtractedText",
    "LanguageSkill",
    "ParsedCVData",
    "ParsingOptions",
    "PersonalInfo",
    "Project",
    "Publication",
    "Skills",
    "WorkExperienceEntry",
    "FieldValidationStatus",
    "GroupStatus",
    "MVPData",
    "OverallStatus",
    "ParsedDataCheck",
    "ProfileCompletionStatus",
    "ValidationResult",
    "ValidationWeights",
]
