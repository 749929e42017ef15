"""Validation models for MVP profile completion."""

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FieldSeverity = Literal["error", "warning", "info"]
ValidationSeverity = Literal["error", "warning", "complete"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MVPData(_CamelModel):
    """Profile fields declared by the user, not derivable from CV text."""

    title: str = Field(default="", description="Professional title")
    availability: str = Field(default="", description="Available / Busy / Not Available")
    total_experience_years: float = Field(default=0, description="Declared total experience")
    skills_proficiency: Dict[str, float] = Field(default_factory=dict, description="Skill name -> 1..5")
    languages_proficiency: Dict[str, float] = Field(default_factory=dict, description="Language name -> 1..5")


class FieldValidationStatus(_CamelModel):
    is_valid: bool
    message: str = ""
    severity: FieldSeverity = "error"
    required: bool = True


class ValidationResult(_CamelModel):
    is_valid: bool = Field(..., description="True only when every rubric point is satisfied")
    missing_fields: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    field_validation: Dict[str, FieldValidationStatus] = Field(default_factory=dict)
    severity: ValidationSeverity = "error"


class GroupStatus(_CamelModel):
    completed: int
    total: int
    fields: Dict[str, bool] = Field(default_factory=dict)

    @property
    def percentage(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 0.0


class OverallStatus(_CamelModel):
    completed_fields: int
    total_fields: int
    percentage: int


class ProfileCompletionStatus(_CamelModel):
    core_profile: GroupStatus
    work_experience: GroupStatus
    skills: GroupStatus
    languages: GroupStatus
    overall: OverallStatus


class ValidationWeights(_CamelModel):
    core_profile: float = 0.5
    work_experience: float = 0.2
    skills: float = 0.2
    languages: float = 0.1


class ParsedDataCheck(_CamelModel):
    """Minimal presence check of a parse result (email, name, phone, experience, skills)."""

    is_valid: bool
    missing_fields: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
