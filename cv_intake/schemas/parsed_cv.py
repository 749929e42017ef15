"""Structured CV data produced by the parsing pipeline (heuristic or LLM)."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CVModel(BaseModel):
    """Base: snake_case in Python, camelCase on the wire (and in LLM JSON)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PersonalInfo(CVModel):
    name: Optional[str] = Field(default=None, description="Full name")
    email: Optional[str] = Field(default=None, description="Email address")
    phone: Optional[str] = Field(default=None, description="Phone number as written")
    location: Optional[str] = Field(default=None, description="City / region")
    linkedin: Optional[str] = Field(default=None, description="LinkedIn profile URL fragment")
    portfolio: Optional[str] = Field(default=None, description="Portfolio or personal website URL")
    summary: Optional[str] = Field(default=None, description="Professional summary / objective")


class WorkExperienceEntry(CVModel):
    job_title: Optional[str] = Field(default=None, description="Job title")
    company: Optional[str] = Field(default=None, description="Company or employer name")
    industry: Optional[str] = Field(default=None, description="Industry tag")
    location: Optional[str] = Field(default=None, description="Job location")
    start_date: Optional[str] = Field(default=None, description="Start date, free text (e.g. 'Jan 2020')")
    end_date: Optional[str] = Field(default=None, description="End date, free text or 'Present'")
    is_current: Optional[bool] = Field(default=None, description="True when this is the current position")
    description: Optional[str] = Field(default=None, description="Free-text description")
    achievements: List[str] = Field(default_factory=list, description="Bullet-point achievements")
    technologies: List[str] = Field(default_factory=list, description="Technologies used")


class EducationEntry(CVModel):
    degree: Optional[str] = Field(default=None, description="Degree name")
    institution: Optional[str] = Field(default=None, description="University / school")
    location: Optional[str] = Field(default=None, description="Institution location")
    start_date: Optional[str] = Field(default=None, description="Start date, free text")
    end_date: Optional[str] = Field(default=None, description="End / graduation date, free text")
    gpa: Optional[str] = Field(default=None, description="GPA as written (may be non-numeric)")
    honors: List[str] = Field(default_factory=list, description="Honors and distinctions")
    relevant_coursework: List[str] = Field(default_factory=list, description="Relevant coursework")


class LanguageSkill(CVModel):
    name: str = Field(..., description="Language name")
    proficiency: Optional[str] = Field(default=None, description="Proficiency word (Native, Fluent, ...)")


class Skills(CVModel):
    """Four independent skill buckets plus spoken languages."""

    technical: List[str] = Field(default_factory=list)
    design: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    languages: List[LanguageSkill] = Field(default_factory=list)

    def all_skills(self) -> List[str]:
        """Every skill across the four categories (languages excluded)."""
        return [*self.technical, *self.design, *self.tools, *self.soft]


class Certification(CVModel):
    name: Optional[str] = None
    issuer: Optional[str] = None
    date: Optional[str] = None
    url: Optional[str] = None


class Project(CVModel):
    name: Optional[str] = None
    description: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    duration: Optional[str] = None


class Award(CVModel):
    title: Optional[str] = None
    issuer: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None


class Publication(CVModel):
    title: Optional[str] = None
    publisher: Optional[str] = None
    date: Optional[str] = None
    url: Optional[str] = None


class ParsedCVData(CVModel):
    """Canonical output of a single parse attempt."""

    personal: PersonalInfo = Field(default_factory=PersonalInfo)
    work_experience: List[WorkExperienceEntry] = Field(default_factory=list, description="In document order")
    education: List[EducationEntry] = Field(default_factory=list, description="In document order")
    skills: Skills = Field(default_factory=Skills)
    certifications: List[Certification] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    awards: List[Award] = Field(default_factory=list)
    publications: List[Publication] = Field(default_factory=list)
    raw_text: str = Field(default="", description="Full extracted text")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="Heuristic extraction quality")
    errors: List[str] = Field(default_factory=list, description="Non-fatal extraction problems")

    @classmethod
    def empty(cls, raw_text: str = "", errors: Optional[List[str]] = None) -> "ParsedCVData":
        """Zero-confidence result with empty collections."""
        return cls(raw_text=raw_text, confidence=0.0, errors=list(errors or []))


class ExtractedText(BaseModel):
    """Raw text pulled out of an uploaded document."""

    content: str = Field(default="", description="Plain text content")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Format-specific details")


class ParsingOptions(CVModel):
    include_raw_text: bool = Field(default=True, description="Keep raw_text in the returned data")
    strict_parsing: bool = Field(default=False, description="Fail when the analysis recorded errors")
    use_ai: bool = Field(default=False, description="Use the LLM parser when one is configured")


class CVParserResult(CVModel):
    success: bool = Field(..., description="False on extraction failure or empty content")
    data: Optional[ParsedCVData] = None
    error: Optional[str] = None
    processing_time_ms: int = Field(default=0, description="Wall-clock milliseconds from entry")
    parsing_method: Optional[str] = Field(default=None, description="heuristic, ai or regex-fallback")
