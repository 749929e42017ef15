"""Reshape ParsedCVData into persistence-ready records (plain dicts, snake_case keys)."""

import re
from datetime import date
from typing import Any, Dict, List, Optional

from cv_intake.schemas.parsed_cv import ParsedCVData
from cv_intake.utils.date_parser import parse_cv_date
from cv_intake.validation.validators import calculate_total_experience

DEFAULT_INDUSTRY = "Other"
DEFAULT_SKILL_PROFICIENCY = 3
DEFAULT_LANGUAGE_PROFICIENCY = 3

# Checked in order; first substring hit wins
LANGUAGE_PROFICIENCY_LEVELS = (
    (("native", "fluent"), 5),
    (("advanced", "proficient"), 4),
    (("intermediate",), 3),
    (("basic", "beginner"), 2),
    (("elementary",), 1),
)

SKILL_CATEGORIES = (
    ("technical", "technical"),
    ("design", "design"),
    ("tools", "tool"),
    ("soft", "soft"),
)


def _iso(raw: Optional[str]) -> Optional[str]:
    parsed = parse_cv_date(raw)
    return parsed.isoformat() if parsed else None


def map_language_proficiency(proficiency: Optional[str]) -> int:
    if not proficiency:
        return DEFAULT_LANGUAGE_PROFICIENCY
    lowered = proficiency.lower()
    for words, level in LANGUAGE_PROFICIENCY_LEVELS:
        if any(w in lowered for w in words):
            return level
    return DEFAULT_LANGUAGE_PROFICIENCY


def parse_duration_months(duration: Optional[str]) -> Optional[int]:
    """'6 months' -> 6, '2 years' -> 24, anything else -> None."""
    if not duration:
        return None
    m = re.search(r"(\d+)\s*month", duration, re.IGNORECASE)
    if m:
        return int(m.group(1))
    m = re.search(r"(\d+)\s*year", duration, re.IGNORECASE)
    if m:
        return int(m.group(1)) * 12
    return None


def parse_gpa(gpa: Optional[str]) -> Optional[float]:
    """Leading number of a GPA string ('3.8/4.0' -> 3.8); None when not numeric."""
    if not gpa:
        return None
    m = re.match(r"\s*(\d+(?:\.\d+)?)", gpa)
    return float(m.group(1)) if m else None


def map_to_database(data: ParsedCVData, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Map parsed CV data to the record shapes a persistence layer stores.

    Title, availability and the stored CV file URL are not derivable from the
    CV and are left for the caller to fill in.
    """
    personal = data.personal

    skills: List[Dict[str, Any]] = []
    for attr, category in SKILL_CATEGORIES:
        for skill in getattr(data.skills, attr):
            skills.append(
                {
                    "skill_name": skill,
                    "category": category,
                    "proficiency_level": DEFAULT_SKILL_PROFICIENCY,
                }
            )

    return {
        "designer_profile": {
            "user_id": user_id,
            "name": personal.name,
            "email": personal.email or "",
            "phone": personal.phone or "",
            "location": personal.location,
            "portfolio_url": personal.portfolio or personal.linkedin or "",
            "professional_summary": personal.summary or "",
            "total_experience_years": calculate_total_experience(data.work_experience, today=today),
        },
        "work_experiences": [
            {
                "job_title": exp.job_title,
                "company_name": exp.company or "",
                "location": exp.location,
                "start_date": _iso(exp.start_date),
                "end_date": None if exp.is_current else _iso(exp.end_date),
                "is_current": bool(exp.is_current),
                "description": exp.description,
                "technologies_used": list(exp.technologies),
                "industry": exp.industry or DEFAULT_INDUSTRY,
            }
            for exp in data.work_experience
        ],
        "educations": [
            {
                "institution_name": edu.institution,
                "degree_type": edu.degree,
                "start_date": _iso(edu.start_date),
                "end_date": _iso(edu.end_date),
                "gpa": parse_gpa(edu.gpa),
                "honors": list(edu.honors),
            }
            for edu in data.education
        ],
        "skills": skills,
        "languages": [
            {
                "language_name": lang.name,
                "proficiency_level": map_language_proficiency(lang.proficiency),
                "is_native": "native" in (lang.proficiency or "").lower(),
            }
            for lang in data.skills.languages
        ],
        "certifications": [
            {
                "certification_name": cert.name,
                "issuing_organization": cert.issuer,
                "issue_date": _iso(cert.date),
                "credential_url": cert.url,
            }
            for cert in data.certifications
        ],
        "cv_projects": [
            {
                "project_name": project.name,
                "description": project.description,
                "technologies_used": list(project.technologies),
                "project_url": project.url,
                "duration_months": parse_duration_months(project.duration),
            }
            for project in data.projects
        ],
        "awards": [
            {
                "title": award.title,
                "issuing_organization": award.issuer,
                "issue_date": _iso(award.date),
                "description": award.description,
            }
            for award in data.awards
        ],
        "publications": [
            {
                "title": pub.title,
                "publisher": pub.publisher,
                "publication_date": _iso(pub.date),
                "publication_url": pub.url,
            }
            for pub in data.publications
        ],
    }
