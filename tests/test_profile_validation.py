"""Tests for the weighted profile-completion rubric."""

import pytest

from cv_intake.schemas.parsed_cv import LanguageSkill, ParsedCVData, PersonalInfo, Skills, WorkExperienceEntry
from cv_intake.schemas.validation import MVPData, ValidationWeights
from cv_intake.validation import get_profile_completion_status, validate_profile_completion
from cv_intake.validation.constants import MVP_REQUIRED_FIELDS, TOTAL_VALIDATION_POINTS

SUMMARY = "Product designer with eight years of experience shipping consumer mobile apps."


def _personal():
    return PersonalInfo(
        name="Jane Doe",
        email="jane.doe@example.com",
        phone="(555) 123-4567",
        portfolio="https://portfolio.example.com",
        summary=SUMMARY,
    )


@pytest.fixture
def core_only():
    return ParsedCVData(personal=_personal()), MVPData(title="Product Designer", availability="Available", total_experience_years=8)


@pytest.fixture
def complete():
    data = ParsedCVData(
        personal=_personal(),
        work_experience=[WorkExperienceEntry(job_title="Designer", company="Acme", industry="IT")],
        skills=Skills(design=["Figma"], languages=[LanguageSkill(name="English", proficiency="Native")]),
    )
    mvp = MVPData(
        title="Product Designer",
        availability="Available",
        total_experience_years=8,
        skills_proficiency={"Figma": 5},
        languages_proficiency={"English": 5},
    )
    return data, mvp


class TestWeightedCompletion:
    def test_core_only_is_fifty_and_invalid(self, core_only):
        result = validate_profile_completion(*core_only)
        assert result.completion_percentage == 50
        assert result.is_valid is False
        assert result.severity == "error"
        assert result.missing_fields == ["work_experience", "skills", "languages"]

    def test_complete_profile(self, complete):
        result = validate_profile_completion(*complete)
        assert result.completion_percentage == 100
        assert result.is_valid is True
        assert result.severity == "complete"
        assert result.missing_fields == []

    def test_one_unrated_language_blocks_validity(self, complete):
        data, mvp = complete
        mvp = mvp.model_copy(update={"languages_proficiency": {}})
        result = validate_profile_completion(data, mvp)
        assert result.completion_percentage == 95
        assert result.is_valid is False
        assert result.severity == "warning"
        assert result.missing_fields == ["languages_proficiency"]

    def test_empty_everything(self):
        result = validate_profile_completion(ParsedCVData())
        assert result.completion_percentage == 0
        assert result.severity == "error"
        assert len(result.missing_fields) == 11

    def test_custom_weights(self, core_only):
        weights = ValidationWeights(core_profile=1.0, work_experience=0, skills=0, languages=0)
        assert validate_profile_completion(*core_only, weights=weights).completion_percentage == 100

    def test_pure(self, complete):
        data, mvp = complete
        before = data.model_dump()
        assert validate_profile_completion(data, mvp) == validate_profile_completion(data, mvp)
        assert data.model_dump() == before


class TestCorePoints:
    def test_invalid_email_does_not_count(self, core_only):
        data, mvp = core_only
        data = data.model_copy(update={"personal": _personal().model_copy(update={"email": "not-an-email"})})
        result = validate_profile_completion(data, mvp)
        assert "email" in result.missing_fields
        assert result.completion_percentage == 44  # 7/8 core points * 50
        assert result.field_validation["email"].is_valid is False

    def test_zero_experience_is_missing(self, core_only):
        data, mvp = core_only
        result = validate_profile_completion(data, mvp.model_copy(update={"total_experience_years": 0}))
        assert "total_experience_years" in result.missing_fields

    def test_experience_derived_from_work_history(self, core_only):
        data, mvp = core_only
        data = data.model_copy(
            update={"work_experience": [WorkExperienceEntry(start_date="2015", end_date="2020", industry="IT")]}
        )
        result = validate_profile_completion(data, mvp.model_copy(update={"total_experience_years": 0}))
        assert "total_experience_years" not in result.missing_fields

    def test_linkedin_satisfies_portfolio(self, core_only):
        data, mvp = core_only
        personal = _personal().model_copy(update={"portfolio": None, "linkedin": "www.linkedin.com/in/janedoe"})
        result = validate_profile_completion(data.model_copy(update={"personal": personal}), mvp)
        assert "portfolio_url" not in result.missing_fields


class TestWorkExperienceGroup:
    def test_missing_industry(self, complete):
        data, mvp = complete
        data = data.model_copy(update={"work_experience": [WorkExperienceEntry(job_title="Designer", company="Acme")]})
        result = validate_profile_completion(data, mvp)
        assert result.missing_fields == ["work_experience_industries"]

    def test_missing_company_is_only_a_warning(self, complete):
        data, mvp = complete
        data = data.model_copy(update={"work_experience": [WorkExperienceEntry(job_title="Designer", industry="IT")]})
        result = validate_profile_completion(data, mvp)
        assert result.is_valid is True
        assert result.field_validation["work_experience_companies"].severity == "warning"
        assert "Please provide company name for all work experiences" in result.suggestions


class TestCompletionStatus:
    def test_group_counts(self, core_only):
        status = get_profile_completion_status(*core_only)
        assert (status.core_profile.completed, status.core_profile.total) == (8, 8)
        assert status.work_experience.completed == 0
        assert status.overall.completed_fields == 8
        assert status.overall.total_fields == 14
        assert status.overall.percentage == 57

    def test_skill_rated_under_other_name_does_not_count(self, complete):
        data, mvp = complete
        mvp = mvp.model_copy(update={"skills_proficiency": {"Sketch": 4}})
        status = get_profile_completion_status(data, mvp)
        assert status.skills.fields == {"has_skills": True, "skills_proficiency": False}

    def test_group_fields_follow_rubric_points(self, complete):
        """Every rubric point appears once, in the group the rubric puts it in."""
        status = get_profile_completion_status(*complete)
        for group, points in MVP_REQUIRED_FIELDS.items():
            assert tuple(getattr(status, group).fields) == points
        assert status.overall.total_fields == TOTAL_VALIDATION_POINTS == 14
        assert status.overall.percentage == 100
