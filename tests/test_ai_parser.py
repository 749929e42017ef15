"""Tests for the model-backed parser, its JSON handling and the regex fallback."""

import asyncio
import json

import httpx
import openai
import pytest

from cv_intake.cv_pipeline.ai_parser import (
    AIParser,
    RegexFallbackParser,
    build_prompt,
    coerce_ai_payload,
    extract_first_json_object,
)
from cv_intake.utils.exceptions import (
    MissingCredentialError,
    ModelCallFailedError,
    UnparseableResponseError,
)

MODEL_PAYLOAD = {
    "personal": {
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
        "phone": "",
        "location": "Lisbon",
        "portfolio": "",
        "linkedin": "",
        "summary": "Product designer.",
    },
    "workExperience": [
        {
            "jobTitle": "Senior Product Designer",
            "company": "Acme Corp",
            "industry": "Technology",
            "startDate": "Jan 2020",
            "endDate": "Present",
            "description": "Led design.",
            "achievements": ["Shipped onboarding"],
        }
    ],
    "skills": {"technical": [], "design": ["Figma"], "tools": ["Jira"], "soft": []},
    "languages": [{"name": "English", "proficiency": "Native"}],
    "education": [{"degree": "BA Design", "institution": "Example University", "year": "2016", "gpa": ""}],
    "certifications": [{"name": "CUA", "issuer": "HFI", "year": "2019"}],
    "projects": [],
}


class TestExtractFirstJsonObject:
    """Tests for locating a JSON object inside a model reply."""

    def test_object_inside_commentary_and_fences(self):
        text = 'Here you go:\n```json\n{"a": 1, "b": {"c": 2}}\n```\nAnything else?'
        assert json.loads(extract_first_json_object(text)) == {"a": 1, "b": {"c": 2}}

    def test_braces_inside_strings_are_ignored(self):
        text = 'x {"a": "close } and open {", "b": "say \\"hi\\" }"} trailing }'
        assert json.loads(extract_first_json_object(text)) == {"a": "close } and open {", "b": 'say "hi" }'}

    def test_no_object(self):
        assert extract_first_json_object("no json here") is None
        assert extract_first_json_object("") is None

    def test_unbalanced_then_balanced(self):
        assert extract_first_json_object('{ broken {"ok": true}') == '{"ok": true}'


class TestCoercion:
    """Tests for lenient mapping of model JSON onto ParsedCVData."""

    def test_maps_payload(self):
        data = coerce_ai_payload(MODEL_PAYLOAD, "raw")
        assert data.personal.name == "Jane Doe"
        assert data.personal.phone is None
        assert data.personal.portfolio is None
        job = data.work_experience[0]
        assert job.job_title == "Senior Product Designer"
        assert job.is_current is True
        assert job.achievements == ["Shipped onboarding"]
        assert data.skills.design == ["Figma"]
        assert data.skills.languages[0].name == "English"
        assert data.education[0].end_date == "2016"
        assert data.education[0].gpa is None
        assert data.certifications[0].date == "2019"
        assert data.raw_text == "raw"
        assert 0.0 < data.confidence <= 1.0

    def test_wrong_shapes_are_dropped(self):
        """Non-list collections and non-dict entries are ignored rather than failing."""
        payload = {"personal": ["not", "a", "dict"], "workExperience": "none", "skills": {"design": "Figma"}}
        data = coerce_ai_payload(payload, "")
        assert data.personal.name is None
        assert data.work_experience == []
        assert data.skills.design == []

    def test_language_strings_accepted(self):
        data = coerce_ai_payload({"skills": {"languages": ["French"]}}, "")
        assert data.skills.languages[0].name == "French"
        assert data.skills.languages[0].proficiency is None


class TestParseWithAI:
    """Tests for the strict model-only path."""

    def test_missing_credential_fails_fast(self):
        parser = AIParser(api_key=None)
        with pytest.raises(MissingCredentialError):
            asyncio.run(parser.parse_with_ai("Jane Doe"))

    def test_parses_model_reply(self, mock_openai_client):
        client = mock_openai_client("Sure!\n```json\n" + json.dumps(MODEL_PAYLOAD) + "\n```")
        parser = AIParser(api_key="test-key", model="gpt-test", client=client)

        data = asyncio.run(parser.parse_with_ai("Jane Doe CV text"))

        assert data.personal.email == "jane.doe@example.com"
        assert data.raw_text == "Jane Doe CV text"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.1
        assert "Jane Doe CV text" in kwargs["messages"][1]["content"]

    def test_sdk_error_is_model_call_failure(self, mock_openai_client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = mock_openai_client(side_effect=openai.APIConnectionError(request=request))
        parser = AIParser(api_key="test-key", client=client)
        with pytest.raises(ModelCallFailedError):
            asyncio.run(parser.parse_with_ai("text"))

    def test_timeout_is_model_call_failure(self, mock_openai_client):
        client = mock_openai_client(side_effect=httpx.ReadTimeout("timed out"))
        parser = AIParser(api_key="test-key", client=client)
        with pytest.raises(ModelCallFailedError):
            asyncio.run(parser.parse_with_ai("text"))

    @pytest.mark.parametrize("reply", ["I cannot help with that.", "[1, 2, 3]", '{"a": tru}', ""])
    def test_unusable_reply_is_unparseable(self, mock_openai_client, reply):
        parser = AIParser(api_key="test-key", client=mock_openai_client(reply))
        with pytest.raises(UnparseableResponseError):
            asyncio.run(parser.parse_with_ai("text"))

    def test_prompt_truncates_input(self):
        prompt = build_prompt("x" * 50, max_chars=10)
        assert "x" * 10 in prompt
        assert "x" * 11 not in prompt
        assert '"workExperience"' in prompt


class TestParseWithFallback:
    """Tests for model-first parsing with the regex fallback."""

    def test_missing_credential_uses_regex(self, sample_cv_text):
        data = asyncio.run(AIParser(api_key=None).parse_with_fallback(sample_cv_text))
        assert data.personal.name == "Jane Doe"
        assert data.work_experience[0].company == "Acme Corp"

    def test_model_failure_uses_regex(self, mock_openai_client, sample_cv_text):
        client = mock_openai_client(side_effect=httpx.ConnectError("refused"))
        data = asyncio.run(AIParser(api_key="k", client=client).parse_with_fallback(sample_cv_text))
        assert data.personal.email == "jane.doe@example.com"

    def test_garbage_reply_uses_regex(self, mock_openai_client, sample_cv_text):
        client = mock_openai_client("no json at all")
        data = asyncio.run(AIParser(api_key="k", client=client).parse_with_fallback(sample_cv_text))
        assert data.personal.name == "Jane Doe"

    def test_model_success_is_used(self, mock_openai_client):
        client = mock_openai_client(json.dumps(MODEL_PAYLOAD))
        data = asyncio.run(AIParser(api_key="k", client=client).parse_with_fallback("anything"))
        assert data.work_experience[0].industry == "Technology"


class TestRegexFallbackParser:
    """Tests for the self-contained regex parser."""

    def test_sample_cv(self, sample_cv_text):
        data = RegexFallbackParser(sample_cv_text).parse()
        assert data.personal.name == "Jane Doe"
        assert data.personal.email == "jane.doe@example.com"
        assert data.personal.phone == "(555) 123-4567"
        assert data.personal.summary.startswith("Experienced product designer")
        job = data.work_experience[0]
        assert (job.job_title, job.company) == ("Senior Product Designer", "Acme Corp")
        assert job.is_current is True
        assert job.start_date == "Jan 2020"
        assert data.skills.technical == ["Figma", "Sketch"]
        assert 0.0 <= data.confidence <= 1.0

    def test_skips_resume_header_for_name(self):
        data = RegexFallbackParser("RESUME\nJohn Smith\njohn@example.com").parse()
        assert data.personal.name == "John Smith"

    def test_sections(self):
        text = "\n".join(
            [
                "John Smith",
                "Location: Austin, TX",
                "LinkedIn: https://linkedin.com/in/jsmith",
                "EXPERIENCE",
                "Designer at Bright Software",
                "2019 - 2021",
                "• Built the design system",
                "EDUCATION",
                "BA Design",
                "Example University",
                "2018 GPA: 3.6",
                "LANGUAGES",
                "Spanish: Fluent",
                "CERTIFICATIONS",
                "Certified Scrum Master - 2020",
            ]
        )
        data = RegexFallbackParser(text).parse()
        assert data.personal.location == "Austin, TX"
        assert data.personal.linkedin == "https://linkedin.com/in/jsmith"
        job = data.work_experience[0]
        assert job.industry == "Technology"
        assert job.achievements == ["Built the design system"]
        assert data.education[0].degree == "BA Design"
        assert data.education[0].institution == "Example University"
        assert data.education[0].gpa == "3.6"
        assert data.skills.languages[0].name == "Spanish"
        assert data.certifications[0].name == "Certified Scrum Master"
        assert data.certifications[0].date == "2020"


class TestConstruction:
    def test_from_config(self, monkeypatch):
        from cv_intake.cv_pipeline import ai_parser

        monkeypatch.setattr(ai_parser, "OPENAI_API_KEY", "")
        assert AIParser.from_config().has_credential is False
        monkeypatch.setattr(ai_parser, "OPENAI_API_KEY", "sk-test")
        assert AIParser.from_config().has_credential is True
