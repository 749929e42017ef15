"""LLM-based extraction of structured CV data, with a self-contained regex fallback."""

import json
import re
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from cv_intake.config import (
    AI_MAX_INPUT_CHARS,
    AI_TEMPERATURE,
    AI_TIMEOUT_SECONDS,
    MODEL_NAME,
    OPENAI_API_KEY,
)
from cv_intake.schemas.parsed_cv import (
    Award,
    Certification,
    EducationEntry,
    LanguageSkill,
    ParsedCVData,
    PersonalInfo,
    Project,
    Publication,
    Skills,
    WorkExperienceEntry,
)
from cv_intake.utils.exceptions import (
    AIParserError,
    MissingCredentialError,
    ModelCallFailedError,
    UnparseableResponseError,
)
from cv_intake.utils.helpers import first_email, none_if_blank
from cv_intake.utils.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

CV_EXTRACTION_SYSTEM_PROMPT = """You are an expert CV/Resume parser.
Extract structured information from the CV text you are given and return it as valid JSON.
Return ONLY valid JSON, no additional text or formatting."""

CV_EXTRACTION_USER_PROMPT = """Required JSON structure:
{
  "personal": {
    "name": "string",
    "email": "string",
    "phone": "string",
    "location": "string",
    "portfolio": "string",
    "linkedin": "string",
    "summary": "string"
  },
  "workExperience": [
    {
      "jobTitle": "string",
      "company": "string",
      "industry": "string",
      "startDate": "string",
      "endDate": "string",
      "description": "string",
      "achievements": ["string"]
    }
  ],
  "skills": {
    "technical": ["string"],
    "design": ["string"],
    "tools": ["string"],
    "soft": ["string"]
  },
  "languages": [
    {
      "name": "string",
      "proficiency": "string"
    }
  ],
  "education": [
    {
      "degree": "string",
      "institution": "string",
      "year": "string",
      "gpa": "string"
    }
  ],
  "certifications": [
    {
      "name": "string",
      "issuer": "string",
      "year": "string"
    }
  ],
  "projects": [
    {
      "name": "string",
      "description": "string",
      "technologies": ["string"],
      "url": "string"
    }
  ]
}

Instructions:
1. Extract ALL available information from the CV text
2. If information is missing, use empty string "" or empty array []
3. Infer industry from company context when possible
4. Categorize skills appropriately (technical, design, tools, soft)
5. Be thorough - don't miss any details

CV Text to parse:
{cv_text}

Return valid JSON only:"""


def build_prompt(raw_text: str, max_chars: int = AI_MAX_INPUT_CHARS) -> str:
    """User prompt embedding the (truncated) CV text under the fixed schema description."""
    content = (raw_text or "")[:max_chars].strip()
    return CV_EXTRACTION_USER_PROMPT.replace("{cv_text}", content)


def extract_first_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} block in text, or None.

    Braces inside JSON string literals (and escaped quotes) are skipped, so
    commentary or code fences around the object do not matter.
    """
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def _score_confidence(data: ParsedCVData) -> float:
    score = 0
    if data.personal.name:
        score += 2
    if data.personal.email:
        score += 2
    if data.personal.phone:
        score += 1
    if data.work_experience:
        score += 2
    if any(e.job_title and e.company for e in data.work_experience):
        score += 1
    if data.education:
        score += 1
    if data.skills.all_skills():
        score += 1
    return min(score / 10, 1.0)


# --------------------------
# Lenient payload coercion
# --------------------------


def _clean(value: Any) -> Any:
    """Blank strings -> None, recursively; scalars other than str/bool are stringified."""
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    if isinstance(value, list):
        return [c for c in (_clean(v) for v in value) if c is not None]
    if isinstance(value, str):
        return none_if_blank(value)
    if value is None or isinstance(value, bool):
        return value
    return str(value)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _str_list(value: Any) -> List[str]:
    return [v for v in _as_list(value) if isinstance(v, str)]


def _validate_entries(model: Type[M], items: List[Any], errors: List[str], label: str) -> List[M]:
    entries: List[M] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            entries.append(model.model_validate(item))
        except ValidationError as e:
            errors.append(f"Skipped invalid {label} entry: {e.error_count()} error(s)")
    return entries


def coerce_ai_payload(payload: Dict[str, Any], raw_text: str) -> ParsedCVData:
    """Map a model's JSON object onto ParsedCVData without demanding schema-perfect output."""
    data = _clean(payload)
    errors: List[str] = []

    personal_raw = {
        k: v for k, v in _as_dict(data.get("personal")).items() if isinstance(v, str)
    }
    personal = _validate_entries(PersonalInfo, [personal_raw], errors, "personal")
    personal_info = personal[0] if personal else PersonalInfo()

    work_items = []
    for item in _as_list(data.get("workExperience") or data.get("work_experience")):
        if isinstance(item, dict):
            item = dict(item)
            for key in ("achievements", "technologies"):
                item[key] = _str_list(item.get(key))
            end = str(item.get("endDate") or "")
            if item.get("isCurrent") is None and re.search(r"present|current|now", end, re.IGNORECASE):
                item["isCurrent"] = True
            work_items.append(item)

    education_items = []
    for item in _as_list(data.get("education")):
        if isinstance(item, dict):
            item = dict(item)
            if item.get("year") and not item.get("endDate"):
                item["endDate"] = item["year"]
            for key in ("honors", "relevantCoursework"):
                item[key] = _str_list(item.get(key))
            education_items.append(item)

    cert_items = []
    for item in _as_list(data.get("certifications")):
        if isinstance(item, dict):
            item = dict(item)
            if item.get("year") and not item.get("date"):
                item["date"] = item["year"]
            cert_items.append(item)

    project_items = []
    for item in _as_list(data.get("projects")):
        if isinstance(item, dict):
            item = dict(item)
            item["technologies"] = _str_list(item.get("technologies"))
            project_items.append(item)

    skills_raw = _as_dict(data.get("skills"))
    language_items = []
    for lang in _as_list(data.get("languages")) + _as_list(skills_raw.get("languages")):
        if isinstance(lang, str):
            language_items.append({"name": lang})
        elif isinstance(lang, dict) and lang.get("name"):
            language_items.append(lang)

    skills = Skills(
        technical=_str_list(skills_raw.get("technical")),
        design=_str_list(skills_raw.get("design")),
        tools=_str_list(skills_raw.get("tools")),
        soft=_str_list(skills_raw.get("soft")),
        languages=_validate_entries(LanguageSkill, language_items, errors, "language"),
    )

    result = ParsedCVData(
        personal=personal_info,
        work_experience=_validate_entries(WorkExperienceEntry, work_items, errors, "work experience"),
        education=_validate_entries(EducationEntry, education_items, errors, "education"),
        skills=skills,
        certifications=_validate_entries(Certification, cert_items, errors, "certification"),
        projects=_validate_entries(Project, project_items, errors, "project"),
        awards=_validate_entries(Award, _as_list(data.get("awards")), errors, "award"),
        publications=_validate_entries(Publication, _as_list(data.get("publications")), errors, "publication"),
        raw_text=raw_text,
        errors=errors,
    )
    result.confidence = _score_confidence(result)
    return result


# --------------------------
# Regex fallback
# --------------------------


class RegexFallbackParser:
    """
    Reduced regex extraction used when the model path fails.

    Deliberately independent of CVAnalyzer: it keys on upper-case section
    headers and labelled lines ("Technical: ...", "English: Native").
    """

    HEADER_RE = re.compile(r"^[A-Z][A-Z &/]+$")
    PHONE_RE = re.compile(r"(?:\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})")
    LOCATION_LABEL_RE = re.compile(r"(?:Location|Address|Based in|Located in):\s*([^\n]+)", re.IGNORECASE)
    CITY_STATE_RE = re.compile(r"([A-Za-z][A-Za-z ]+,\s*[A-Z]{2}(?:\s+\d{5})?)\b")
    PORTFOLIO_RE = re.compile(r"(?:portfolio|website|site):\s*(https?://\S+)", re.IGNORECASE)
    LINKEDIN_RE = re.compile(r"(?:linkedin|linked-in):\s*(https?://\S+)", re.IGNORECASE)
    LANGUAGE_RE = re.compile(r"([A-Za-z]+):\s*(Native|Fluent|Advanced|Intermediate|Basic|Beginner)", re.IGNORECASE)
    GPA_RE = re.compile(r"GPA:\s*(\d+\.?\d*)", re.IGNORECASE)
    CERT_RE = re.compile(r"([^\n-]+?)\s*-\s*(\d{4})")
    DATE_TOKEN_RE = re.compile(r"[A-Za-z]+\s+\d{4}|\d{4}")
    JOB_RE = re.compile(r"^(.+?)\s+at\s+(.+)$")

    SKILL_LABELS = {
        "technical": ("Technical", "Programming", "Development"),
        "design": ("Design", "Creative", "Visual"),
        "tools": ("Tools", "Software", "Applications"),
        "soft": ("Soft", "Personal", "Communication"),
    }
    INDUSTRY_KEYWORDS = {
        "Technology": ("tech", "software", "digital", "app", "platform"),
        "Healthcare": ("health", "medical", "hospital", "clinic"),
        "Finance": ("bank", "financial", "investment", "capital"),
        "Retail": ("retail", "shop", "store", "commerce"),
        "Education": ("university", "school", "education", "academic"),
    }

    def __init__(self, text: str):
        self.text = text or ""
        self.lines = [line.strip() for line in self.text.split("\n")]

    def parse(self) -> ParsedCVData:
        data = ParsedCVData(
            personal=PersonalInfo(
                name=self.extract_name(),
                email=first_email(self.text),
                phone=self.extract_phone(),
                location=self.extract_location(),
                portfolio=self._first_group(self.PORTFOLIO_RE),
                linkedin=self._first_group(self.LINKEDIN_RE),
                summary=self._section_text(("PROFESSIONAL SUMMARY", "SUMMARY", "PROFILE", "ABOUT", "OVERVIEW")),
            ),
            work_experience=self.extract_work_experience(),
            education=self.extract_education(),
            skills=self.extract_skills(),
            certifications=self.extract_certifications(),
            raw_text=self.text,
        )
        data.confidence = _score_confidence(data)
        return data

    def _first_group(self, pattern: re.Pattern) -> Optional[str]:
        m = pattern.search(self.text)
        return none_if_blank(m.group(1)) if m else None

    def _section(self, names) -> List[str]:
        """Lines after the first header equal to one of names, up to the next upper-case header."""
        wanted = {n.upper() for n in names}
        body: List[str] = []
        inside = False
        for line in self.lines:
            if not inside:
                inside = line.upper().rstrip(":") in wanted
                continue
            if self.HEADER_RE.match(line):
                break
            if line:
                body.append(line)
        return body

    def _section_text(self, names) -> Optional[str]:
        return none_if_blank(" ".join(self._section(names)))

    def extract_name(self) -> Optional[str]:
        lines = [line for line in self.lines if line]
        if not lines:
            return None
        if not re.search(r"resume|cv|curriculum|vitae", lines[0], re.IGNORECASE):
            return lines[0]
        return lines[1] if len(lines) > 1 else None

    def extract_phone(self) -> Optional[str]:
        m = self.PHONE_RE.search(self.text)
        return m.group(0) if m else None

    def extract_location(self) -> Optional[str]:
        m = self.LOCATION_LABEL_RE.search(self.text)
        if m:
            return none_if_blank(m.group(1))
        m = self.CITY_STATE_RE.search(self.text)
        return none_if_blank(m.group(1)) if m else None

    def infer_industry(self, company: str) -> Optional[str]:
        lowered = (company or "").lower()
        for industry, keywords in self.INDUSTRY_KEYWORDS.items():
            if any(k in lowered for k in keywords):
                return industry
        return None

    def extract_work_experience(self) -> List[WorkExperienceEntry]:
        entries: List[WorkExperienceEntry] = []
        current: Optional[WorkExperienceEntry] = None
        description: List[str] = []

        def close() -> None:
            if current is not None:
                current.description = none_if_blank("\n".join(description))
                current.achievements = [
                    re.sub(r"^[•-]\s*", "", d).strip()
                    for d in description
                    if d.startswith(("•", "-")) and len(d) > 1
                ]
                entries.append(current)

        for line in self._section(("WORK EXPERIENCE", "EXPERIENCE", "EMPLOYMENT")):
            m = self.JOB_RE.match(line)
            if m:
                close()
                company = m.group(2).strip()
                current = WorkExperienceEntry(
                    job_title=m.group(1).strip(),
                    company=company,
                    industry=self.infer_industry(company),
                )
                description = []
            elif current is not None and current.start_date is None and re.search(r"\d{4}", line):
                dates = self.DATE_TOKEN_RE.findall(line)
                current.start_date = dates[0] if dates else None
                current.end_date = dates[1] if len(dates) > 1 else (dates[0] if dates else None)
                if re.search(r"present|current|now", line, re.IGNORECASE):
                    current.end_date = "Present"
                    current.is_current = True
            elif current is not None:
                description.append(line)
        close()
        return entries

    def extract_skills(self) -> Skills:
        section = "\n".join(self._section(("SKILLS", "TECHNICAL SKILLS", "COMPETENCIES")))
        buckets: Dict[str, List[str]] = {}
        for category, labels in self.SKILL_LABELS.items():
            buckets[category] = []
            for label in labels:
                m = re.search(rf"{label}:\s*([^\n]+)", section, re.IGNORECASE)
                if m:
                    buckets[category] = [s.strip() for s in m.group(1).split(",") if s.strip()]
                    break
        languages = [
            LanguageSkill(name=m.group(1).strip(), proficiency=m.group(2).strip())
            for m in self.LANGUAGE_RE.finditer("\n".join(self._section(("LANGUAGES",))))
        ]
        return Skills(languages=languages, **buckets)

    def extract_education(self) -> List[EducationEntry]:
        entries: List[EducationEntry] = []
        pending: List[str] = []
        for line in self._section(("EDUCATION",)):
            pending.append(line)
            if re.search(r"\d{4}", line) and len(pending) >= 2:
                year = re.search(r"\d{4}", line)
                gpa = self.GPA_RE.search(line)
                entries.append(
                    EducationEntry(
                        degree=pending[0],
                        institution=pending[1] if len(pending) > 2 else pending[1].split(",")[0],
                        end_date=year.group(0) if year else None,
                        gpa=gpa.group(1) if gpa else None,
                    )
                )
                pending = []
        return entries

    def extract_certifications(self) -> List[Certification]:
        section = "\n".join(self._section(("CERTIFICATIONS", "CERTIFICATES")))
        return [
            Certification(name=m.group(1).strip(), date=m.group(2))
            for m in self.CERT_RE.finditer(section)
        ]


# --------------------------
# Model-backed parser
# --------------------------


class AIParser:
    """
    CV parser backed by an OpenAI chat model.

    The API key is passed in explicitly; `from_config()` builds one from the
    environment configuration.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = MODEL_NAME,
        timeout_seconds: float = AI_TIMEOUT_SECONDS,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._client = client

    @classmethod
    def from_config(cls) -> "AIParser":
        return cls(api_key=OPENAI_API_KEY or None, model=MODEL_NAME, timeout_seconds=AI_TIMEOUT_SECONDS)

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise MissingCredentialError()
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                timeout=httpx.Timeout(self._timeout_seconds, connect=10.0),
            )
        return self._client

    async def _complete(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": CV_EXTRACTION_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=AI_TEMPERATURE,
            )
        except (OpenAIError, httpx.HTTPError) as e:
            raise ModelCallFailedError(f"Model call failed: {e}", details={"model": self.model}) from e

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message or not choice.message.content:
            raise UnparseableResponseError("Model returned an empty response")
        return choice.message.content

    async def parse_with_ai(self, raw_text: str) -> ParsedCVData:
        """
        Strict model-only parse.

        Raises:
            MissingCredentialError: no API key configured (no call is made)
            ModelCallFailedError: network, quota or timeout failure
            UnparseableResponseError: no JSON object in the reply, or not an object
        """
        if not self.has_credential:
            raise MissingCredentialError()

        logger.info("Starting AI CV parsing (model=%s, chars=%s)", self.model, len(raw_text or ""))
        response_text = await self._complete(build_prompt(raw_text))

        candidate = extract_first_json_object(response_text)
        if candidate is None:
            raise UnparseableResponseError("No valid JSON found in AI response", response_text)
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise UnparseableResponseError(f"AI response JSON is malformed: {e}", response_text) from e
        if not isinstance(payload, dict):
            raise UnparseableResponseError("AI response JSON is not an object", response_text)

        data = coerce_ai_payload(payload, raw_text)
        logger.info("AI parsing completed (confidence=%.2f)", data.confidence)
        return data

    def fallback_chain(self):
        """Model first, then the regex parser; only AIParserError triggers the fallback."""
        from cv_intake.cv_pipeline.strategies import AIStrategy, FallbackChain, RegexFallbackStrategy

        return FallbackChain([AIStrategy(self), RegexFallbackStrategy()], recoverable=(AIParserError,))

    async def parse_with_fallback(self, raw_text: str) -> ParsedCVData:
        """Model first; any AIParserError drops to the regex parser. Never raises for AI failures."""
        _, data = await self.fallback_chain().run(raw_text)
        return data
