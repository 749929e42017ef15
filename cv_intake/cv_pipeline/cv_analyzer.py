"""
Heuristic CV analysis: section detection plus field-level regexes.

Turns one raw-text blob into ParsedCVData without any model call. Section
bodies are found with an explicit state walk over the trimmed, non-empty
lines of the document:

    SEEKING_SECTION -> (header of the wanted kind) -> IN_SECTION
    IN_SECTION      -> (entry line)                -> IN_ENTRY
    IN_ENTRY        -> (entry line)                -> IN_ENTRY   (closes the open record)
    any             -> (header of another kind)    -> done       (closes the open record)

The heuristics misclassify now and then (a skill is bucketed by its own
keywords, not by the label it was listed under). That is the documented
behaviour and callers rely on it staying stable.
"""

import re
from enum import Enum
from typing import Callable, Dict, List, Optional, TypeVar

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
from cv_intake.utils.date_parser import (
    YEAR_RE,
    contains_date,
    extract_date_range,
    is_date_range_line,
)
from cv_intake.utils.exceptions import AnalysisError
from cv_intake.utils.helpers import first_email, first_phone, unique
from cv_intake.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SECTION_HEADERS = (
    "experience",
    "education",
    "skills",
    "projects",
    "awards",
    "publications",
    "certifications",
)
MAX_HEADER_LENGTH = 50

SUMMARY_KEYWORDS = ("summary", "objective", "profile", "about", "overview")
SUMMARY_MAX_LINES = 10

JOB_SEPARATORS = (" at ", " - ", " – ", " | ")
JOB_SPLIT_RE = re.compile(r"\s+(?:at|@|-|–|\|)\s+")
JOB_LINE_MIN, JOB_LINE_MAX = 10, 100

EDUCATION_KEYWORDS = ("university", "college", "institute", "school", "bachelor", "master", "phd", "degree")
DEGREE_KEYWORDS = ("bachelor", "master", "phd", "ph.d", "degree", "diploma", "mba", "b.sc", "m.sc", "b.a.", "m.a.")
INSTITUTION_KEYWORDS = ("university", "college", "institute", "school", "academy")
HONORS_KEYWORDS = ("cum laude", "honors", "honours", "distinction", "dean's list", "valedictorian")

DESIGN_KEYWORDS = ("ui", "ux", "design", "figma", "sketch", "adobe", "photoshop", "illustrator", "indesign")
TECHNICAL_KEYWORDS = ("javascript", "python", "java", "react", "angular", "vue", "node", "sql", "html", "css")
TOOL_KEYWORDS = ("git", "docker", "kubernetes", "aws", "azure", "jenkins", "jira", "confluence")
SKILL_SPLIT_RE = re.compile(r"[,;|•·]")
SKILL_LABEL_RE = re.compile(r"^[A-Za-z][A-Za-z &/+-]{1,30}:\s*")
SKILL_MIN, SKILL_MAX = 2, 29

LANGUAGES_HEADING_RE = re.compile(r"^languages?\s*:?\s*$", re.IGNORECASE)
LANGUAGE_PAIR_RE = re.compile(
    r"([A-Za-z]+)\s*:\s*(Native|Fluent|Proficient|Advanced|Intermediate|Basic|Beginner|Elementary)",
    re.IGNORECASE,
)

CERT_KEYWORDS = ("certification", "certificate", "certified", "license")
AWARD_KEYWORDS = ("award", "honor", "recognition", "achievement")
PUBLICATION_KEYWORDS = ("publication", "paper", "article", "journal")

LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/(?:in|pub)/[\w-]+/?", re.IGNORECASE)
PORTFOLIO_RE = re.compile(
    r"(?:portfolio|website|site)\s*:\s*((?:https?://)?[\w.-]+\.[a-z]{2,}[^\s,;]*)", re.IGNORECASE
)
LOCATION_RE = re.compile(
    r"(?:(?:location|address)\s*:|\b(?:based|located)\s+in\b)\s*([^\n|]{2,60})", re.IGNORECASE
)
GPA_RE = re.compile(r"\bGPA\s*[:\-]?\s*(\d+(?:\.\d+)?(?:\s*/\s*\d+(?:\.\d+)?)?)", re.IGNORECASE)
COURSEWORK_RE = re.compile(r"^(?:relevant\s+)?coursework\s*:\s*(.+)$", re.IGNORECASE)
TECHNOLOGIES_RE = re.compile(r"^(?:technologies|tech stack|tools|stack)\s*:\s*(.+)$", re.IGNORECASE)
BULLET_RE = re.compile(r"^[•\-*▪◦]\s*")


class SectionState(Enum):
    SEEKING_SECTION = "seeking_section"
    IN_SECTION = "in_section"
    IN_ENTRY = "in_entry"


def is_section_header(line: str) -> bool:
    """Short line whose lowercase form names a known CV section."""
    if LANGUAGES_HEADING_RE.match(line):
        return True
    lowered = line.lower()
    return len(line) < MAX_HEADER_LENGTH and any(h in lowered for h in SECTION_HEADERS)


def looks_like_job_entry(line: str) -> bool:
    """'Title at Company', 'Title - Company' or 'Title | Company' of plausible length."""
    if not any(sep in line for sep in JOB_SEPARATORS):
        return False
    if not (JOB_LINE_MIN <= len(line) < JOB_LINE_MAX):
        return False
    return not is_date_range_line(line)


def parse_job_line(line: str) -> WorkExperienceEntry:
    parts = [p.strip() for p in JOB_SPLIT_RE.split(line) if p.strip()]
    return WorkExperienceEntry(
        job_title=parts[0] if parts else None,
        company=parts[1] if len(parts) > 1 else None,
        location=parts[2] if len(parts) > 2 else None,
    )


def looks_like_education_entry(line: str) -> bool:
    lowered = line.lower()
    return any(k in lowered for k in EDUCATION_KEYWORDS)


def parse_education_line(line: str) -> EducationEntry:
    parts = [p.strip() for p in re.split(r"\s+(?:at|-|–|\|)\s+|,\s*", line) if p.strip()]
    degree = next((p for p in parts if _has_any(p, DEGREE_KEYWORDS)), None)
    institution = next((p for p in parts if _has_any(p, INSTITUTION_KEYWORDS) and p != degree), None)
    if degree is None and institution is None:
        institution = line
    entry = EducationEntry(degree=degree, institution=institution)
    years = YEAR_RE.findall(line)
    if years:
        entry.start_date = years[0]
        entry.end_date = years[1] if len(years) > 1 else years[0]
    return entry


def classify_skill(skill: str) -> str:
    """Bucket one skill token by its own keywords: design, technical, tools, else soft."""
    lowered = skill.lower()
    if _has_any(lowered, DESIGN_KEYWORDS):
        return "design"
    if _has_any(lowered, TECHNICAL_KEYWORDS):
        return "technical"
    if _has_any(lowered, TOOL_KEYWORDS):
        return "tools"
    return "soft"


def split_skill_line(line: str) -> List[str]:
    """Split a skills line on common delimiters, dropping a leading 'Label:' prefix."""
    body = SKILL_LABEL_RE.sub("", BULLET_RE.sub("", line), count=1)
    tokens = [t.strip() for t in SKILL_SPLIT_RE.split(body)]
    return [t for t in tokens if SKILL_MIN <= len(t) <= SKILL_MAX]


def calculate_confidence(
    personal: PersonalInfo,
    work_experience: List[WorkExperienceEntry],
    education: List[EducationEntry],
    skills: Skills,
) -> float:
    """0-10 point rubric normalized to [0, 1]."""
    score = 0
    max_score = 10

    if personal.name:
        score += 2
    if personal.email:
        score += 2
    if personal.phone:
        score += 1

    if work_experience:
        score += 2
    if any(exp.job_title and exp.company for exp in work_experience):
        score += 1

    if education:
        score += 1

    if skills.all_skills():
        score += 1

    return min(score / max_score, 1.0)


def _has_any(text: str, keywords) -> bool:
    lowered = text.lower()
    return any(k in lowered for k in keywords)


def _strip_bullet(line: str) -> str:
    return BULLET_RE.sub("", line).strip()


class CVAnalyzer:
    """Section-aware heuristic parser over one CV's text."""

    def __init__(self, text: str):
        self.text = text or ""
        self.lines = [line.strip() for line in self.text.split("\n") if line.strip()]

    def parse(self) -> ParsedCVData:
        """Run every extractor. Never raises; failures give a zero-confidence result."""
        try:
            return self._run_extractors()
        except AnalysisError as e:
            logger.warning("CV analysis failed: %s", e, exc_info=True)
            return ParsedCVData.empty(raw_text=self.text, errors=[e.message])

    def _run_extractors(self) -> ParsedCVData:
        errors: List[str] = []
        try:
            personal = self.extract_personal_info()
            work_experience = self.extract_work_experience()
            education = self.extract_education()
            skills = self.extract_skills()
            confidence = calculate_confidence(personal, work_experience, education, skills)
            return ParsedCVData(
                personal=personal,
                work_experience=work_experience,
                education=education,
                skills=skills,
                certifications=self.extract_certifications(),
                projects=self.extract_projects(),
                awards=self.extract_awards(),
                publications=self.extract_publications(),
                raw_text=self.text,
                confidence=confidence,
                errors=errors,
            )
        except Exception as e:
            raise AnalysisError(
                str(e) or "Unknown parsing error", details={"cause": type(e).__name__}
            ) from e

    # --------------------------
    # Personal information
    # --------------------------

    def extract_personal_info(self) -> PersonalInfo:
        personal = PersonalInfo(
            email=first_email(self.text),
            phone=first_phone(self.text),
        )

        m = LINKEDIN_RE.search(self.text)
        if m:
            personal.linkedin = m.group(0).rstrip("/")

        m = PORTFOLIO_RE.search(self.text)
        if m:
            personal.portfolio = m.group(1).rstrip(".")

        m = LOCATION_RE.search(self.text)
        if m and m.group(1).strip():
            personal.location = m.group(1).strip()

        personal.name = self._extract_name()
        personal.summary = self._extract_summary()
        return personal

    def _extract_name(self) -> Optional[str]:
        # best effort: first short 2-4 word line near the top without email/phone digits
        for line in self.lines[:5]:
            if "@" in line or re.search(r"\d{3,}", line):
                continue
            if not (3 < len(line) < 50):
                continue
            if 2 <= len(line.split()) <= 4:
                return line
        return None

    def _extract_summary(self) -> Optional[str]:
        for i, line in enumerate(self.lines):
            if not _has_any(line, SUMMARY_KEYWORDS):
                continue
            summary_lines = []
            for next_line in self.lines[i + 1 : min(i + SUMMARY_MAX_LINES, len(self.lines))]:
                if is_section_header(next_line):
                    break
                summary_lines.append(next_line)
            return " ".join(summary_lines).strip() or None
        return None

    # --------------------------
    # Section walking
    # --------------------------

    def _section_lines(self, keyword: str) -> List[str]:
        """Body of the first section whose header contains keyword."""
        body: List[str] = []
        state = SectionState.SEEKING_SECTION
        for line in self.lines:
            if state is SectionState.SEEKING_SECTION:
                if is_section_header(line) and keyword in line.lower():
                    state = SectionState.IN_SECTION
                continue
            if is_section_header(line) and keyword not in line.lower():
                break
            body.append(line)
        return body

    def _languages_lines(self) -> List[str]:
        body: List[str] = []
        inside = False
        for line in self.lines:
            if not inside:
                inside = bool(LANGUAGES_HEADING_RE.match(line))
                continue
            if is_section_header(line):
                break
            body.append(line)
        return body

    def _walk_entries(
        self,
        keyword: str,
        is_entry: Callable[[str], bool],
        start_entry: Callable[[str], T],
        absorb: Callable[[T, str], None],
        merge: Optional[Callable[[T, str], bool]] = None,
    ) -> List[T]:
        entries: List[T] = []
        current: Optional[T] = None
        state = SectionState.SEEKING_SECTION

        for line in self.lines:
            lowered = line.lower()
            if state is SectionState.SEEKING_SECTION:
                if is_section_header(line) and keyword in lowered:
                    state = SectionState.IN_SECTION
                continue

            # a header of another kind closes the section
            if is_section_header(line) and keyword not in lowered:
                break

            if is_entry(line):
                if state is SectionState.IN_ENTRY and merge is not None and merge(current, line):
                    continue
                if current is not None:
                    entries.append(current)
                current = start_entry(line)
                state = SectionState.IN_ENTRY
            elif state is SectionState.IN_ENTRY:
                absorb(current, line)

        if current is not None:
            entries.append(current)
        return entries

    # --------------------------
    # Work experience
    # --------------------------

    def extract_work_experience(self) -> List[WorkExperienceEntry]:
        entries = self._walk_entries(
            "experience",
            is_entry=looks_like_job_entry,
            start_entry=parse_job_line,
            absorb=self._absorb_job_line,
        )
        for entry in entries:
            if entry.description:
                entry.description = entry.description.strip()
        return entries

    @staticmethod
    def _absorb_job_line(entry: WorkExperienceEntry, line: str) -> None:
        if contains_date(line) and entry.start_date is None:
            start, end, is_current = extract_date_range(line)
            if start or is_current:
                entry.start_date = start
                entry.end_date = end
                entry.is_current = is_current
                return

        m = TECHNOLOGIES_RE.match(_strip_bullet(line))
        if m:
            entry.technologies.extend(split_skill_line(m.group(1)))
            return

        if BULLET_RE.match(line):
            entry.achievements.append(_strip_bullet(line))
        entry.description = f"{entry.description or ''} {line}"

    # --------------------------
    # Education
    # --------------------------

    def extract_education(self) -> List[EducationEntry]:
        return self._walk_entries(
            "education",
            is_entry=looks_like_education_entry,
            start_entry=parse_education_line,
            absorb=self._absorb_education_line,
            merge=self._merge_education_line,
        )

    @staticmethod
    def _merge_education_line(entry: EducationEntry, line: str) -> bool:
        """Fill the missing half (degree or institution) of the open record instead of starting a new one."""
        if entry.degree is None and _has_any(line, DEGREE_KEYWORDS) and not _has_any(line, INSTITUTION_KEYWORDS):
            entry.degree = line
        elif (
            entry.institution is None
            and _has_any(line, INSTITUTION_KEYWORDS)
            and not _has_any(line, DEGREE_KEYWORDS)
        ):
            entry.institution = line
        else:
            return False
        if contains_date(line) and entry.start_date is None:
            CVAnalyzer._absorb_education_line(entry, line)
        return True

    @staticmethod
    def _absorb_education_line(entry: EducationEntry, line: str) -> None:
        m = GPA_RE.search(line)
        if m:
            entry.gpa = m.group(1).replace(" ", "")

        m = COURSEWORK_RE.match(_strip_bullet(line))
        if m:
            entry.relevant_coursework.extend(t.strip() for t in m.group(1).split(",") if t.strip())
            return

        if _has_any(line, HONORS_KEYWORDS):
            entry.honors.append(_strip_bullet(line))

        if contains_date(line):
            start, end, _ = extract_date_range(line)
            if start:
                entry.start_date = start
            if end:
                entry.end_date = end

    # --------------------------
    # Skills and languages
    # --------------------------

    def extract_skills(self) -> Skills:
        buckets: Dict[str, List[str]] = {"technical": [], "design": [], "tools": [], "soft": []}
        for line in self._section_lines("skills"):
            for skill in split_skill_line(line):
                buckets[classify_skill(skill)].append(skill)

        return Skills(
            technical=unique(buckets["technical"]),
            design=unique(buckets["design"]),
            tools=unique(buckets["tools"]),
            soft=unique(buckets["soft"]),
            languages=self.extract_languages(),
        )

    def extract_languages(self) -> List[LanguageSkill]:
        languages: List[LanguageSkill] = []
        seen = set()
        for line in self._languages_lines():
            for m in LANGUAGE_PAIR_RE.finditer(line):
                name = m.group(1).strip()
                if name.lower() in seen:
                    continue
                seen.add(name.lower())
                languages.append(LanguageSkill(name=name, proficiency=m.group(2).strip().capitalize()))
        return languages

    # --------------------------
    # Best-effort sections
    # --------------------------

    def extract_certifications(self) -> List[Certification]:
        names = [line for line in self._section_lines("certifications") if not is_section_header(line)]
        names += [line for line in self.lines if _has_any(line, CERT_KEYWORDS) and not is_section_header(line)]
        certifications = []
        for name in unique(names):
            years = YEAR_RE.findall(name)
            certifications.append(Certification(name=_strip_bullet(name), date=years[-1] if years else None))
        return certifications

    def extract_projects(self) -> List[Project]:
        projects = []
        for line in self._section_lines("projects"):
            if len(line) <= 10:
                continue
            text = _strip_bullet(line)
            head = JOB_SPLIT_RE.split(text, maxsplit=1)[0].split(":", 1)[0].strip()
            projects.append(Project(name=head or text, description=text))
        return projects

    def extract_awards(self) -> List[Award]:
        return [
            Award(title=_strip_bullet(line))
            for line in self.lines
            if _has_any(line, AWARD_KEYWORDS) and not is_section_header(line)
        ]

    def extract_publications(self) -> List[Publication]:
        return [
            Publication(title=_strip_bullet(line))
            for line in self.lines
            if _has_any(line, PUBLICATION_KEYWORDS) and not is_section_header(line)
        ]
