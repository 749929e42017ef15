"""CV parser: file bytes -> text -> structured data, wrapped in a success/failure result."""

import asyncio
import time
from typing import Optional

from cv_intake.cv_pipeline.ai_parser import AIParser
from cv_intake.cv_pipeline.cv_analyzer import CVAnalyzer
from cv_intake.cv_pipeline.text_extractor import describe_extraction, extract_text
from cv_intake.schemas.parsed_cv import CVParserResult, ParsedCVData, ParsingOptions
from cv_intake.schemas.validation import ParsedDataCheck
from cv_intake.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_CONTENT_MESSAGE = (
    "No text content found in the CV file. If it is a scanned document, "
    "try a different file or format (a text-based PDF, DOCX or TXT)."
)
STRICT_PARSING_MESSAGE = "Parsing produced no usable data"


class CVParser:
    """
    Orchestrates extraction and analysis of one uploaded CV.

    With an AIParser and `use_ai=True` the model path (with regex fallback)
    is used; otherwise the heuristic CVAnalyzer.
    """

    def __init__(self, ai_parser: Optional[AIParser] = None):
        self.ai_parser = ai_parser

    async def _analyze(self, text: str, options: ParsingOptions):
        if options.use_ai and self.ai_parser is not None:
            return await self.ai_parser.fallback_chain().run(text)
        if options.use_ai:
            logger.info("AI parsing requested but no AI parser configured; using heuristics")
        return "heuristic", CVAnalyzer(text).parse()

    async def parse_cv(
        self,
        file_bytes: bytes,
        mime_type: str,
        options: Optional[ParsingOptions] = None,
    ) -> CVParserResult:
        """Never raises: every failure comes back as success=False with a message."""
        options = options or ParsingOptions()
        start = time.monotonic()

        def elapsed_ms() -> int:
            return int((time.monotonic() - start) * 1000)

        try:
            # blocking parsers run in a worker thread
            extracted = await asyncio.to_thread(extract_text, file_bytes, mime_type)
            logger.info("Extracted CV text: %s", describe_extraction(extracted))

            if not extracted.content or not extracted.content.strip():
                return CVParserResult(
                    success=False,
                    error=EMPTY_CONTENT_MESSAGE,
                    processing_time_ms=elapsed_ms(),
                )

            method, data = await self._analyze(extracted.content, options)

            if not options.include_raw_text:
                data = data.model_copy(update={"raw_text": ""})

            if options.strict_parsing and (data.errors or data.confidence == 0):
                return CVParserResult(
                    success=False,
                    data=data,
                    error=data.errors[0] if data.errors else STRICT_PARSING_MESSAGE,
                    processing_time_ms=elapsed_ms(),
                    parsing_method=method,
                )

            logger.info("CV parsed with %s (confidence=%.2f)", method, data.confidence)
            return CVParserResult(
                success=True,
                data=data,
                processing_time_ms=elapsed_ms(),
                parsing_method=method,
            )
        except Exception as e:
            logger.exception("CV parsing failed: %s", e)
            return CVParserResult(
                success=False,
                error=str(e) or "Unknown parsing error",
                processing_time_ms=elapsed_ms(),
            )


def parse_cv(
    file_bytes: bytes,
    mime_type: str,
    options: Optional[ParsingOptions] = None,
    ai_parser: Optional[AIParser] = None,
) -> CVParserResult:
    """
    Run the full CV pipeline from a synchronous caller.
    Uses a fresh event loop so it can be called where no loop is running.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(CVParser(ai_parser).parse_cv(file_bytes, mime_type, options))
    finally:
        loop.close()


def validate_parsed_data(data: ParsedCVData) -> ParsedDataCheck:
    """Minimal check: email, name, phone, some work experience and some technical/design/tool skills."""
    missing_fields = []
    suggestions = []

    if not data.personal.email:
        missing_fields.append("email")
        suggestions.append("Please ensure your email address is clearly visible in the CV")

    if not data.personal.name:
        missing_fields.append("name")
        suggestions.append("Please ensure your full name appears at the top of the CV")

    if not data.personal.phone:
        missing_fields.append("phone")
        suggestions.append("Please include your phone number in the contact information")

    if not data.work_experience:
        missing_fields.append("work_experience")
        suggestions.append("Please include your work experience with company names and job titles")

    # soft skills are not counted
    total_skills = len(data.skills.technical) + len(data.skills.design) + len(data.skills.tools)
    if total_skills == 0:
        missing_fields.append("skills")
        suggestions.append("Please include a skills section with your technical and design capabilities")

    return ParsedDataCheck(
        is_valid=not missing_fields,
        missing_fields=missing_fields,
        suggestions=suggestions,
    )
