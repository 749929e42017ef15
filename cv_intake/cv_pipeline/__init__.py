"""CV upload pipeline: text extraction (PDF/DOCX/TXT), heuristic or LLM analysis, record mapping."""

from cv_intake.cv_pipeline.ai_parser import AIParser, RegexFallbackParser
from cv_intake.cv_pipeline.cv_analyzer import CVAnalyzer
from cv_intake.cv_pipeline.cv_parser import CVParser, parse_cv, validate_parsed_data
from cv_intake.cv_pipeline.db_mapper import map_to_database
from cv_intake.cv_pipeline.text_extractor import extract_text

__all__ = [
    "AIParser",
    "RegexFallbackParser",
    "CVAnalyzer",
    "CVParser",
    "parse_cv",
    "validate_parsed_data",
    "map_to_database",
    "extract_text",
]
