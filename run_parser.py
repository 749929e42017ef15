"""Parse one CV file from the command line. Use: python run_parser.py path/to/cv.pdf [--ai]"""
import argparse
import json
import mimetypes
import sys
from pathlib import Path

from cv_intake.config import MIME_DOCX, MIME_PDF, MIME_TEXT
from cv_intake.cv_pipeline import AIParser, parse_cv
from cv_intake.schemas import MVPData, ParsingOptions
from cv_intake.validation import validate_profile_completion
from cv_intake.validation.constants import AVAILABILITY_OPTIONS

EXTENSION_MIME = {".pdf": MIME_PDF, ".docx": MIME_DOCX, ".txt": MIME_TEXT}


def _rating(value: str):
    """NAME=LEVEL -> (name, level)."""
    name, sep, level = value.rpartition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=LEVEL, got {value!r}")
    try:
        return name.strip(), float(level)
    except ValueError:
        raise argparse.ArgumentTypeError(f"level must be a number, got {level!r}")


def build_mvp_data(args) -> MVPData:
    return MVPData(
        title=args.title,
        availability=args.availability,
        total_experience_years=args.experience_years,
        skills_proficiency=dict(args.skill_rating),
        languages_proficiency=dict(args.language_rating),
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse a CV into structured JSON")
    parser.add_argument("path", type=Path, help="PDF, DOCX or TXT file")
    parser.add_argument("--ai", action="store_true", help="use the LLM parser (needs OPENAI_API_KEY)")
    parser.add_argument("--strict", action="store_true", help="fail when the analysis recorded errors")
    parser.add_argument("--no-raw-text", action="store_true", help="omit raw text from the output")

    mvp = parser.add_argument_group(
        "profile completion",
        "Fields the CV cannot supply. Without them --validate reports title, "
        "availability and ratings as missing.",
    )
    mvp.add_argument("--validate", action="store_true", help="also print the profile-completion check")
    mvp.add_argument("--title", default="", help="professional title")
    mvp.add_argument("--availability", default="", choices=("",) + AVAILABILITY_OPTIONS)
    mvp.add_argument("--experience-years", type=float, default=0, help="declared total experience")
    mvp.add_argument(
        "--skill-rating", type=_rating, action="append", default=[], metavar="NAME=LEVEL",
        help="skill proficiency 1-5 (repeatable)",
    )
    mvp.add_argument(
        "--language-rating", type=_rating, action="append", default=[], metavar="NAME=LEVEL",
        help="language proficiency 1-5 (repeatable)",
    )
    return parser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    mime_type = EXTENSION_MIME.get(args.path.suffix.lower()) or mimetypes.guess_type(args.path.name)[0] or ""
    options = ParsingOptions(
        include_raw_text=not args.no_raw_text,
        strict_parsing=args.strict,
        use_ai=args.ai,
    )
    result = parse_cv(
        args.path.read_bytes(),
        mime_type,
        options,
        ai_parser=AIParser.from_config() if args.ai else None,
    )

    output = {"result": result.model_dump(by_alias=True)}
    if args.validate and result.data is not None:
        validation = validate_profile_completion(result.data, build_mvp_data(args))
        output["validation"] = validation.model_dump(by_alias=True)
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
