"""Configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env

# API keys – never hardcode
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
MODEL_NAME: str = os.getenv("MODEL_NAME", "gpt-4o-mini")

# Model call settings
AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))
AI_MAX_INPUT_CHARS: int = 12000
AI_TEMPERATURE: float = 0.1

# Document limits
MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # upload layer enforces this too
MAX_CV_CHARS: int = 50000

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Accepted upload content types
MIME_PDF = "application/pdf"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_TEXT = "text/plain"
SUPPORTED_MIME_TYPES: tuple = (MIME_PDF, MIME_DOCX, MIME_TEXT)
