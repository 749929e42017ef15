"""
Custom exceptions for the CV intake pipeline
"""


class CVIntakeError(Exception):
    """Base exception for CV intake"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ExtractionError(CVIntakeError):
    """Raised when a PDF/DOCX/text document cannot be read"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details=details)


class UnsupportedFileTypeError(CVIntakeError):
    """Raised when the content type is unknown and the bytes are not text"""

    def __init__(self, mime_type: str, allowed: tuple = (), message: str = None):
        if message is None:
            message = f"Unsupported file type: {mime_type or 'unknown'}"
        super().__init__(message, details={"mime_type": mime_type, "allowed": list(allowed)})


class FileTooLargeError(CVIntakeError):
    """Raised when the document buffer exceeds the upload limit"""

    def __init__(self, size: int, max_size: int):
        message = f"File size exceeds maximum allowed size of {max_size / (1024*1024):.1f}MB"
        super().__init__(message, details={"size": size, "max_size": max_size})


class AnalysisError(CVIntakeError):
    """Raised inside the heuristic analyzer; recorded into ParsedCVData.errors"""


class AIParserError(CVIntakeError):
    """Base for failures of the model-backed extraction path"""


class MissingCredentialError(AIParserError):
    """Raised when no model API key is configured"""

    def __init__(self, message: str = "OPENAI_API_KEY is not set; AI parsing is unavailable"):
        super().__init__(message)


class ModelCallFailedError(AIParserError):
    """Raised on network, quota or timeout failures of the model call"""


class UnparseableResponseError(AIParserError):
    """Raised when the model response holds no usable JSON object"""

    def __init__(self, message: str, response_excerpt: str = ""):
        super().__init__(message, details={"response_excerpt": response_excerpt[:500]})
