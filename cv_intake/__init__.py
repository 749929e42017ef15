"""CV intake: parse uploaded CVs into structured data and check profile completion."""

__version__ = "0.1.0"
