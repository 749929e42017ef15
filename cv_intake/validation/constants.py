"""Validation constants and rules for MVP profile completion."""

AVAILABILITY_OPTIONS = ("Available", "Busy", "Not Available")

MVP_REQUIRED_FIELDS = {
    "core_profile": (
        "name",
        "email",
        "phone",
        "title",
        "availability",
        "portfolio_url",
        "professional_summary",
        "total_experience_years",
    ),
    "work_experience": ("has_work_experience", "work_experience_industries"),
    "skills": ("has_skills", "skills_proficiency"),
    "languages": ("has_languages", "languages_proficiency"),
}

TOTAL_VALIDATION_POINTS = sum(len(points) for points in MVP_REQUIRED_FIELDS.values())  # 14

PROFICIENCY_MIN = 1
PROFICIENCY_MAX = 5
EXPERIENCE_YEARS_MIN = 0
EXPERIENCE_YEARS_MAX = 50
SUMMARY_MIN_LENGTH = 50

# Severity threshold: incomplete profiles above this percentage are warnings, not errors
WARNING_THRESHOLD = 70

VALIDATION_MESSAGES = {
    # Core profile
    "NAME_REQUIRED": "Please ensure your full name appears at the top of the CV",
    "EMAIL_REQUIRED": "Please ensure your email address is clearly visible in the CV",
    "EMAIL_INVALID": "Please provide a valid email address",
    "PHONE_REQUIRED": "Please include your phone number in the contact information",
    "PHONE_INVALID": "Please provide a valid phone number",
    "TITLE_REQUIRED": "Please select your professional title/position",
    "AVAILABILITY_REQUIRED": "Please specify your availability status",
    "PORTFOLIO_REQUIRED": "Please provide your portfolio URL or LinkedIn profile",
    "PORTFOLIO_INVALID": "Please provide a valid URL (e.g., https://portfolio.com or www.linkedin.com/in/username)",
    "SUMMARY_REQUIRED": "Please add a professional summary",
    "SUMMARY_TOO_SHORT": f"Professional summary should be at least {SUMMARY_MIN_LENGTH} characters",
    "EXPERIENCE_YEARS_REQUIRED": "Please specify your total years of experience",
    "EXPERIENCE_YEARS_INVALID": f"Experience years must be between {EXPERIENCE_YEARS_MIN} and {EXPERIENCE_YEARS_MAX}",
    # Work experience
    "WORK_EXPERIENCE_REQUIRED": "Please include at least one work experience",
    "WORK_EXPERIENCE_COMPANY_REQUIRED": "Please provide company name for all work experiences",
    "WORK_EXPERIENCE_INDUSTRY_REQUIRED": "Please specify the industry for all work experiences",
    "WORK_EXPERIENCE_INCOMPLETE": "Please complete all work experience details",
    # Skills
    "SKILLS_REQUIRED": "Please include at least one skill",
    "SKILLS_PROFICIENCY_REQUIRED": "Please rate your proficiency level for all skills (1-5 scale)",
    # Languages
    "LANGUAGES_REQUIRED": "Please include at least one language",
    "LANGUAGES_PROFICIENCY_REQUIRED": "Please rate your proficiency level for all languages (1-5 scale)",
}

REQUIRED_MESSAGE_KEYS = {
    "name": "NAME_REQUIRED",
    "email": "EMAIL_REQUIRED",
    "phone": "PHONE_REQUIRED",
    "title": "TITLE_REQUIRED",
    "availability": "AVAILABILITY_REQUIRED",
    "portfolio_url": "PORTFOLIO_REQUIRED",
    "professional_summary": "SUMMARY_REQUIRED",
    "total_experience_years": "EXPERIENCE_YEARS_REQUIRED",
}
