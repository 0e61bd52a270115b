"""
Configuration loader for the resume import pipeline.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Centralized configuration for all import pipeline components.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== MongoDB =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "profiles")

    # ===== OCR (Mistral) =====
    MISTRAL_API_KEY: str = os.getenv("MISTRAL_API_KEY", "")
    MISTRAL_BASE_URL: str = os.getenv("MISTRAL_BASE_URL", "https://api.mistral.ai")
    MISTRAL_OCR_MODEL: str = os.getenv("MISTRAL_OCR_MODEL", "mistral-ocr-latest")
    OCR_TIMEOUT_SECONDS: int = int(os.getenv("OCR_TIMEOUT_SECONDS", "120"))
    # Signed URLs for uploaded Word documents only need to outlive one OCR call
    OCR_SIGNED_URL_EXPIRY_HOURS: int = int(os.getenv("OCR_SIGNED_URL_EXPIRY_HOURS", "1"))

    # ===== Structured extraction model (Groq, OpenAI-compatible) =====
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_BASE_URL: str = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
    GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")

    # Temperature settings
    EXTRACTION_TEMPERATURE: float = float(os.getenv("EXTRACTION_TEMPERATURE", "0.2"))
    EXTRACTION_MAX_TOKENS: int = int(os.getenv("EXTRACTION_MAX_TOKENS", "4096"))
    EXTRACTION_TIMEOUT_SECONDS: int = int(os.getenv("EXTRACTION_TIMEOUT_SECONDS", "60"))

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required configuration is present.
        Raises ValueError if critical settings are missing.

        The extraction model key is optional: without it imports fall back
        to heuristic extraction.
        """
        required_settings = {
            "MONGODB_URI": cls.MONGODB_URI,
            "MISTRAL_API_KEY": cls.MISTRAL_API_KEY,
        }

        missing = [name for name, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

        if cls.OCR_SIGNED_URL_EXPIRY_HOURS < 1:
            raise ValueError("OCR_SIGNED_URL_EXPIRY_HOURS must be at least 1.")

    @classmethod
    def has_extraction_credentials(cls) -> bool:
        """Whether the structured (AI) extraction tier can run."""
        return bool(cls.GROQ_API_KEY.strip())

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        return f"""
Configuration Summary:
  MongoDB: {'✓ Configured' if cls.MONGODB_URI else '✗ Missing'} (db: {cls.MONGO_DB_NAME})
  OCR: Mistral {'✓' if cls.MISTRAL_API_KEY else '✗ Missing'} ({cls.MISTRAL_OCR_MODEL})
  Structured extraction: {'✓ ' + cls.GROQ_MODEL if cls.has_extraction_credentials() else '✗ Disabled (heuristic only)'}
  Extraction Temperature: {cls.EXTRACTION_TEMPERATURE}
        """.strip()
