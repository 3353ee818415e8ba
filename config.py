import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env (real environment variables win)
load_dotenv()

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-preview-05-20"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_api_base: str = DEFAULT_GEMINI_API_BASE
    gemini_timeout: float = 30.0
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def endpoint(self) -> str:
        return f"{self.gemini_api_base.rstrip('/')}/models/{self.gemini_model}:generateContent"


def load_settings() -> Settings:
    """
    Read the process configuration once at startup.
    The API key may be empty; that is reported per request, not here.
    """
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        gemini_api_base=os.getenv("GEMINI_API_BASE") or DEFAULT_GEMINI_API_BASE,
        gemini_timeout=float(os.getenv("GEMINI_TIMEOUT") or 30.0),
        host=os.getenv("HOST") or "0.0.0.0",
        port=int(os.getenv("PORT") or 3000),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
