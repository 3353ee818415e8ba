from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

# --- Error messages ---

MSG_NO_API_KEY = "API key is not configured on the server."
MSG_URL_REQUIRED = "URL is required."
MSG_ANALYSIS_FAILED = "Failed to get analysis from the AI model."


# --- Analyze API ---

class AnalyzeRequest(BaseModel):
    # OpenAPI docs only; /analyze reads the raw body so the key check comes first.
    # Malformed URLs are sent to the model as-is.
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None


class AnalysisResult(BaseModel):
    # Shape the model is asked to produce. Used for docs only, replies are relayed unchanged.
    status: Literal["Safe", "Suspicious", "PHISHING DETECTED"]
    score: int
    message: str


class ErrorResult(BaseModel):
    status: Literal["Error"] = "Error"
    score: Literal["N/A"] = "N/A"
    message: str
