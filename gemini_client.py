import json
import logging
from typing import Any, Optional

import httpx

from config import Settings

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a world-class cybersecurity analyst specializing in phishing detection. Your task is to analyze the provided URL and determine its threat level.

You MUST respond in a valid JSON format that adheres to the provided schema.

Analysis criteria:
- Examine the URL for common phishing patterns (e.g., typosquatting, misleading subdomains, suspicious TLDs).
- Check for keywords often used in phishing attacks (e.g., 'login', 'verify', 'secure', 'account-update').
- Assess the overall trustworthiness of the URL structure.

Response fields:
- "status": Must be one of three exact strings: "Safe", "Suspicious", or "PHISHING DETECTED".
- "score": An integer between 0 (high risk) and 100 (very safe). A safe site should be > 85, suspicious 40-85, and phishing < 40.
- "message": A concise, one-sentence explanation for the user, justifying your analysis."""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "status": {"type": "STRING"},
        "score": {"type": "NUMBER"},
        "message": {"type": "STRING"},
    },
    "required": ["status", "score", "message"],
}


# --- Errors ---

class GeminiError(Exception):
    """Base class for everything that can go wrong talking to Gemini."""


class GeminiConfigError(GeminiError):
    pass


class GeminiHTTPError(GeminiError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GeminiResponseError(GeminiError):
    pass


def build_payload(url: str) -> dict:
    return {
        "contents": [{"parts": [{"text": f"Analyze the following URL for phishing threats: {url}"}]}],
        "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
        "generationConfig": {
            "responseMimeType": "application/json",  # force a JSON reply
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def extract_text(data: Any) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a generateContent reply.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None

    if not text or not isinstance(text, str):
        raise GeminiResponseError("Invalid response structure from Gemini API.")
    return text


async def analyze_url_with_gemini(url: str, client: httpx.AsyncClient, settings: Settings) -> Any:
    """
    Ask Gemini for a phishing verdict on `url` and return the parsed JSON as-is.

    Exactly one request is made. The verdict is not checked against
    RESPONSE_SCHEMA here; Gemini is trusted to honor it.
    """
    if not settings.gemini_api_key:
        raise GeminiConfigError("GEMINI_API_KEY is not set.")

    try:
        response = await client.post(
            settings.endpoint,
            params={"key": settings.gemini_api_key},
            json=build_payload(url),
            timeout=settings.gemini_timeout,
        )
    except httpx.RequestError as e:
        # Not str(e.request.url): it carries the key
        raise GeminiHTTPError(f"Gemini API request failed: {type(e).__name__}: {e}") from e

    if not response.is_success:
        logger.error("Gemini API Error: %s", response.text)
        raise GeminiHTTPError(
            f"Gemini API responded with status: {response.status_code}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise GeminiResponseError("Gemini API returned a non-JSON body.") from e

    text = extract_text(data)

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise GeminiResponseError(f"Gemini returned text that is not JSON: {text[:200]!r}") from e
