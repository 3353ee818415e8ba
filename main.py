import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

import gemini_client
from config import Settings, load_settings
from schemas import (
    MSG_ANALYSIS_FAILED,
    MSG_NO_API_KEY,
    MSG_URL_REQUIRED,
    AnalysisResult,
    AnalyzeRequest,
    ErrorResult,
)

logger = logging.getLogger(__name__)

INDEX_HTML = Path(__file__).resolve().parent / "index.html"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# --- App Lifespan ---
# One settings object and one httpx.AsyncClient per process.
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = getattr(app.state, "settings", None)
    if settings is None:
        settings = load_settings()
        app.state.settings = settings
    configure_logging(settings.log_level)

    logger.info("Server is running on http://localhost:%d (model %s)", settings.port, settings.gemini_model)
    if not settings.gemini_api_key:
        logger.warning("Make sure to set your GEMINI_API_KEY environment variable; /analyze answers 500 until it is.")

    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        yield


app = FastAPI(title="PhishCheck URL Analyzer", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Dependencies ---

def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResult(message=message).model_dump())


async def read_url(request: Request) -> Any:
    """
    Return the `url` field of a JSON object body, or None.
    Empty, unparseable and non-object bodies all count as "no url".
    """
    try:
        body = await request.json()
    except ValueError:
        return None
    return body.get("url") if isinstance(body, dict) else None


# --- Endpoints ---

@app.get("/", include_in_schema=False)
async def index():
    return FileResponse(INDEX_HTML)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post(
    "/analyze",
    responses={200: {"model": AnalysisResult}, 400: {"model": ErrorResult}, 500: {"model": ErrorResult}},
    openapi_extra={
        "requestBody": {"content": {"application/json": {"schema": AnalyzeRequest.model_json_schema()}}}
    },
)
@app.post("/api/analyze", include_in_schema=False)
async def analyze_url(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    # Body is read by hand so the key check always runs first
    if not settings.gemini_api_key:
        logger.warning("Rejected %s: GEMINI_API_KEY is not configured", request.url.path)
        return error_response(500, MSG_NO_API_KEY)

    url = await read_url(request)
    if not url:
        logger.warning("Rejected %s: no url in request body", request.url.path)
        return error_response(400, MSG_URL_REQUIRED)

    url = str(url)
    try:
        result = await gemini_client.analyze_url_with_gemini(url, client, settings)
    except gemini_client.GeminiError as e:
        logger.error("Error calling Gemini API for %r: %s", url, e)
        return error_response(500, MSG_ANALYSIS_FAILED)
    except Exception:
        logger.exception("Unexpected error while analyzing %r", url)
        return error_response(500, MSG_ANALYSIS_FAILED)

    logger.info("Gemini Analysis for %r: %s", url, result)
    return JSONResponse(content=result)


if __name__ == "__main__":
    import uvicorn

    app.state.settings = load_settings()
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
