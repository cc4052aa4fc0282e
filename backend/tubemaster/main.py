# backend/tubemaster/main.py

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List, Optional

import requests
from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .agents.compare_agent import run_compare_agent
from .agents.competitor_agent import run_competitor_agent
from .agents.keyword_agent import run_keyword_agent
from .agents.script_agent import run_script_agent
from .agents.thumbnail_agent import run_thumbnail_agent
from .agents.title_agent import run_best_time_agent, run_title_agent
from .clients.chat_client import ChatCompletionClient, groq_client, openrouter_client
from .clients.image_client import ImageGenerationClient
from .clients.vision_client import VisionComparisonClient
from .config import Settings, get_settings
from .errors import ConfigurationError, MalformedOutputError, TransportError
from .logging_config import configure_logging, get_metrics_snapshot, inc_metric, log
from .models import (
    BestTimeRequest,
    ComparisonRequest,
    ComparisonResult,
    CompetitorReport,
    CompetitorRequest,
    GeneratedThumbnail,
    ImageAsset,
    KeywordIdea,
    ScriptRequest,
    ThumbnailGenerateRequest,
    TopicRequest,
    VideoScript,
)

MAX_UPLOAD_BYTES = 20 * 1024 * 1024


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    log.info(
        "🚀 TubeMaster backend starting (vision=%s, text=%s, image=%s)",
        "on" if settings.openrouter_api_key else "off",
        "on" if settings.groq_api_key else "off",
        "on" if settings.gemini_api_key else "off",
    )
    yield
    get_http_session().close()
    get_http_session.cache_clear()


app = FastAPI(title="TubeMaster AI", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request, exc: ConfigurationError):
    log.error("⚙️ Configuration error: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# ==========================================================
#                       DEPENDENCIES
# ==========================================================


@lru_cache
def get_http_session() -> requests.Session:
    """One pooled session per process, closed on shutdown."""
    return requests.Session()


def get_vision_client(
    settings: Settings = Depends(get_settings),
    session: requests.Session = Depends(get_http_session),
) -> VisionComparisonClient:
    return VisionComparisonClient(openrouter_client(settings, session))


def get_text_client(
    settings: Settings = Depends(get_settings),
    session: requests.Session = Depends(get_http_session),
) -> ChatCompletionClient:
    return groq_client(settings, session)


def get_optional_text_client(
    settings: Settings = Depends(get_settings),
    session: requests.Session = Depends(get_http_session),
) -> Optional[ChatCompletionClient]:
    if not settings.groq_api_key:
        return None
    return groq_client(settings, session)


def get_image_client(settings: Settings = Depends(get_settings)) -> ImageGenerationClient:
    return ImageGenerationClient.from_settings(settings)


def _fail(feature: str, user_message: str, exc: Exception) -> HTTPException:
    """Log the technical cause, hand the user one friendly sentence."""
    log.error("❌ %s failed: %s", feature, exc)
    inc_metric(f"{feature}_failures")
    return HTTPException(status_code=502, detail=user_message)


async def _read_upload(upload: UploadFile, label: str) -> ImageAsset:
    raw = await upload.read()
    if not raw:
        raise HTTPException(status_code=400, detail=f"Please upload thumbnail {label}.")
    if len(raw) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail=f"Thumbnail {label} is too large.")
    return ImageAsset.from_bytes(raw, upload.content_type or "image/jpeg")


# ==========================================================
#                    THUMBNAIL A/B COMPARE
# ==========================================================


@app.post("/api/v1/thumbnail/compare", response_model=ComparisonResult)
async def compare_thumbnails(
    file_a: UploadFile = File(...),
    file_b: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    client: VisionComparisonClient = Depends(get_vision_client),
):
    request = ComparisonRequest(
        image_a=await _read_upload(file_a, "A"),
        image_b=await _read_upload(file_b, "B"),
    )
    log.info("🧪 Starting thumbnail comparison")
    try:
        return await run_compare_agent(request, client, settings=settings)
    except (TransportError, MalformedOutputError) as e:
        raise _fail("compare", "Comparison temporarily unavailable. Please try again.", e)


@app.post("/api/v1/thumbnail/generate", response_model=GeneratedThumbnail)
async def generate_thumbnail(
    body: ThumbnailGenerateRequest,
    image_client: ImageGenerationClient = Depends(get_image_client),
    text_client: Optional[ChatCompletionClient] = Depends(get_optional_text_client),
):
    try:
        return await run_thumbnail_agent(
            body.prompt, body.style, body.mood, body.optimize, image_client, text_client
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TransportError, MalformedOutputError) as e:
        raise _fail("thumbnail_generate", "Thumbnail generation failed. Please try again.", e)


# ==========================================================
#                      TEXT TOOLS
# ==========================================================


@app.post("/api/v1/keywords", response_model=List[KeywordIdea])
async def find_keywords(
    body: TopicRequest, client: ChatCompletionClient = Depends(get_text_client)
):
    try:
        return await run_keyword_agent(body.topic, client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TransportError, MalformedOutputError) as e:
        raise _fail("keywords", "Keyword research is unavailable right now. Please try again.", e)


@app.post("/api/v1/titles", response_model=List[str])
async def generate_titles(
    body: TopicRequest, client: ChatCompletionClient = Depends(get_text_client)
):
    try:
        return await run_title_agent(body.topic, client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TransportError, MalformedOutputError) as e:
        raise _fail("titles", "Title ideas are unavailable right now. Please try again.", e)


@app.post("/api/v1/script", response_model=VideoScript)
async def generate_script(
    body: ScriptRequest, client: ChatCompletionClient = Depends(get_text_client)
):
    try:
        return await run_script_agent(body.title, body.audience, client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TransportError, MalformedOutputError) as e:
        raise _fail("script", "Script generation failed. Please try again.", e)


@app.post("/api/v1/competitor", response_model=CompetitorReport)
async def analyze_competitor(
    body: CompetitorRequest,
    client: ChatCompletionClient = Depends(get_text_client),
    session: requests.Session = Depends(get_http_session),
):
    try:
        return await run_competitor_agent(body.channel_url, client, session)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TransportError, MalformedOutputError) as e:
        raise _fail(
            "competitor",
            "Unable to analyze channel. Please verify the URL or try again later.",
            e,
        )


@app.post("/api/v1/best-time")
async def best_time(
    body: BestTimeRequest, client: ChatCompletionClient = Depends(get_text_client)
):
    try:
        advice = await run_best_time_agent(body.title, body.audience, body.tags, client)
    except (TransportError, MalformedOutputError) as e:
        raise _fail("best_time", "Publish-time advice is unavailable right now. Please try again.", e)
    return {"advice": advice}


# ==========================================================
#                     METRICS + HEALTH
# ==========================================================


@app.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "features": {
            "compare": bool(settings.openrouter_api_key),
            "text_tools": bool(settings.groq_api_key),
            "thumbnail_generation": bool(settings.gemini_api_key),
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tubemaster.main:app", host="127.0.0.1", port=8000, reload=True)
