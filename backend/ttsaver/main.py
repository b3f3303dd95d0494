import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from ttsaver.api.download import router as download_router
from ttsaver.api.errors import DownloadError, download_error_handler
from ttsaver.api.schemas import HealthResponse
from ttsaver.core.config import Settings, get_settings, settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    missing = settings.missing_settings()
    if missing:
        logger.warning("provider is not configured, missing: %s", ", ".join(missing))
    yield


app = FastAPI(title="TikTok no-watermark downloader", lifespan=lifespan)

@app.get("/health", response_model=HealthResponse)
def health(cfg: Settings = Depends(get_settings)):
    return HealthResponse(
        status="ok",
        providerConfigured=cfg.provider_configured,
        missing=cfg.missing_settings(),
    )

app.include_router(download_router)
app.add_exception_handler(DownloadError, download_error_handler)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

static_dir = Path(__file__).resolve().parent / "static"

if static_dir.exists():
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

@app.get("/", include_in_schema=False)
def index():
    if (static_dir / "index.html").exists():
        return FileResponse(static_dir / "index.html")
    raise HTTPException(status_code=404, detail="UI not found")
