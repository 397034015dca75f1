from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Query, Request, BackgroundTasks
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response, FileResponse, StreamingResponse
from pathlib import Path
from typing import Awaitable, Callable, List, Optional
from urllib.parse import urlparse
import logging
import re

from api.config import settings
from api.progress_stream import ProgressHub, DEFAULT_JOB_ID, stream_progress
from crawler.base import EnrichedItem, ExportError
from crawler.config import list_sites
from crawler.export import export_to_excel, XLSX_MEDIA_TYPE
from crawler.manager import CrawlManager
from crawler.progress import ProgressReporter
from pydantic import BaseModel

# Setup logging directory
settings.log_dir.mkdir(exist_ok=True)


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


# Setup logging with color support for console, stripped for file
file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
file_handler.setFormatter(ColorStripFormatter(settings.log_format))

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter(settings.log_format))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    handlers=[file_handler, console_handler],
    force=True  # Override any existing configuration
)

# Crawler loggers get their own handlers and do not propagate to root,
# so every message appears once
crawler_logger = logging.getLogger('crawler')
crawler_logger.propagate = False
# Only add handlers if not already present (prevents duplicates on module reload)
if not crawler_logger.handlers:
    crawler_file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    crawler_file_handler.setFormatter(ColorStripFormatter(settings.log_format))
    crawler_logger.addHandler(crawler_file_handler)

    crawler_console_handler = logging.StreamHandler()
    crawler_console_handler.setFormatter(logging.Formatter(settings.log_format))
    crawler_logger.addHandler(crawler_console_handler)
crawler_logger.setLevel(getattr(logging, settings.log_level.upper()))

logger = logging.getLogger(__name__)


CrawlRunner = Callable[[str, ProgressReporter], Awaitable[Optional[List[EnrichedItem]]]]

# Progress reporters of running crawls, keyed by job id
progress_hub = ProgressHub()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info("Catalog Crawler Starting Up")
    logger.info("=" * 60)
    logger.info(f"Log file: {settings.log_file}")
    logger.info(f"Export directory: {settings.export_dir}")
    logger.info(f"Batch size: {settings.crawl_batch_size}, headless: {settings.crawl_headless}")
    settings.export_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Backend ready to accept requests")

    yield  # Application runs here

    logger.info("=" * 60)
    logger.info("Catalog Crawler Shutting Down")
    logger.info("=" * 60)


app = FastAPI(
    title="Catalog Crawler API",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware - allow all origins for development
# Note: allow_credentials must be False when allow_origins is ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Dependencies (overridden in tests)

async def run_catalog_crawl(url: str, reporter: ProgressReporter) -> Optional[List[EnrichedItem]]:
    manager = CrawlManager(settings.crawl_settings(), reporter=reporter)
    return await manager.crawl(url)


def get_crawl_runner() -> CrawlRunner:
    return run_catalog_crawl


def get_export_dir() -> Path:
    return settings.export_dir


def get_progress_hub() -> ProgressHub:
    return progress_hub


class ScrapeRequest(BaseModel):
    url: Optional[str] = None
    job_id: str = DEFAULT_JOB_ID


def remove_export(path: Path):
    """Delete an export once it has been sent."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete {path}: {e}")


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon requests"""
    return Response(status_code=204)


# API Endpoints

@app.get("/")
async def root():
    return {"message": "Catalog Crawler API", "version": "1.0.0"}


@app.get("/api/sites")
async def get_sites():
    """List configured site selector profiles"""
    return list_sites()


@app.get("/progress")
async def progress(
    request: Request,
    job_id: str = Query(DEFAULT_JOB_ID, description="Crawl to follow"),
    hub: ProgressHub = Depends(get_progress_hub)
):
    """Stream crawl progress as Server-Sent Events"""
    return StreamingResponse(
        stream_progress(hub, job_id, request.is_disconnected, settings.progress_keepalive_seconds),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@app.post("/scrape")
async def scrape(
    background_tasks: BackgroundTasks,
    payload: Optional[ScrapeRequest] = None,
    run_crawl: CrawlRunner = Depends(get_crawl_runner),
    export_dir: Path = Depends(get_export_dir),
    hub: ProgressHub = Depends(get_progress_hub)
):
    """Crawl a listing URL and download the products as an Excel file"""
    payload = payload or ScrapeRequest()
    url = (payload.url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL is required")
    if not is_http_url(url):
        raise HTTPException(status_code=400, detail="Invalid URL")

    logger.info(f"Starting to scrape: {url}")
    reporter = hub.acquire(payload.job_id)
    try:
        products = await run_crawl(url, reporter)
    except Exception as e:
        logger.error(f"Scraping error: {e}")
        raise HTTPException(status_code=500, detail="Scraping failed")
    finally:
        hub.release(payload.job_id)

    if not products:
        raise HTTPException(status_code=404, detail="No products found")

    try:
        excel_file = export_to_excel(products, url, export_dir)
    except ExportError:
        raise HTTPException(status_code=500, detail="Failed to create Excel file")

    # Delete the file after sending
    background_tasks.add_task(remove_export, excel_file)
    return FileResponse(excel_file, filename=excel_file.name, media_type=XLSX_MEDIA_TYPE)
