from __future__ import annotations

from typing import Any, Dict, Optional
import asyncio
import logging

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel

from ..config import CrawlConfig
from ..engines.base import CrawlRequest, CrawlResult
from ..engines.session import run_crawl
from ..export.archive import build_archive
from ..version import __version__
from .jobs import CSV_NAME, ZIP_NAME, JobPaths, resolve_download

logger = logging.getLogger(__name__)

app = FastAPI(title="catalog_crawler API", version=__version__)


class CrawlPayload(BaseModel):
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    max_items: int = 500
    delay_ms: int = 800


def get_config() -> CrawlConfig:
    cfg = CrawlConfig.from_env()
    cfg.validate()
    return cfg


def require_token(
    authorization: Optional[str] = Header(default=None),
    cfg: CrawlConfig = Depends(get_config),
) -> None:
    if not cfg.worker_token:
        return
    header = authorization or ""
    token = header[len("Bearer "):] if header.startswith("Bearer ") else ""
    if token != cfg.worker_token:
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.exception_handler(HTTPException)
async def http_error(_request: Any, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error(_request: Any, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {problems}"})


@app.get("/health")
async def health() -> Dict[str, bool]:
    return {"ok": True}


@app.post("/crawl", dependencies=[Depends(require_token)])
async def crawl(payload: CrawlPayload, cfg: CrawlConfig = Depends(get_config)) -> Any:
    if not payload.url:
        return JSONResponse(status_code=400, content={"error": "Missing url"})

    try:
        job = JobPaths.create(cfg.base_dir)
        logger.info("Starting crawl job %s for %s", job.job_id, payload.url)

        request = CrawlRequest(
            target_url=payload.url,
            username=payload.username or "",
            password=payload.password or "",
            max_items=payload.max_items,
            delay_ms=payload.delay_ms,
            csv_path=job.csv_path,
            image_dir=job.image_dir,
        )
        result: CrawlResult = await run_crawl(request, cfg)
        await asyncio.to_thread(build_archive, job.csv_path, job.image_dir, job.zip_path)
    except Exception as exc:  # every failure is reported to the caller as a 500
        logger.exception("Crawl failed for %s", payload.url)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    logger.info("Job %s finished: %s items", job.job_id, result.item_count)
    return {
        "status": "success",
        "total_items": result.item_count,
        "csv_url": f"/download/{job.job_id}/{CSV_NAME}",
        "zip_url": f"/download/{job.job_id}/{ZIP_NAME}",
    }


@app.get("/download/{job_id}/{file_name}")
async def download(job_id: str, file_name: str, cfg: CrawlConfig = Depends(get_config)) -> Any:
    path = resolve_download(cfg.base_dir, job_id, file_name)
    if path is None:
        return PlainTextResponse("Not found", status_code=404)
    return FileResponse(path, filename=path.name)
