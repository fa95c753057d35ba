from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import List

import uvicorn

from ..config import CrawlConfig
from ..utils.logging import setup_logging
from ..engines.base import CrawlRequest, CrawlResult
from ..engines.session import run_crawl
from ..export.archive import build_archive
from ..apis.jobs import JobPaths

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Extract a product catalog (CSV + images) from one e-commerce page")
    p.add_argument("url", nargs="?", help="Page to crawl")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--username", type=str, default="", help="Login username/email (used only if a login form exists)")
    p.add_argument("--password", type=str, default="", help="Login password")
    p.add_argument("--max-items", type=int, default=None, help="Maximum rows to write (default from config)")
    p.add_argument("--delay-ms", type=int, default=None, help="Wait after each scroll, in ms (default from config)")
    p.add_argument("--output-dir", type=str, default="output",
                   help="Directory receiving produtos.csv and imagens/ (default: ./output)")
    p.add_argument("--zip", action="store_true", help="Also bundle the CSV and images into output.zip")
    p.add_argument("--headful", action="store_true", help="Show the browser window")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of a one-shot crawl")
    p.add_argument("--host", type=str, default="0.0.0.0", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")), help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.max_items is not None:
        cfg.max_items = args.max_items
    if args.delay_ms is not None:
        cfg.delay_ms = args.delay_ms
    if args.headful:
        cfg.headless = False

    cfg.validate()
    return cfg


def run_server(host: str, port: int) -> None:
    uvicorn.run("catalog_crawler.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    if not args.url:
        parser.error("url is required unless --serve is given")

    cfg = _load_config(args)
    logger.debug("Config: %s", {k: v for k, v in cfg.to_dict().items() if k != "worker_token"})
    job = JobPaths.at(args.output_dir)
    request = CrawlRequest(
        target_url=args.url,
        username=args.username,
        password=args.password,
        max_items=cfg.max_items,
        delay_ms=cfg.delay_ms,
        csv_path=job.csv_path,
        image_dir=job.image_dir,
    )

    result: CrawlResult = asyncio.run(run_crawl(request, cfg))

    if args.zip:
        build_archive(job.csv_path, job.image_dir, job.zip_path)

    logger.info("Items: %s | CSV: %s | Images: %s%s",
                result.item_count,
                job.csv_path,
                job.image_dir,
                f" | Zip: {job.zip_path}" if args.zip else "")
    return 0
