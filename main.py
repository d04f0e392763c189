from __future__ import annotations

from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication
from loguru import logger

from app.viewmodels.main_vm import MainVM
from app.views.main_window import MainWindow
from core.services.sort_service import SORT_NEWEST, SortService
from infrastructure.cache_store import DEFAULT_TTL_S, CacheStore
from infrastructure.demo_gateway import DemoGateway
from infrastructure.gateway_client import GatewayClient
from infrastructure.image_service import ThumbnailService
from infrastructure.live_feed import (
    DEFAULT_FIRST_SNAPSHOT_TIMEOUT_MS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_POLL_INTERVAL_MS,
    PollingGalleryFeed,
)
from infrastructure.logging import get_cache_path, init_logging
from infrastructure.mutation_service import MutationService
from infrastructure.settings import JsonSettings
from infrastructure.upload_service import UploadService

BASE_DIR = Path(__file__).parent


def build_gateway(settings: JsonSettings):
    """Real gateway client, or the in-memory demo when no backend URL is set."""
    if settings.is_demo:
        logger.info("No backend URL configured; running in demo mode")
        return DemoGateway()
    url = str(settings.get("backend.url"))
    logger.info("Using gateway {}", url)
    return GatewayClient(
        url,
        str(settings.get("backend.api_key", "") or ""),
        timeout_s=settings.get_float("backend.timeout_s", 30.0),
        retry_delay_s=settings.get_float("backend.retry_delay_s", 2.0),
    )


def main() -> int:
    init_logging()
    settings = JsonSettings(BASE_DIR / "settings.json")

    app = QApplication(sys.argv)

    gateway = build_gateway(settings)
    cache = CacheStore(get_cache_path(), ttl_s=settings.get_float("cache.ttl_s", DEFAULT_TTL_S))
    vm = MainVM(
        gateway,
        MutationService(gateway),
        sorter=SortService(),
        cache=cache,
        removing_timeout_s=settings.get_float("ui.removing_timeout_s", 120.0),
        default_sort=str(settings.get("sorting.default", SORT_NEWEST)),
    )
    feed = PollingGalleryFeed(
        gateway,
        poll_interval_ms=settings.get_int("feed.poll_interval_ms", DEFAULT_POLL_INTERVAL_MS),
        first_snapshot_timeout_ms=settings.get_int(
            "feed.first_snapshot_timeout_ms", DEFAULT_FIRST_SNAPSHOT_TIMEOUT_MS
        ),
        page_size=settings.get_int("feed.page_size", DEFAULT_PAGE_SIZE),
    )

    win = MainWindow(
        vm=vm,
        feed=feed,
        image_service=ThumbnailService(),
        upload_service=UploadService(gateway),
        settings=settings,
    )
    win.show()
    win.start()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
