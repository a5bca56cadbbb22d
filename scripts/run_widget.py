#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import argparse
from datetime import timedelta

from dotenv import load_dotenv

from schoollife.core.app_logger import setup_logging
from schoollife.core.config import Settings
from schoollife.db.session import SessionLocal, init_db
from schoollife.services.neis import NeisClient
from schoollife.services.shared_store import SharedStore
from schoollife.widget.providers import MealWidgetProvider, TimetableWidgetProvider
from schoollife.widget.refresher import WidgetRefresher


def build_refresher(cfg: Settings) -> WidgetRefresher:
    store = SharedStore(SessionLocal)
    client = NeisClient(cfg.NEIS_API_KEY, cfg.NEIS_BASE_URL, cfg.NEIS_TIMEOUT_SECONDS)
    refresh_after = timedelta(seconds=cfg.WIDGET_REFRESH_SECONDS)
    return WidgetRefresher(
        store,
        TimetableWidgetProvider(store, client, refresh_after),
        MealWidgetProvider(store, client, refresh_after),
        poll_seconds=cfg.WIDGET_POLL_SECONDS,
        snapshot_path=cfg.WIDGET_SNAPSHOT_PATH,
    )


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Refresh the timetable and meal widgets")
    parser.add_argument("--once", action="store_true", help="refresh a single time and exit")
    args = parser.parse_args()

    cfg = Settings()
    logger = setup_logging(cfg.LOG_LEVEL)

    init_db()
    refresher = build_refresher(cfg)

    if args.once:
        refresher.refresh("manual")
        return

    logger.info("widget runner started (every %ss, polling %ss)", cfg.WIDGET_REFRESH_SECONDS, cfg.WIDGET_POLL_SECONDS)
    try:
        refresher.run()
    except KeyboardInterrupt:
        logger.info("widget runner stopped")


if __name__ == "__main__":
    main()
