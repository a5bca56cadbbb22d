from __future__ import annotations

import json
import time
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict

from schoollife.core.app_logger import get_logger
from schoollife.services.shared_store import SharedStore
from schoollife.widget.providers import MealWidgetProvider, TimetableWidgetProvider

logger = get_logger(__name__)


def snapshot_of(timetable, meals) -> Dict[str, Any]:
    lunch = meals.lunch
    return {
        "generated_at": timetable.date.isoformat(timespec="seconds"),
        "dark_mode": timetable.dark_mode,
        "timetable": {
            "school_name": timetable.school_name,
            "grade": timetable.grade,
            "class_number": timetable.class_number,
            "items": [asdict(it) for it in timetable.items],
        },
        "meal": {
            "school_name": meals.school_name,
            "lunch": lunch.model_dump() if lunch else None,
            "meals": [m.model_dump() for m in meals.meals],
        },
    }


def write_snapshot(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


class WidgetRefresher:
    """Refreshes both widgets on a timer, or early when the reload token moves."""

    def __init__(
        self,
        store: SharedStore,
        timetable: TimetableWidgetProvider,
        meals: MealWidgetProvider,
        poll_seconds: int = 5,
        snapshot_path: str | Path | None = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.timetable = timetable
        self.meals = meals
        self.poll_seconds = poll_seconds
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self.clock = clock
        self.sleep = sleep

        self.last_token: str | None = None
        self.next_refresh_at: datetime | None = None
        self.last_snapshot: Dict[str, Any] | None = None

    def refresh(self, reason: str = "scheduled") -> Dict[str, Any]:
        # read the token first so a write landing mid-refresh triggers another pass
        self.last_token = self.store.reload_token()
        now = self.clock()

        timetable = self.timetable.timeline(now)
        meals = self.meals.timeline(now)

        snapshot = snapshot_of(timetable.entries[0], meals.entries[0])
        if self.snapshot_path:
            write_snapshot(self.snapshot_path, snapshot)

        self.next_refresh_at = min(timetable.refresh_at, meals.refresh_at)
        self.last_snapshot = snapshot
        logger.info(
            "widget refreshed (%s): %s, %d periods, lunch=%s",
            reason,
            snapshot["timetable"]["school_name"],
            len(snapshot["timetable"]["items"]),
            "yes" if snapshot["meal"]["lunch"] else "no",
        )
        return snapshot

    def tick(self) -> str | None:
        """One poll step; returns the refresh reason when a refresh happened."""
        if self.next_refresh_at is None:
            self.refresh("initial")
            return "initial"
        if self.store.reload_token() != self.last_token:
            self.refresh("reload")
            return "reload"
        if self.clock() >= self.next_refresh_at:
            self.refresh("scheduled")
            return "scheduled"
        return None

    def run(self, max_polls: int | None = None) -> None:
        polls = 0
        while max_polls is None or polls < max_polls:
            self.tick()
            polls += 1
            if max_polls is None or polls < max_polls:
                self.sleep(self.poll_seconds)
