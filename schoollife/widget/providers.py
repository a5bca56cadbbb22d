"""Timeline providers for the home-screen widgets.

The widget runs in its own process. Each entry re-reads the selection and the
override layers from the shared store, so it never trusts a copy from a previous
refresh.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List

from schoollife.schemas.school import Meal
from schoollife.services.neis import NeisClient
from schoollife.services.override_keys import ResolutionContext
from schoollife.services.override_store import OverrideStore
from schoollife.services.preferences import load_selection
from schoollife.services.resolution import resolve_feed
from schoollife.services.shared_store import SharedStore

NOT_CONFIGURED = "앱에서 학교를 먼저 설정하세요"
NO_SCHOOL_NAME = "학교를 선택하세요"
LUNCH = "중식"
REFRESH_AFTER = timedelta(hours=1)


@dataclass
class TimetableItem:
    period: str
    subject: str


@dataclass
class TimetableWidgetEntry:
    date: datetime
    school_name: str
    grade: str
    class_number: str
    items: List[TimetableItem] = field(default_factory=list)
    dark_mode: bool = False


@dataclass
class MealWidgetEntry:
    date: datetime
    school_name: str
    meals: List[Meal] = field(default_factory=list)
    dark_mode: bool = False

    @property
    def lunch(self) -> Meal | None:
        return next((m for m in self.meals if LUNCH in m.kind), None)


@dataclass
class Timeline:
    entries: list
    refresh_at: datetime


class TimetableWidgetProvider:
    def __init__(self, store: SharedStore, client: NeisClient, refresh_after: timedelta = REFRESH_AFTER):
        self.store = store
        self.client = client
        self.refresh_after = refresh_after
        self.overrides = OverrideStore(store)

    def placeholder(self) -> TimetableWidgetEntry:
        return TimetableWidgetEntry(
            date=datetime.now(),
            school_name="학교명",
            grade="2",
            class_number="7",
            items=[
                TimetableItem("1", "생명과학Ⅰ"),
                TimetableItem("2", "기하"),
                TimetableItem("3", "영어Ⅱ"),
            ],
        )

    def entry(self, now: datetime | None = None) -> TimetableWidgetEntry:
        now = now or datetime.now()
        selection = load_selection(self.store)

        if not selection.is_configured:
            return TimetableWidgetEntry(
                date=now,
                school_name=NOT_CONFIGURED,
                grade=selection.grade,
                class_number=selection.class_number,
                dark_mode=selection.dark_mode,
            )

        today: date = now.date()
        maps = self.overrides.load()
        records = self.client.fetch_timetable(
            selection.office_code, selection.school_code, today, selection.grade, selection.class_number
        )
        ctx = ResolutionContext(selection.school_code, selection.grade, selection.class_number, today)

        return TimetableWidgetEntry(
            date=now,
            school_name=selection.school_name or NO_SCHOOL_NAME,
            grade=selection.grade,
            class_number=selection.class_number,
            items=[TimetableItem(p.period, p.display_text) for p in resolve_feed(records, maps, ctx)],
            dark_mode=selection.dark_mode,
        )

    def timeline(self, now: datetime | None = None) -> Timeline:
        now = now or datetime.now()
        return Timeline(entries=[self.entry(now)], refresh_at=now + self.refresh_after)


class MealWidgetProvider:
    def __init__(self, store: SharedStore, client: NeisClient, refresh_after: timedelta = REFRESH_AFTER):
        self.store = store
        self.client = client
        self.refresh_after = refresh_after

    def entry(self, now: datetime | None = None) -> MealWidgetEntry:
        now = now or datetime.now()
        selection = load_selection(self.store)

        if not selection.is_configured:
            return MealWidgetEntry(date=now, school_name=NOT_CONFIGURED, dark_mode=selection.dark_mode)

        meals = self.client.fetch_meals(selection.office_code, selection.school_code, now.date())
        return MealWidgetEntry(
            date=now,
            school_name=selection.school_name or NO_SCHOOL_NAME,
            meals=meals,
            dark_mode=selection.dark_mode,
        )

    def timeline(self, now: datetime | None = None) -> Timeline:
        now = now or datetime.now()
        return Timeline(entries=[self.entry(now)], refresh_at=now + self.refresh_after)
