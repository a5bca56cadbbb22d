"""Lookup keys for the three override layers.

Date key:   ``{school}|{YYYYMMDD}|{grade}|{class}|{period}``
Weekly key: ``{school}|G{grade}|C{class}|W{weekday}|P{period}``

The weekly weekday always comes from the date on screen, so a weekly override
recurs on every date with that weekday.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from schoollife.schemas.timetable import TimetableRecord

SEP = "|"


def api_date(d: date) -> str:
    return d.strftime("%Y%m%d")


def weekday_number(d: date) -> int:
    # 1 = Sunday ... 7 = Saturday
    return d.isoweekday() % 7 + 1


def date_key(school_code: str, ymd: str, grade: str, class_number: str, period: str) -> str:
    return SEP.join([school_code, ymd, grade, class_number, period])


def weekly_key(school_code: str, grade: str, class_number: str, weekday: int, period: str) -> str:
    return SEP.join([school_code, f"G{grade}", f"C{class_number}", f"W{weekday}", f"P{period}"])


@dataclass(frozen=True)
class ResolutionContext:
    school_code: str
    grade: str
    class_number: str
    display_date: date

    @property
    def ymd(self) -> str:
        return api_date(self.display_date)

    @property
    def weekday(self) -> int:
        return weekday_number(self.display_date)


def record_date_key(record: TimetableRecord, ctx: ResolutionContext) -> str:
    return date_key(
        ctx.school_code,
        record.date or ctx.ymd,
        record.grade or ctx.grade,
        record.class_number or ctx.class_number,
        record.period or "",
    )


def record_weekly_key(record: TimetableRecord, ctx: ResolutionContext) -> str:
    return weekly_key(ctx.school_code, ctx.grade, ctx.class_number, ctx.weekday, record.period or "")


def subject_key(record: TimetableRecord) -> str:
    """Replace-rule key: the untouched remote subject text, trimmed."""
    return (record.raw_subject or "").strip()
