from __future__ import annotations

from typing import Iterable, List, Tuple

from schoollife.schemas.timetable import OverrideLayer, ResolvedPeriod, TimetableRecord
from schoollife.services.override_keys import (
    ResolutionContext,
    record_date_key,
    record_weekly_key,
    subject_key,
)
from schoollife.services.override_store import OverrideMaps

PLACEHOLDER = "-"


def _present(text: str | None) -> str | None:
    if text is None:
        return None
    text = text.strip()
    return text or None


def matched_override(
    record: TimetableRecord, maps: OverrideMaps, ctx: ResolutionContext
) -> Tuple[OverrideLayer, str] | None:
    """First non-blank layer in order: date, weekly, subject replacement."""
    text = _present(maps.date.get(record_date_key(record, ctx)))
    if text:
        return OverrideLayer.date, text

    text = _present(maps.weekly.get(record_weekly_key(record, ctx)))
    if text:
        return OverrideLayer.weekly, text

    original = subject_key(record)
    if original:
        text = _present(maps.replace.get(original))
        if text:
            return OverrideLayer.replace, text

    return None


def resolve_display_text(record: TimetableRecord, maps: OverrideMaps, ctx: ResolutionContext) -> str:
    hit = matched_override(record, maps, ctx)
    if hit:
        return hit[1]
    return subject_key(record) or PLACEHOLDER


def has_any_override(record: TimetableRecord, maps: OverrideMaps, ctx: ResolutionContext) -> bool:
    return matched_override(record, maps, ctx) is not None


def period_sort_key(record: TimetableRecord) -> int:
    try:
        return int((record.period or "").strip())
    except ValueError:
        return 0


def resolve_feed(
    records: Iterable[TimetableRecord], maps: OverrideMaps, ctx: ResolutionContext
) -> List[ResolvedPeriod]:
    out: List[ResolvedPeriod] = []
    for record in sorted(records, key=period_sort_key):
        hit = matched_override(record, maps, ctx)
        out.append(
            ResolvedPeriod(
                period=record.period or "",
                raw_subject=record.raw_subject,
                display_text=hit[1] if hit else (subject_key(record) or PLACEHOLDER),
                edited=hit is not None,
                layer=hit[0] if hit else None,
            )
        )
    return out
