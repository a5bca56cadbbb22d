from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from schoollife.api.deps import get_neis_client, get_override_store, get_selection, require_selection
from schoollife.core.app_logger import get_logger
from schoollife.schemas.school import SchoolSelection
from schoollife.schemas.timetable import (
    OverrideDelete,
    OverrideIn,
    OverrideLayer,
    OverrideMapsOut,
    OverrideTarget,
    ResolvedPeriod,
    TimetableFeed,
    TimetableRecord,
)
from schoollife.services.neis import NeisClient
from schoollife.services.override_keys import (
    ResolutionContext,
    api_date,
    record_date_key,
    record_weekly_key,
    weekday_number,
)
from schoollife.services.override_store import OverrideStore
from schoollife.services.resolution import resolve_feed

router = APIRouter(prefix="/timetable", tags=["timetable"])

logger = get_logger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def context_for(selection: SchoolSelection, day: date) -> ResolutionContext:
    return ResolutionContext(
        school_code=selection.school_code,
        grade=selection.grade,
        class_number=selection.class_number,
        display_date=day,
    )


def record_for(target: OverrideTarget) -> TimetableRecord:
    return TimetableRecord(
        date=api_date(target.day),
        grade=target.record_grade,
        class_number=target.record_class_number,
        period=target.period.strip(),
        raw_subject=target.raw_subject,
    )


def resolved_one(store: OverrideStore, record: TimetableRecord, ctx: ResolutionContext) -> ResolvedPeriod:
    return resolve_feed([record], store.maps, ctx)[0]


def storage_unavailable(exc: SQLAlchemyError) -> HTTPException:
    logger.error("override write failed: %s", exc)
    return HTTPException(status_code=503, detail="shared storage unavailable")


# ----------------------------
# RESOLVED FEED
# ----------------------------
@router.get("", response_model=TimetableFeed)
def get_timetable(
    day: date | None = Query(None, description="Defaults to today"),
    selection: SchoolSelection = Depends(get_selection),
    store: OverrideStore = Depends(get_override_store),
    client: NeisClient = Depends(get_neis_client),
):
    day = day or date.today()
    ctx = context_for(selection, day)

    records: list[TimetableRecord] = []
    if selection.is_configured:
        records = client.fetch_timetable(
            selection.office_code, selection.school_code, day, selection.grade, selection.class_number
        )

    # the widget process may have written since our last look
    maps = store.load()
    periods = resolve_feed(records, maps, ctx)

    return TimetableFeed(
        day=day,
        school_code=selection.school_code,
        grade=selection.grade,
        class_number=selection.class_number,
        weekday=weekday_number(day),
        count=len(periods),
        periods=periods,
    )


# ----------------------------
# OVERRIDES
# ----------------------------
@router.get("/overrides", response_model=OverrideMapsOut)
def list_overrides(store: OverrideStore = Depends(get_override_store)):
    maps = store.load()
    return OverrideMapsOut(date=maps.date, weekly=maps.weekly, replace=maps.replace)


@router.put("/overrides", response_model=ResolvedPeriod)
def set_override(
    payload: OverrideIn,
    selection: SchoolSelection = Depends(require_selection),
    store: OverrideStore = Depends(get_override_store),
):
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=422, detail="override text is empty")

    record = record_for(payload)
    ctx = context_for(selection, payload.day)

    try:
        with store.editing():
            if payload.mode == OverrideLayer.date:
                store.set_date_override(record_date_key(record, ctx), text)
            elif payload.mode == OverrideLayer.weekly:
                store.set_weekly_override(record_weekly_key(record, ctx), text)
            elif not store.set_replace_rule(record.raw_subject or "", text):
                raise HTTPException(status_code=422, detail="no original subject to replace")
    except SQLAlchemyError as exc:
        raise storage_unavailable(exc)

    return resolved_one(store, record, ctx)


@router.delete("/overrides", response_model=ResolvedPeriod)
def delete_override(
    payload: OverrideDelete,
    selection: SchoolSelection = Depends(require_selection),
    store: OverrideStore = Depends(get_override_store),
):
    record = record_for(payload)
    ctx = context_for(selection, payload.day)

    try:
        with store.editing():
            if payload.mode == OverrideLayer.date:
                store.clear_date_override(record_date_key(record, ctx))
            elif payload.mode == OverrideLayer.weekly:
                store.clear_weekly_override(record_weekly_key(record, ctx))
            elif (record.raw_subject or "").strip():
                store.clear_replace_rule(record.raw_subject)
    except SQLAlchemyError as exc:
        raise storage_unavailable(exc)

    return resolved_one(store, record, ctx)


@router.post("/overrides/clear", response_model=ResolvedPeriod)
def clear_overrides(
    payload: OverrideTarget,
    selection: SchoolSelection = Depends(require_selection),
    store: OverrideStore = Depends(get_override_store),
):
    record = record_for(payload)
    ctx = context_for(selection, payload.day)

    try:
        with store.editing():
            store.clear_all_for_record(record, ctx)
    except SQLAlchemyError as exc:
        raise storage_unavailable(exc)

    return resolved_one(store, record, ctx)
