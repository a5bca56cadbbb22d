"""Client for the NEIS open education-data API.

Every call degrades to an empty list: transport errors, non-2xx responses, bodies that
are not JSON and unexpected shapes are logged and swallowed here so callers only ever
see "no data".
"""
from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, List

import requests

from schoollife.core.app_logger import get_logger
from schoollife.core.config import settings
from schoollife.schemas.school import Meal, School
from schoollife.schemas.timetable import TimetableRecord
from schoollife.services.override_keys import api_date

NO_DATA_CODE = "INFO-200"

_ALLERGY_MARK = re.compile(r"\([0-9.]+\)")

logger = get_logger(__name__)


def norm(s: Any) -> str:
    return ("" if s is None else str(s)).strip()


def clean_meal_text(text: str) -> str:
    return _ALLERGY_MARK.sub("", text.replace("<br/>", "\n"))


def first_rows(payload: Any, service: str) -> List[Dict[str, Any]]:
    """Pull the first non-empty ``row`` block out of a NEIS envelope.

    Shape: ``{service: [{"head": [...]}, {"row": [...]}]}``. When nothing matches the
    envelope is ``{"RESULT": {"CODE": "INFO-200", ...}}`` instead.
    """
    if not isinstance(payload, dict):
        return []

    blocks = payload.get(service)
    if not isinstance(blocks, list):
        result = payload.get("RESULT") or {}
        code = result.get("CODE") if isinstance(result, dict) else None
        if code == NO_DATA_CODE:
            logger.debug("%s: no data", service)
        else:
            logger.warning("%s: unexpected response (%s)", service, code)
        return []

    for block in blocks:
        rows = block.get("row") if isinstance(block, dict) else None
        if isinstance(rows, list) and rows:
            return [r for r in rows if isinstance(r, dict)]
    return []


class NeisClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://open.neis.go.kr/hub",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "NeisClient":
        return cls(settings.NEIS_API_KEY, settings.NEIS_BASE_URL, settings.NEIS_TIMEOUT_SECONDS)

    # ----------------------------
    # HTTP
    # ----------------------------
    def _get(self, service: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{service}"
        query = {"KEY": self.api_key, "Type": "json", **params}
        try:
            resp = self.session.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s request failed: %s", service, exc)
            return []

        if resp.status_code != 200:
            logger.warning("%s returned HTTP %s", service, resp.status_code)
            return []

        try:
            payload = resp.json()
        except ValueError:
            logger.warning("%s returned a body that is not JSON", service)
            return []

        return first_rows(payload, service)

    # ----------------------------
    # Endpoints
    # ----------------------------
    def search_schools(self, query: str) -> List[School]:
        query = norm(query)
        if not query:
            return []

        schools: List[School] = []
        for row in self._get("schoolInfo", {"SCHUL_NM": query}):
            office, code, name = norm(row.get("ATPT_OFCDC_SC_CODE")), norm(row.get("SD_SCHUL_CODE")), norm(row.get("SCHUL_NM"))
            if not (office and code and name):
                continue
            schools.append(School(office_code=office, school_code=code, name=name, address=norm(row.get("ORG_RDNMA")) or None))
        return schools

    def fetch_meals(self, office_code: str, school_code: str, day: date) -> List[Meal]:
        if not norm(school_code):
            return []

        meals: List[Meal] = []
        rows = self._get("mealServiceDietInfo", {
            "ATPT_OFCDC_SC_CODE": office_code,
            "SD_SCHUL_CODE": school_code,
            "MLSV_YMD": api_date(day),
        })
        for row in rows:
            kind = norm(row.get("MMEAL_SC_NM"))
            menu = row.get("DDISH_NM")
            if not kind or not isinstance(menu, str):
                continue
            meals.append(Meal(
                kind=kind,
                kind_code=norm(row.get("MMEAL_SC_CODE")),
                menu=clean_meal_text(menu),
                calories=norm(row.get("CAL_INFO")) or None,
            ))
        return meals

    def fetch_timetable(
        self, office_code: str, school_code: str, day: date, grade: str, class_number: str
    ) -> List[TimetableRecord]:
        if not norm(school_code):
            return []

        rows = self._get("hisTimetable", {
            "pIndex": 1,
            "pSize": 100,
            "ATPT_OFCDC_SC_CODE": office_code,
            "SD_SCHUL_CODE": school_code,
            "ALL_TI_YMD": api_date(day),
            "GRADE": grade,
            "CLASS_NM": class_number,
        })
        return [
            TimetableRecord(
                date=norm(row.get("ALL_TI_YMD")) or None,
                grade=norm(row.get("GRADE")) or None,
                class_number=norm(row.get("CLASS_NM")) or None,
                period=norm(row.get("PERIO")) or None,
                raw_subject=row.get("ITRT_CNTNT") if isinstance(row.get("ITRT_CNTNT"), str) else None,
            )
            for row in rows
        ]
