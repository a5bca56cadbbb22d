# tests/conftest.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List

import pytest
import requests
from sqlalchemy.orm import sessionmaker

from schoollife.db.session import init_db, make_engine
from schoollife.services.neis import NeisClient
from schoollife.services.override_keys import ResolutionContext
from schoollife.services.override_store import OverrideStore
from schoollife.services.shared_store import SharedStore

SCHOOL = "S1"
OFFICE = "B10"


# ==============================================================
# Shared store on a throwaway SQLite file
# ==============================================================

@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'shared.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def shared_store(session_factory) -> SharedStore:
    return SharedStore(session_factory)


@pytest.fixture
def override_store(shared_store) -> OverrideStore:
    store = OverrideStore(shared_store)
    store.load()
    return store


@pytest.fixture
def ctx() -> ResolutionContext:
    # 2024-01-15 is a Monday -> weekday 2
    return ResolutionContext(school_code=SCHOOL, grade="2", class_number="7", display_date=date(2024, 1, 15))


# ==============================================================
# Fake NEIS transport
# ==============================================================

class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; responses are keyed by NEIS service name."""

    def __init__(self):
        self.responses: Dict[str, Any] = {}
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, timeout=None):
        service = url.rsplit("/", 1)[-1]
        self.calls.append({"service": service, "params": dict(params or {}), "timeout": timeout})
        resp = self.responses.get(service)
        if isinstance(resp, Exception):
            raise resp
        if resp is None:
            return FakeResponse(200, {"RESULT": {"CODE": "INFO-200", "MESSAGE": "해당하는 데이터가 없습니다."}})
        return resp


def neis_envelope(service: str, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        service: [
            {"head": [{"list_total_count": len(rows)}, {"RESULT": {"CODE": "INFO-000", "MESSAGE": "정상 처리되었습니다."}}]},
            {"row": rows},
        ]
    }


def timetable_rows(ymd: str, grade: str, class_number: str, subjects: List[str]) -> List[Dict[str, Any]]:
    return [
        {"ALL_TI_YMD": ymd, "GRADE": grade, "CLASS_NM": class_number, "PERIO": str(i + 1), "ITRT_CNTNT": s}
        for i, s in enumerate(subjects)
    ]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def neis_client(fake_session) -> NeisClient:
    return NeisClient("test-key", "https://neis.test/hub", timeout=3, session=fake_session)


@pytest.fixture
def transport_error() -> Exception:
    return requests.ConnectionError("boom")
