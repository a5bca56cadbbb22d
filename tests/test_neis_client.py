from datetime import date

import requests

from conftest import FakeResponse, neis_envelope, timetable_rows
from schoollife.services.neis import clean_meal_text, first_rows

DAY = date(2024, 1, 15)


def test_timetable_rows_are_mapped(neis_client, fake_session):
    fake_session.responses["hisTimetable"] = FakeResponse(
        200, neis_envelope("hisTimetable", timetable_rows("20240115", "2", "7", ["수학", "영어"]))
    )

    records = neis_client.fetch_timetable("B10", "S1", DAY, "2", "7")

    assert [(r.period, r.raw_subject) for r in records] == [("1", "수학"), ("2", "영어")]
    assert records[0].date == "20240115" and records[0].grade == "2" and records[0].class_number == "7"

    params = fake_session.calls[0]["params"]
    assert params["ALL_TI_YMD"] == "20240115"
    assert params["SD_SCHUL_CODE"] == "S1"
    assert params["KEY"] == "test-key"
    assert params["pSize"] == 100
    assert fake_session.calls[0]["timeout"] == 3


def test_first_non_empty_row_block_wins():
    payload = {"hisTimetable": [{"head": []}, {"row": []}, {"row": [{"PERIO": "1"}]}]}
    assert first_rows(payload, "hisTimetable") == [{"PERIO": "1"}]


def test_no_data_result_is_empty(neis_client):
    assert neis_client.fetch_timetable("B10", "S1", DAY, "2", "7") == []


def test_transport_error_is_empty(neis_client, fake_session, transport_error):
    fake_session.responses["hisTimetable"] = transport_error
    assert neis_client.fetch_timetable("B10", "S1", DAY, "2", "7") == []


def test_timeout_is_empty(neis_client, fake_session):
    fake_session.responses["mealServiceDietInfo"] = requests.Timeout("slow")
    assert neis_client.fetch_meals("B10", "S1", DAY) == []


def test_http_error_is_empty(neis_client, fake_session):
    fake_session.responses["hisTimetable"] = FakeResponse(500, {"oops": True})
    assert neis_client.fetch_timetable("B10", "S1", DAY, "2", "7") == []


def test_undecodable_body_is_empty(neis_client, fake_session):
    fake_session.responses["hisTimetable"] = FakeResponse(200, None, text="<html>")
    assert neis_client.fetch_timetable("B10", "S1", DAY, "2", "7") == []


def test_unexpected_shape_is_empty(neis_client, fake_session):
    fake_session.responses["hisTimetable"] = FakeResponse(200, {"hisTimetable": "nope"})
    assert neis_client.fetch_timetable("B10", "S1", DAY, "2", "7") == []
    fake_session.responses["hisTimetable"] = FakeResponse(200, ["list"])
    assert neis_client.fetch_timetable("B10", "S1", DAY, "2", "7") == []


def test_missing_school_code_skips_request(neis_client, fake_session):
    assert neis_client.fetch_timetable("", "", DAY, "1", "1") == []
    assert neis_client.fetch_meals("", "  ", DAY) == []
    assert fake_session.calls == []


def test_meals_are_cleaned(neis_client, fake_session):
    fake_session.responses["mealServiceDietInfo"] = FakeResponse(200, neis_envelope("mealServiceDietInfo", [
        {"MMEAL_SC_NM": "중식", "MMEAL_SC_CODE": "2", "DDISH_NM": "불고기 (5.6.13)<br/>김치찌개(9.13)<br/>밥", "CAL_INFO": "800 Kcal"},
    ]))

    meals = neis_client.fetch_meals("B10", "S1", DAY)

    assert len(meals) == 1
    assert meals[0].kind == "중식"
    assert meals[0].menu == "불고기 \n김치찌개\n밥"
    assert meals[0].calories == "800 Kcal"
    assert fake_session.calls[0]["params"]["MLSV_YMD"] == "20240115"


def test_clean_meal_text():
    assert clean_meal_text("a(1.2)<br/>b") == "a\nb"


def test_school_search(neis_client, fake_session):
    fake_session.responses["schoolInfo"] = FakeResponse(200, neis_envelope("schoolInfo", [
        {"ATPT_OFCDC_SC_CODE": "B10", "SD_SCHUL_CODE": "7010057", "SCHUL_NM": "서울고등학교", "ORG_RDNMA": "서울특별시 서초구"},
        {"ATPT_OFCDC_SC_CODE": "B10", "SD_SCHUL_CODE": "", "SCHUL_NM": "broken"},
    ]))

    schools = neis_client.search_schools("서울고")

    assert [s.school_code for s in schools] == ["7010057"]
    assert schools[0].address == "서울특별시 서초구"
    assert fake_session.calls[0]["params"]["SCHUL_NM"] == "서울고"


def test_blank_search_skips_request(neis_client, fake_session):
    assert neis_client.search_schools("  ") == []
    assert fake_session.calls == []
