import pytest
from sqlalchemy.exc import OperationalError

from schoollife.services import preferences
from schoollife.services.shared_store import RELOAD_TOKEN_KEY, SharedStore


def test_defaults_when_nothing_saved(shared_store):
    sel = preferences.load_selection(shared_store)

    assert sel.school_code == ""
    assert sel.grade == "1" and sel.class_number == "1"
    assert sel.dark_mode is False
    assert not sel.is_configured


def test_save_school_resets_grade_and_class(shared_store):
    preferences.save_class(shared_store, "3", "11")

    sel = preferences.save_school(shared_store, "B10", "7010057", "서울고등학교")

    assert sel.is_configured
    assert (sel.office_code, sel.school_code, sel.school_name) == ("B10", "7010057", "서울고등학교")
    assert (sel.grade, sel.class_number) == ("1", "1")
    assert shared_store.get(preferences.SCHOOL_CODE_KEY) == "7010057"


def test_every_change_bumps_reload_token(shared_store):
    tokens = set()
    preferences.save_school(shared_store, "B10", "S1", "학교")
    tokens.add(shared_store.get(RELOAD_TOKEN_KEY))
    preferences.save_class(shared_store, "2", "7")
    tokens.add(shared_store.get(RELOAD_TOKEN_KEY))
    preferences.set_dark_mode(shared_store, True)
    tokens.add(shared_store.get(RELOAD_TOKEN_KEY))

    assert len(tokens) == 3 and None not in tokens


def test_dark_mode_flag(shared_store):
    assert preferences.set_dark_mode(shared_store, True).dark_mode is True
    assert shared_store.get(preferences.DARK_MODE_KEY) == "1"
    assert preferences.set_dark_mode(shared_store, False).dark_mode is False


def test_shared_store_basics(shared_store):
    assert shared_store.get("missing") is None
    shared_store.set("a", "1")
    shared_store.set("a", "2")
    assert shared_store.get("a") == "2"
    shared_store.delete("a")
    assert shared_store.get("a") is None
    assert shared_store.get_many("a", "b") == {"a": None, "b": None}


def test_shared_store_delete_failure_rolls_back_and_raises(shared_store, session_factory):
    shared_store.set("savedGrade", "2")

    def locked_session():
        session = session_factory()

        def commit():
            raise OperationalError("DELETE", {}, Exception("database is locked"))

        session.commit = commit
        return session

    with pytest.raises(OperationalError):
        SharedStore(locked_session).delete("savedGrade")

    assert shared_store.get("savedGrade") == "2"
