from __future__ import annotations

from schoollife.core.app_logger import get_logger
from schoollife.schemas.school import SchoolSelection
from schoollife.services.shared_store import SharedStore

OFFICE_CODE_KEY = "savedOfficeCode"
SCHOOL_CODE_KEY = "savedSchoolCode"
SCHOOL_NAME_KEY = "savedSchoolName"
GRADE_KEY = "savedGrade"
CLASS_KEY = "savedClass"
DARK_MODE_KEY = "isDarkMode"

DEFAULT_GRADE = "1"
DEFAULT_CLASS = "1"

logger = get_logger(__name__)


def load_selection(store: SharedStore) -> SchoolSelection:
    raw = store.get_many(
        OFFICE_CODE_KEY, SCHOOL_CODE_KEY, SCHOOL_NAME_KEY, GRADE_KEY, CLASS_KEY, DARK_MODE_KEY
    )
    return SchoolSelection(
        office_code=raw[OFFICE_CODE_KEY] or "",
        school_code=raw[SCHOOL_CODE_KEY] or "",
        school_name=raw[SCHOOL_NAME_KEY] or "",
        grade=raw[GRADE_KEY] or DEFAULT_GRADE,
        class_number=raw[CLASS_KEY] or DEFAULT_CLASS,
        dark_mode=(raw[DARK_MODE_KEY] or "").strip().lower() in ("1", "true", "yes"),
    )


def save_school(store: SharedStore, office_code: str, school_code: str, school_name: str) -> SchoolSelection:
    """Switch school; grade and class go back to 1."""
    store.touch_reload({
        OFFICE_CODE_KEY: office_code,
        SCHOOL_CODE_KEY: school_code,
        SCHOOL_NAME_KEY: school_name,
        GRADE_KEY: DEFAULT_GRADE,
        CLASS_KEY: DEFAULT_CLASS,
    })
    logger.info("school selected: %s (%s/%s)", school_name, office_code, school_code)
    return load_selection(store)


def save_class(store: SharedStore, grade: str, class_number: str) -> SchoolSelection:
    store.touch_reload({GRADE_KEY: grade, CLASS_KEY: class_number})
    return load_selection(store)


def set_dark_mode(store: SharedStore, enabled: bool) -> SchoolSelection:
    store.touch_reload({DARK_MODE_KEY: "1" if enabled else "0"})
    return load_selection(store)
