from pydantic import BaseModel, Field


class School(BaseModel):
    office_code: str
    school_code: str
    name: str
    address: str | None = None


class Meal(BaseModel):
    kind: str            # 조식 / 중식 / 석식
    kind_code: str
    menu: str
    calories: str | None = None


class SchoolSelection(BaseModel):
    office_code: str = ""
    school_code: str = ""
    school_name: str = ""
    grade: str = "1"
    class_number: str = "1"
    dark_mode: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.school_code.strip())


class SchoolSelectionIn(BaseModel):
    office_code: str = Field(..., min_length=1, max_length=20)
    school_code: str = Field(..., min_length=1, max_length=20)
    school_name: str = Field(..., min_length=1, max_length=120)


class ClassSelectionIn(BaseModel):
    grade: str = Field(..., pattern=r"^\d{1,2}$")
    class_number: str = Field(..., pattern=r"^\d{1,2}$")


class ThemeIn(BaseModel):
    dark_mode: bool
