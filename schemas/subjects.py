import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CODE_PATTERN = re.compile(r"^[A-Z]{3} \d{4}$")
# "XXX 1234" → 첫째 자리 학년, 둘째 자리 학기, 넷째 자리 학점
CODE_INFO_PATTERN = re.compile(r"^[A-Z]{3} (\d)(\d)\d(\d)$")

DEFAULT_CODE_INFO = {"year": 1, "semester": 1, "credits": 3}


def normalize_code(code):
    if isinstance(code, str):
        return code.strip().upper()
    return code


def parse_code_info(code: Optional[str]) -> dict:
    """과목 코드 숫자에서 학년/학기/학점 추출. 형식이 맞지 않으면 기본값"""
    # 문자열이 아니면 (숫자 등) 기본값, 형식 오류는 code 필드 검증에서 처리
    if not isinstance(code, str):
        return dict(DEFAULT_CODE_INFO)
    match = CODE_INFO_PATTERN.match(normalize_code(code))
    if not match:
        return dict(DEFAULT_CODE_INFO)
    year, semester, credits = (int(d) for d in match.groups())
    return {"year": year, "semester": semester, "credits": credits}


def validate_grade_value(value: str) -> str:
    # 순환 import 방지
    from services.gpa import is_valid_grade

    if not is_valid_grade(value):
        raise ValueError(f"Unknown grade '{value}'.")
    return value


# ✅ 입력용: 과목 추가/전체 수정에서 사용할 스키마
class SubjectCreate(BaseModel):
    code: str                                        # 과목 코드 (예: NUR 1234)
    name: str                                        # 과목 이름
    year: int = Field(..., gt=0)                     # 학년
    semester: int = Field(..., ge=1, le=2)           # 학기
    credits: int = Field(..., gt=0)                  # 학점
    grade: str = "N/A"                               # 성적 등급 (미입력 시 N/A)

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _fill_from_code(cls, data):
        # 학년/학기/학점이 빠져 있으면 과목 코드에서 유추
        if not isinstance(data, dict):
            return data
        data = dict(data)
        info = parse_code_info(data.get("code"))
        for key in ("year", "semester", "credits"):
            if data.get(key) in (None, ""):
                data[key] = info[key]
        return data

    @field_validator("code", mode="before")
    @classmethod
    def _normalize_code(cls, v):
        return normalize_code(v)

    @field_validator("code")
    @classmethod
    def _check_code(cls, v: str) -> str:
        if len(v) < 7:
            raise ValueError("Course code must be at least 7 characters.")
        if len(v) > 8:
            raise ValueError("Course code must be at most 8 characters.")
        if not CODE_PATTERN.match(v):
            raise ValueError("Course code must be in the format 'NUR 1234'.")
        return v

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if len(v) < 2:
            raise ValueError("Course unit name must be at least 2 characters.")
        if len(v) > 50:
            raise ValueError("Course unit name must be at most 50 characters.")
        return v

    @field_validator("grade", mode="before")
    @classmethod
    def _default_grade(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "N/A"
        return v

    @field_validator("grade")
    @classmethod
    def _check_grade(cls, v: str) -> str:
        return validate_grade_value(v)


# ✅ 입력용: 성적만 수정
class SubjectGradeUpdate(BaseModel):
    grade: str

    @field_validator("grade", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("grade")
    @classmethod
    def _check_grade(cls, v: str) -> str:
        if not v:
            raise ValueError("Please select a grade.")
        return validate_grade_value(v)


# ✅ 입력용: 여러 과목 일괄 삭제
class SubjectBulkDelete(BaseModel):
    ids: List[str] = Field(default_factory=list)


# ✅ 출력용: GET, POST 응답 등에서 사용할 스키마
class Subject(BaseModel):
    id: str                                  # 과목 고유 ID
    code: str                                # 과목 코드
    name: str                                # 과목 이름
    year: int                                # 학년
    semester: int                            # 학기
    credits: int                             # 학점
    grade: Optional[str] = "N/A"             # 성적 등급
    user_id: Optional[str] = None            # 소유자 ID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
