from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from schemas.subjects import Subject


# ✅ 시뮬레이션 동작 (요청 순서대로 재생)
class OverrideAction(BaseModel):
    action: Literal["override"]
    subject_id: str                          # 대상 과목 ID
    grade: str                               # 가정할 등급


class AddAction(BaseModel):
    action: Literal["add"]
    id: Optional[str] = None                 # 클라이언트가 만든 임시 ID (없으면 서버에서 생성)
    code: Optional[str] = None
    name: Optional[str] = None
    year: Optional[int] = None
    semester: Optional[int] = None
    credits: Optional[int] = None
    grade: Optional[str] = None


class RemoveAction(BaseModel):
    action: Literal["remove"]
    subject_id: str


class ResetAction(BaseModel):
    action: Literal["reset"]


SimulationAction = Annotated[
    Union[OverrideAction, AddAction, RemoveAction, ResetAction],
    Field(discriminator="action"),
]


class SimulationRequest(BaseModel):
    actions: List[SimulationAction] = Field(default_factory=list)


# ✅ 저성적 과목 + 현재 가정 등급
class SimulationCandidate(BaseModel):
    subject: Subject
    simulated_grade: Optional[str] = None


class SimulationOutcome(BaseModel):
    original_gpa: float                      # 저장된 과목 기준 GPA
    simulated_gpa: float                     # 가정 반영 GPA
    gpa_delta: float                         # simulated - original (부호 포함)
    has_grade_changes: bool
    has_dummy_subjects: bool
    subjects: List[Subject]                  # 작업 사본 전체
    candidates: List[SimulationCandidate]    # 저성적 과목 목록
    grade_options: List[str]                 # 저성적 과목에 대입 가능한 등급
