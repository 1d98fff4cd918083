from typing import Any, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from schemas.subjects import Subject


# ✅ 학기 묶음: (학년, 학기) 키 하나에 속한 과목과 파생 지표
class SemesterGroup(BaseModel):
    year: int                                # 학년
    semester: int                            # 학기
    subjects: List[Any] = Field(default_factory=list)   # 입력 순서 유지
    gpa: float = 0.0                         # 학기 GPA
    credits: float = 0                       # 학기 이수 학점 합
    count: int = 0                           # 과목 수

    model_config = ConfigDict(extra="ignore")

    @property
    def key(self):
        return (self.year, self.semester)

    @property
    def semester_label(self) -> str:
        return f"Y{self.year}S{self.semester}"

    @property
    def display_label(self) -> str:
        return f"Year {self.year}, Sem {self.semester}"


# ✅ 차트/목록 응답용 학기 묶음 (과목은 출력 스키마로 직렬화)
class SemesterGroupOut(BaseModel):
    year: int
    semester: int
    semester_label: str
    display_label: str
    gpa: float
    credits: float
    count: int
    subjects: List[Subject]


class SemesterOverview(BaseModel):
    range: Literal["all", "last"] = "all"
    total_gpa: float = 0.0                   # 전체 GPA
    groups: List[SemesterGroupOut] = Field(default_factory=list)


# ✅ 대시보드 카드 지표
class DashboardStats(BaseModel):
    total_gpa: float = 0.0                   # 전체 GPA
    previous_gpa: float = 0.0                # 마지막 학기 제외 GPA
    last_semester_gpa: float = 0.0           # 마지막 학기 GPA
    total_credits: float = 0                 # 전체 이수 학점
    previous_credits: float = 0              # 마지막 학기 제외 학점
    last_semester_credits: float = 0         # 마지막 학기 학점
    total_repeats: int = 0                   # 전체 F 과목 수 (재수강 대상)
    previous_repeats: int = 0                # 마지막 학기 제외 F 과목 수
    last_semester_repeats: int = 0           # 마지막 학기 F 과목 수
    growth_rate: float = 0.0                 # (전체 - 이전) / 이전 * 100
    latest_year: Optional[int] = None        # 가장 최근 학년
    latest_semester: Optional[int] = None    # 가장 최근 학기
