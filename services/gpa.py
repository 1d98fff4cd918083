"""
services/gpa.py

- 학점(GPA) 계산/집계 로직 모음 (DB, 세션과 무관한 순수 함수)
- 입력은 credits, grade 속성을 가진 객체면 무엇이든 가능
  (ORM Subject, schemas.subjects.Subject, 시뮬레이션 행 등)
- 포함 내용:
  1) 등급 → 평점 변환표
  2) 가중 평균 GPA 계산
  3) (학년, 학기) 기준 그룹화
  4) 최근 학기 판별 / 대시보드 지표 / 성장률
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from schemas.dashboard import DashboardStats, SemesterGroup


# =========================================================
# 1) 등급 → 평점 변환표
# =========================================================

NOT_GRADED = "N/A"
FAILING_GRADE = "F"

GRADE_POINTS = {
    "A+": 4.0,
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "F": 0.0,
    NOT_GRADED: 0.0,
}

# 입력 폼에서 선택 가능한 등급 (N/A 제외)
GRADE_OPTIONS = [g for g in GRADE_POINTS if g != NOT_GRADED]

# C+ 미만 → 개선 필요 과목
LOW_GRADES = ("C-", "D+", "D", "F")

# 시뮬레이션에서 저성적 과목에 대입해 볼 등급
SIMULATION_GRADE_OPTIONS = ["C", "C-", "D+", "D", "F"]


def get_grade_point(grade: Optional[str]) -> float:
    """표에 없는 등급(N/A, None 포함)은 0.0"""
    if grade is None:
        return 0.0
    return GRADE_POINTS.get(grade, 0.0)


def is_valid_grade(grade: Optional[str]) -> bool:
    return grade in GRADE_POINTS


def is_low_grade(grade: Optional[str]) -> bool:
    return grade in LOW_GRADES


# =========================================================
# 2) GPA 계산
# =========================================================

def total_credits(subjects: Iterable) -> float:
    return sum(s.credits for s in subjects)


def count_failing(subjects: Iterable) -> int:
    """F 등급 과목 수 (재수강 대상)"""
    return sum(1 for s in subjects if s.grade == FAILING_GRADE)


def _weighted_average(subjects: Iterable) -> float:
    # 반올림 전 값 (성장률 계산용)
    credits_sum = 0.0
    points_sum = 0.0
    for s in subjects:
        credits_sum += s.credits
        points_sum += get_grade_point(s.grade) * s.credits

    if credits_sum <= 0:
        return 0.0
    return points_sum / credits_sum


def calculate_gpa(subjects: Iterable) -> float:
    """
    학점 가중 평균 평점
    - sum(평점 * 학점) / sum(학점), 소수 둘째 자리 반올림
    - 비어 있거나 학점 합이 0이면 0.0
    """
    return round(_weighted_average(subjects), 2)


# =========================================================
# 3) 학기별 그룹화
# =========================================================

def group_by_semester(subjects: Iterable) -> List[SemesterGroup]:
    """(학년, 학기)별로 묶고 학년 → 학기 오름차순 정렬. 그룹 내부는 입력 순서 유지"""
    buckets = {}
    for s in subjects:
        buckets.setdefault((s.year, s.semester), []).append(s)

    groups = []
    for (year, semester), items in sorted(buckets.items(), key=lambda kv: kv[0]):
        groups.append(SemesterGroup(
            year=year,
            semester=semester,
            subjects=items,
            gpa=calculate_gpa(items),
            credits=total_credits(items),
            count=len(items),
        ))
    return groups


def filter_recent_groups(groups: Sequence[SemesterGroup]) -> List[SemesterGroup]:
    """
    최근 학년의 학기만 추림 (차트 'last' 범위)
    - 최근 학년에 학기가 하나뿐이면 직전 학기를 앞에 붙여 추세가 보이게 함
    """
    if not groups:
        return []

    last_year = max(g.year for g in groups)
    last_year_groups = [g for g in groups if g.year == last_year]

    if len(last_year_groups) == 1:
        earlier = [g for g in groups if g.year < last_year]
        if earlier:
            return [earlier[-1], *last_year_groups]

    return last_year_groups


# =========================================================
# 4) 최근 학기 / 대시보드 지표
# =========================================================

def find_latest_semester(subjects: Iterable) -> Optional[Tuple[int, int]]:
    """선형 탐색으로 가장 최근 (학년, 학기) 반환. 학년이 같으면 학기가 큰 쪽"""
    latest = None
    for s in subjects:
        if latest is None:
            latest = s
        elif s.year > latest.year:
            latest = s
        elif s.year == latest.year and s.semester > latest.semester:
            latest = s

    if latest is None:
        return None
    return latest.year, latest.semester


def split_by_latest_semester(subjects: Sequence) -> Tuple[list, list]:
    """(이전 학기들, 마지막 학기) 로 분리"""
    latest = find_latest_semester(subjects)
    if latest is None:
        return [], []

    previous = [s for s in subjects if (s.year, s.semester) != latest]
    last = [s for s in subjects if (s.year, s.semester) == latest]
    return previous, last


def calculate_growth_rate(total_gpa: float, previous_gpa: float) -> float:
    # 이전 GPA가 0이면 분모가 없으므로 0
    if previous_gpa <= 0:
        return 0.0
    return round((total_gpa - previous_gpa) / previous_gpa * 100, 2)


def build_dashboard_stats(all_subjects: Sequence, previous: Sequence, last: Sequence) -> DashboardStats:
    # 성장률은 반올림 전 GPA로 계산하고 결과만 반올림
    raw_total = _weighted_average(all_subjects)
    raw_previous = _weighted_average(previous)
    latest = find_latest_semester(last)

    return DashboardStats(
        total_gpa=round(raw_total, 2),
        previous_gpa=round(raw_previous, 2),
        last_semester_gpa=calculate_gpa(last),
        total_credits=total_credits(all_subjects),
        previous_credits=total_credits(previous),
        last_semester_credits=total_credits(last),
        total_repeats=count_failing(all_subjects),
        previous_repeats=count_failing(previous),
        last_semester_repeats=count_failing(last),
        growth_rate=calculate_growth_rate(raw_total, raw_previous),
        latest_year=latest[0] if latest else None,
        latest_semester=latest[1] if latest else None,
    )


def compute_dashboard_stats(subjects: Sequence) -> DashboardStats:
    """전체 과목 목록 하나로 세 가지 뷰를 나눈 뒤 지표 계산"""
    previous, last = split_by_latest_semester(subjects)
    return build_dashboard_stats(subjects, previous, last)
