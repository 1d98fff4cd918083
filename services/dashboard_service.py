import logging

from sqlalchemy.orm import Session

from schemas.common import ServiceResult
from schemas.dashboard import SemesterGroupOut, SemesterOverview
from services.gpa import calculate_gpa, compute_dashboard_stats, filter_recent_groups, group_by_semester
from services.subject_service import load_subjects, owner_scoped, to_schemas

logger = logging.getLogger(__name__)

# ==========================================================
# [대시보드] 카드 지표 / 학기별 추이
# - 요청마다 DB에서 읽은 과목으로 다시 계산 (캐시 없음)
# ==========================================================


@owner_scoped("Failed to compute dashboard stats")
def get_dashboard_stats(db: Session, user_id: str) -> ServiceResult:
    subjects = to_schemas(load_subjects(db, user_id))
    stats = compute_dashboard_stats(subjects)
    logger.debug(f"대시보드 지표 계산: user_id={user_id}, subjects={len(subjects)}, gpa={stats.total_gpa}")
    return ServiceResult.ok(stats)


@owner_scoped("Failed to fetch semester overview")
def get_semester_overview(db: Session, user_id: str, period: str = "all") -> ServiceResult:
    """
    차트용 학기별 GPA
    - period="all"  → 전체 학기
    - period="last" → 최근 학년 학기 (학기가 하나면 직전 학기 포함)
    """
    subjects = to_schemas(load_subjects(db, user_id))
    groups = group_by_semester(subjects)
    if period == "last":
        groups = filter_recent_groups(groups)

    return ServiceResult.ok(SemesterOverview(
        range=period,
        total_gpa=calculate_gpa(subjects),
        groups=[
            SemesterGroupOut(
                year=g.year,
                semester=g.semester,
                semester_label=g.semester_label,
                display_label=g.display_label,
                gpa=g.gpa,
                credits=g.credits,
                count=g.count,
                subjects=g.subjects,
            )
            for g in groups
        ],
    ))
