from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["대시보드"])


# ✅ [STATS] 전체/이전/마지막 학기 GPA, 학점, F 과목 수, 성장률
@router.get("/stats")
def get_dashboard_stats(db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return dashboard_service.get_dashboard_stats(db, user_id)


# ✅ [TREND] 학기별 GPA 추이 (차트용)
@router.get("/semesters")
def get_semester_overview(
    period: Literal["all", "last"] = Query("all", alias="range", description="all: 전체 학기, last: 최근 학년"),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return dashboard_service.get_semester_overview(db, user_id, period)
