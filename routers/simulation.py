from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from schemas.simulation import SimulationRequest
from services import simulation_service

router = APIRouter(prefix="/simulation", tags=["GPA 시뮬레이션"])


# ✅ [READ] 개선 대상(C- 이하) 과목
@router.get("/candidates")
def get_candidates(db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return simulation_service.get_simulation_candidates(db, user_id)


# ✅ [SIMULATE] 등급 가정/가상 과목을 적용한 GPA (저장하지 않음)
@router.post("")
def simulate(
    request: SimulationRequest,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return simulation_service.run_simulation(db, user_id, request.actions)
