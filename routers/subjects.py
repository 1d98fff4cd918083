from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user_id
from schemas.subjects import SubjectBulkDelete
from services import subject_service

router = APIRouter(prefix="/subjects", tags=["과목"])

# ==========================================================
# 응답은 모두 {"success", "data", "error", "message"} 형식
# - 세션이 없으면 success=False, error.code=UNAUTHORIZED
# - 입력 검증 실패는 error.fields 에 필드별 메시지
# ==========================================================


# ✅ [CREATE] 과목 추가 (학년/학기/학점 생략 시 과목 코드에서 유추)
@router.post("")
def create_subject(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return subject_service.add_subject(db, user_id, payload)


# ✅ [READ] 내 과목 전체 (학년 → 학기 → 등록순)
@router.get("")
def read_subjects(db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return subject_service.get_subjects(db, user_id)


# ✅ [READ] 마지막 학기를 제외한 과목
@router.get("/previous")
def read_previous_subjects(db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return subject_service.get_previous_semesters_subjects(db, user_id)


# ✅ [READ] 마지막 학기 과목
@router.get("/last")
def read_last_semester_subjects(db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return subject_service.get_last_semester_subjects(db, user_id)


# ✅ [DELETE] 여러 과목 일괄 삭제
@router.post("/bulk-delete")
def bulk_delete_subjects(
    body: SubjectBulkDelete,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return subject_service.delete_multiple_subjects(db, user_id, body.ids)


# ✅ [READ] 특정 과목 조회
@router.get("/{subject_id}")
def read_subject(subject_id: str, db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return subject_service.get_subject_by_id(db, user_id, subject_id)


# ✅ [UPDATE] 과목 정보 전체 수정
@router.put("/{subject_id}")
def update_subject(
    subject_id: str,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return subject_service.update_subject(db, user_id, subject_id, payload)


# ✅ [UPDATE] 성적만 수정
@router.patch("/{subject_id}/grade")
def update_subject_grade(
    subject_id: str,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return subject_service.update_subject_grade(db, user_id, subject_id, payload.get("grade"))


# ✅ [DELETE] 과목 삭제
@router.delete("/{subject_id}")
def delete_subject(subject_id: str, db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_current_user_id)):
    return subject_service.delete_subject(db, user_id, subject_id)
