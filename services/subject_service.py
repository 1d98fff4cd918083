# services/subject_service.py
"""
과목(Subject) 저장소 연산

- 모든 함수는 (db, user_id, ...) 를 받고 ServiceResult 를 돌려준다.
- user_id 가 None 이면 UNAUTHORIZED 실패 결과 (예외 아님)
- DB 예외는 로그로 남기고 STORAGE_ERROR 실패 결과로 변환
- 모든 조회/수정은 소유자(user_id) 범위 안에서만 동작
"""
import logging
import uuid
from functools import wraps
from typing import Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.subjects import Subject as SubjectModel
from models.users import utcnow
from schemas.common import (
    DUPLICATE, NOT_FOUND, STORAGE_ERROR, VALIDATION_ERROR,
    ServiceResult, field_errors,
)
from schemas.subjects import Subject as SubjectSchema, SubjectCreate, SubjectGradeUpdate
from services.gpa import split_by_latest_semester

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Subject with this code already exists"
NOT_FOUND_MESSAGE = "Subject not found"


def owner_scoped(failure_message: str, empty=None):
    """
    공통 가드
    - 세션 없음 → UNAUTHORIZED
    - SQLAlchemyError → rollback 후 STORAGE_ERROR (메시지는 일반화)
    """
    def decorator(func):
        @wraps(func)
        def wrapped(db: Session, user_id: Optional[str], *args, **kwargs):
            if user_id is None:
                return ServiceResult.unauthorized(data=empty)
            try:
                return func(db, user_id, *args, **kwargs)
            except SQLAlchemyError:
                logger.exception(f"{failure_message}: user_id={user_id}")
                db.rollback()
                return ServiceResult.fail(STORAGE_ERROR, failure_message, data=empty)
        return wrapped
    return decorator


# =========================================================
# 내부 헬퍼
# =========================================================

def _query_owned(db: Session, user_id: str):
    return db.query(SubjectModel).filter(SubjectModel.user_id == user_id)


def load_subjects(db: Session, user_id: str) -> List[SubjectModel]:
    return (
        _query_owned(db, user_id)
        .order_by(SubjectModel.year, SubjectModel.semester, SubjectModel.created_at)
        .all()
    )


def to_schemas(rows: Iterable[SubjectModel]) -> List[SubjectSchema]:
    return [SubjectSchema.model_validate(r) for r in rows]


def _code_taken(db: Session, user_id: str, code: str, exclude_id: Optional[str] = None) -> bool:
    query = _query_owned(db, user_id).filter(SubjectModel.code == code)
    if exclude_id is not None:
        query = query.filter(SubjectModel.id != exclude_id)
    return db.query(query.exists()).scalar()


def _validation_failure(exc: ValidationError) -> ServiceResult:
    return ServiceResult.fail(VALIDATION_ERROR, "Invalid subject data", fields=field_errors(exc))


# =========================================================
# CREATE
# =========================================================

@owner_scoped("Failed to add subject")
def add_subject(db: Session, user_id: str, payload) -> ServiceResult:
    try:
        data = SubjectCreate.model_validate(payload)
    except ValidationError as exc:
        return _validation_failure(exc)

    if _code_taken(db, user_id, data.code):
        return ServiceResult.fail(DUPLICATE, DUPLICATE_MESSAGE)

    now = utcnow()
    subject = SubjectModel(
        id=str(uuid.uuid4()),
        user_id=user_id,
        created_at=now,
        updated_at=now,
        **data.model_dump(),
    )
    db.add(subject)
    try:
        db.commit()
    except IntegrityError:
        # 동시 요청으로 (code, user_id) 유니크 제약에 걸린 경우
        db.rollback()
        return ServiceResult.fail(DUPLICATE, DUPLICATE_MESSAGE)
    db.refresh(subject)

    logger.info(f"과목 추가: user_id={user_id}, code={subject.code}")
    return ServiceResult.ok(SubjectSchema.model_validate(subject), message="Subject added successfully")


# =========================================================
# READ
# =========================================================

@owner_scoped("Failed to fetch subjects", empty=[])
def get_subjects(db: Session, user_id: str) -> ServiceResult:
    return ServiceResult.ok(to_schemas(load_subjects(db, user_id)))


@owner_scoped("Failed to fetch previous semester subjects", empty=[])
def get_previous_semesters_subjects(db: Session, user_id: str) -> ServiceResult:
    """마지막 (학년, 학기) 하나만 제외한 과목"""
    previous, _ = split_by_latest_semester(load_subjects(db, user_id))
    return ServiceResult.ok(to_schemas(previous))


@owner_scoped("Failed to fetch last semester subjects", empty=[])
def get_last_semester_subjects(db: Session, user_id: str) -> ServiceResult:
    _, last = split_by_latest_semester(load_subjects(db, user_id))
    return ServiceResult.ok(to_schemas(last))


@owner_scoped("Failed to fetch subject")
def get_subject_by_id(db: Session, user_id: str, subject_id: str) -> ServiceResult:
    subject = _query_owned(db, user_id).filter(SubjectModel.id == subject_id).first()
    if subject is None:
        return ServiceResult.fail(NOT_FOUND, NOT_FOUND_MESSAGE)
    return ServiceResult.ok(SubjectSchema.model_validate(subject))


# =========================================================
# UPDATE
# =========================================================

@owner_scoped("Failed to update subject")
def update_subject(db: Session, user_id: str, subject_id: str, payload) -> ServiceResult:
    try:
        data = SubjectCreate.model_validate(payload)
    except ValidationError as exc:
        return _validation_failure(exc)

    subject = _query_owned(db, user_id).filter(SubjectModel.id == subject_id).first()
    if subject is None:
        return ServiceResult.fail(NOT_FOUND, NOT_FOUND_MESSAGE)

    if _code_taken(db, user_id, data.code, exclude_id=subject_id):
        return ServiceResult.fail(DUPLICATE, DUPLICATE_MESSAGE)

    for key, value in data.model_dump().items():
        setattr(subject, key, value)
    subject.updated_at = utcnow()

    db.commit()
    db.refresh(subject)
    return ServiceResult.ok(SubjectSchema.model_validate(subject), message="Subject updated successfully")


@owner_scoped("Failed to update subject grade")
def update_subject_grade(db: Session, user_id: str, subject_id: str, grade) -> ServiceResult:
    try:
        data = SubjectGradeUpdate(grade=grade)
    except ValidationError as exc:
        return _validation_failure(exc)

    subject = _query_owned(db, user_id).filter(SubjectModel.id == subject_id).first()
    if subject is None:
        return ServiceResult.fail(NOT_FOUND, NOT_FOUND_MESSAGE)

    subject.grade = data.grade
    subject.updated_at = utcnow()
    db.commit()
    db.refresh(subject)
    return ServiceResult.ok(SubjectSchema.model_validate(subject), message="Grade updated successfully")


# =========================================================
# DELETE
# =========================================================

@owner_scoped("Failed to delete subject")
def delete_subject(db: Session, user_id: str, subject_id: str) -> ServiceResult:
    deleted = _query_owned(db, user_id).filter(SubjectModel.id == subject_id).delete()
    db.commit()
    if not deleted:
        return ServiceResult.fail(NOT_FOUND, NOT_FOUND_MESSAGE)
    return ServiceResult.ok({"id": subject_id}, message="Subject deleted successfully")


@owner_scoped("Failed to delete subjects")
def delete_multiple_subjects(db: Session, user_id: str, ids: Iterable[str]) -> ServiceResult:
    """
    id 하나씩 삭제 + 커밋 (원자적 배치 아님)
    - 중간에 실패하면 이미 지워진 행은 되돌리지 않고, 지운 목록을 data에 담아 실패 반환
    """
    deleted_ids = []
    for subject_id in ids:
        try:
            count = _query_owned(db, user_id).filter(SubjectModel.id == subject_id).delete()
            db.commit()
        except SQLAlchemyError:
            logger.exception(f"일괄 삭제 중단: user_id={user_id}, subject_id={subject_id}, 완료={len(deleted_ids)}")
            db.rollback()
            return ServiceResult.fail(STORAGE_ERROR, "Failed to delete subjects", data={"deleted": deleted_ids})
        if count:
            deleted_ids.append(subject_id)

    return ServiceResult.ok({"deleted": deleted_ids}, message=f"{len(deleted_ids)} subject(s) deleted")
