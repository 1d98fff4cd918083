"""
schemas/common.py

- 프로젝트 전반에서 재사용할 공용 스키마 모음
- Pydantic v2 기준
- 포함 내용:
  1) 에러 응답 표준: ErrorDetail, ErrorResponse
  2) 서비스 결과 래퍼: ServiceResult[T] (success 플래그 + data 또는 error)
  3) pydantic ValidationError → 필드별 메시지 변환
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, ConfigDict, ValidationError


# =========================================================
# 1) 에러 응답 표준
# =========================================================

# 서비스 계층 에러 코드
UNAUTHORIZED = "UNAUTHORIZED"
VALIDATION_ERROR = "VALIDATION_ERROR"
DUPLICATE = "DUPLICATE"
NOT_FOUND = "NOT_FOUND"
STORAGE_ERROR = "STORAGE_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """에러 코드/메시지를 담는 최소 단위"""
    code: str = Field(..., description="에러 식별 코드 (예: UNAUTHORIZED, DUPLICATE)")
    message: str = Field(..., description="사람이 읽을 수 있는 에러 메시지")
    fields: Optional[Dict[str, List[str]]] = Field(
        default=None, description="입력 검증 실패 시 필드별 메시지"
    )

    model_config = ConfigDict(extra="ignore")


class ErrorResponse(BaseModel):
    """
    전역 에러 핸들러에서 내려주는 표준 에러 응답
    - middlewares/error_handler.py에서 이 스키마로 리턴
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="응답 생성 시각 (UTC)"
    )

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) 서비스 결과 래퍼
# =========================================================

T = TypeVar("T")


class ServiceResult(BaseModel, Generic[T]):
    """
    서비스 함수의 공통 반환형
    - 예외를 밖으로 던지지 않고 success 플래그로 성공/실패 전달
    - 호출자는 data를 읽기 전에 success를 먼저 확인해야 함
    """
    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None
    message: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def ok(cls, data=None, message: Optional[str] = None):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, code: str, message: str, fields: Optional[Dict[str, List[str]]] = None, data=None):
        return cls(success=False, data=data, error=ErrorDetail(code=code, message=message, fields=fields))

    @classmethod
    def unauthorized(cls, data=None):
        return cls.fail(UNAUTHORIZED, "Unauthorized", data=data)


# =========================================================
# 3) ValidationError → {"field": ["msg", ...]}
# =========================================================

def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "non_field"
        message = err.get("msg", "Invalid value")
        # field_validator에서 던진 ValueError 메시지 앞 접두어 제거
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors
