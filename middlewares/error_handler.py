import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schemas.common import INTERNAL_ERROR, VALIDATION_ERROR, ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _error_json(status_code: int, detail: ErrorDetail) -> JSONResponse:
    body = ErrorResponse(error=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def add_error_handlers(app: FastAPI):
    # 요청 본문/쿼리 형식 오류 → 서비스 결과와 같은 봉투 형식
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = {}
        for err in exc.errors():
            loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
            fields.setdefault(".".join(loc) or "body", []).append(err.get("msg", "Invalid value"))
        return _error_json(422, ErrorDetail(code=VALIDATION_ERROR, message="Invalid request", fields=fields))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"처리되지 않은 예외: {request.method} {request.url.path}")
        return _error_json(500, ErrorDetail(code=INTERNAL_ERROR, message="Internal server error"))
