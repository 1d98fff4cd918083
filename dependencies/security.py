from typing import Optional, Annotated
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from services.auth_service import resolve_session_user_id

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer <token>' 파싱. 형식이 다르면 None"""
    if not authorization:
        return None

    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        return None

    if scheme.lower() != "bearer":
        return None

    return token.strip() or None


def get_current_user_id(authorization: AuthHeader = None, db: Session = Depends(get_db)) -> Optional[str]:
    """
    현재 세션의 소유자 ID, 세션이 없으면 None
    - 데이터 라우터는 None을 그대로 서비스에 넘기고, 서비스가 UNAUTHORIZED 결과를 돌려줌
    """
    return resolve_session_user_id(db, parse_bearer_token(authorization))


def require_user_id(user_id: Optional[str] = Depends(get_current_user_id)) -> str:
    # 인증 라우터(/auth/me 등)처럼 401로 끊어야 하는 곳에서 사용
    if user_id is None:
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
