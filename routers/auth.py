from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import AuthHeader, parse_bearer_token, require_user_id
from services import auth_service

router = APIRouter(prefix="/auth", tags=["인증"])


# ✅ 요청 형식 정의
class RegisterRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: str
    password: str


# ✅ 응답 형식 정의
class UserOut(BaseModel):
    id: str
    email: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    token: str
    expires_at: datetime
    user: UserOut


# ✅ [REGISTER] 회원가입
@router.post("/register", response_model=UserOut, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    try:
        return auth_service.register_user(db, request.email, request.name, request.password)
    except auth_service.EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="Email is already registered")


# ✅ [LOGIN] 로그인 → Bearer 토큰 발급
@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, request.email, request.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    session = auth_service.create_session(db, user)
    return {"token": session.token, "expires_at": session.expires_at, "user": user}


# ✅ [LOGOUT] 현재 토큰 폐기
@router.post("/logout")
def logout(authorization: AuthHeader = None, db: Session = Depends(get_db)):
    token = parse_bearer_token(authorization)
    revoked = auth_service.revoke_session(db, token) if token else False
    return {"success": True, "data": {"revoked": revoked}}


# ✅ [ME] 현재 로그인 사용자
@router.get("/me", response_model=UserOut)
def me(user_id: str = Depends(require_user_id), db: Session = Depends(get_db)):
    user = auth_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
