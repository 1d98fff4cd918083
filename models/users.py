from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String
from database.db import Base


def utcnow():
    # DB에는 timezone 정보 없이 UTC 기준으로 저장
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"  # 사용자(학생) 계정 테이블

    id = Column(String(36), primary_key=True, index=True)             # 사용자 고유 ID (uuid4)
    email = Column(String(255), unique=True, nullable=False)         # 로그인 이메일
    name = Column(String(100), nullable=False)                       # 표시 이름
    password_hash = Column(String(255), nullable=False)              # werkzeug 해시
    created_at = Column(DateTime, nullable=False, default=utcnow)    # 가입 시각


class UserSession(Base):
    __tablename__ = "user_sessions"  # 로그인 세션(Bearer 토큰) 테이블

    token = Column(String(128), primary_key=True)                                          # 불투명 토큰
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)                                           # 만료 시각 (UTC)
