import logging
import secrets
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from config.settings import settings
from models.users import User, UserSession, utcnow

logger = logging.getLogger(__name__)


class EmailAlreadyRegistered(ValueError):
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def register_user(db: Session, email: str, name: str, password: str) -> User:
    """새 계정 생성. 이메일이 이미 있으면 EmailAlreadyRegistered"""
    email = normalize_email(email)
    if db.query(User).filter(User.email == email).first():
        raise EmailAlreadyRegistered(email)

    user = User(
        id=str(uuid.uuid4()),
        email=email,
        name=name.strip(),
        password_hash=generate_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"사용자 가입 완료: user_id={user.id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    이메일 & 비밀번호로 사용자 인증.
    유효하면 User 객체, 아니면 None.
    """
    if not email or not password:
        return None

    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        return None

    if not check_password_hash(user.password_hash, password):
        return None

    return user


def create_session(db: Session, user: User) -> UserSession:
    session = UserSession(
        token=secrets.token_urlsafe(settings.SESSION_TOKEN_BYTES),
        user_id=user.id,
        expires_at=utcnow() + timedelta(minutes=settings.SESSION_TTL_MINUTES),
    )
    db.add(session)
    db.commit()
    return session


def revoke_session(db: Session, token: str) -> bool:
    deleted = db.query(UserSession).filter(UserSession.token == token).delete()
    db.commit()
    return bool(deleted)


def resolve_session_user_id(db: Session, token: Optional[str]) -> Optional[str]:
    """토큰 → 소유자 ID. 없거나 만료됐으면 None"""
    if not token:
        return None

    session = db.query(UserSession).filter(UserSession.token == token).first()
    if session is None:
        return None

    if session.expires_at <= utcnow():
        # 만료 세션은 즉시 정리
        db.delete(session)
        db.commit()
        return None

    return session.user_id


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()
