from sqlalchemy import create_engine               # SQLAlchemy 엔진 생성 도구
from sqlalchemy.orm import declarative_base        # 모델의 Base 클래스
from sqlalchemy.orm import sessionmaker            # 세션 팩토리 함수

from config.settings import settings               # ✅ 환경변수 설정 파일 불러오기

# ✅ SQLite는 요청 스레드가 달라도 같은 연결을 쓸 수 있도록 옵션 지정
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# ✅ 환경변수에서 DB 연결 URL을 불러와 엔진 생성
engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)

# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


# ==========================================================
# [공통] DB 세션 관리 (FastAPI Depends 용)
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """모든 모델을 등록한 뒤 테이블 생성 (이미 있으면 건너뜀)"""
    from models import subjects, users  # noqa: F401

    Base.metadata.create_all(bind=engine)
