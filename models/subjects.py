from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from database.db import Base
from models.users import utcnow


class Subject(Base):
    __tablename__ = "subjects"  # 이수 과목 테이블 (사용자별)
    __table_args__ = (
        UniqueConstraint("code", "user_id", name="uq_subjects_code_user"),  # 사용자당 과목 코드 중복 불가
    )

    id = Column(String(36), primary_key=True, index=True)             # 과목 고유 ID (uuid4)
    code = Column(String(8), nullable=False)                         # 과목 코드 (예: NUR 1234)
    name = Column(String(50), nullable=False)                        # 과목 이름
    year = Column(Integer, nullable=False)                           # 학년
    semester = Column(Integer, nullable=False)                       # 학기 (1 또는 2)
    credits = Column(Integer, nullable=False)                        # 학점 수
    grade = Column(String(10), nullable=False, default="N/A")        # 성적 등급 (예: A+, B, N/A)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
