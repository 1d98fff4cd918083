"""
성적표 CSV → DB 과목 일괄 등록

CSV 헤더: code,name,year,semester,credits,grade
(year/semester/credits 가 비어 있으면 과목 코드에서 유추)

사용: python -m scripts.import_subjects student@example.com data/subjects.csv
"""
import csv
import logging
import sys

from sqlalchemy.orm import Session
from database.db import SessionLocal, init_db
from models.users import User                       # ✅ 모델 import
from services.subject_service import add_subject

logger = logging.getLogger(__name__)

CSV_PATH = "data/subjects.csv"  # ✅ 기본 파일 경로
CSV_FIELDS = ("code", "name", "year", "semester", "credits", "grade")


def import_subjects(db: Session, user_id: str, csv_path: str = CSV_PATH) -> dict:
    """행 단위로 add_subject 호출. 실패한 행은 건너뛰고 사유를 모아 반환"""
    added, skipped = 0, []

    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        for line_no, row in enumerate(reader, start=2):
            payload = {key: (row.get(key) or "").strip() for key in CSV_FIELDS}
            result = add_subject(db, user_id, payload)
            if result.success:
                added += 1
            else:
                skipped.append({"line": line_no, "code": payload["code"], "reason": result.error.message})

    return {"added": added, "skipped": skipped}


def migrate_subjects(email: str, csv_path: str = CSV_PATH):
    init_db()
    db: Session = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            print(f"❌ 사용자를 찾을 수 없음: {email}")
            return None

        summary = import_subjects(db, user.id, csv_path)
    finally:
        db.close()

    for item in summary["skipped"]:
        print(f"  - {item['line']}행 {item['code']}: {item['reason']}")
    print(f"✅ 과목 CSV → DB 마이그레이션 완료 (추가 {summary['added']}건, 건너뜀 {len(summary['skipped'])}건)")
    return summary


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) < 2:
        print("사용법: python -m scripts.import_subjects <email> [csv_path]")
        sys.exit(1)
    migrate_subjects(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else CSV_PATH)
