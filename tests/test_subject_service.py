import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from models.subjects import Subject as SubjectModel
from schemas.common import DUPLICATE, NOT_FOUND, STORAGE_ERROR, UNAUTHORIZED, VALIDATION_ERROR
from services import subject_service


# =========================================================
# 인증 없음
# =========================================================

@pytest.mark.parametrize("call, args, empty", [
    (subject_service.get_subjects, (), []),
    (subject_service.get_previous_semesters_subjects, (), []),
    (subject_service.get_last_semester_subjects, (), []),
    (subject_service.get_subject_by_id, ("x",), None),
    (subject_service.add_subject, ({"code": "NUR 1113", "name": "Anatomy"},), None),
    (subject_service.update_subject, ("x", {"code": "NUR 1113", "name": "Anatomy"}), None),
    (subject_service.update_subject_grade, ("x", "A"), None),
    (subject_service.delete_subject, ("x",), None),
    (subject_service.delete_multiple_subjects, (["x"],), None),
])
def test_unauthorized_short_circuits(db, call, args, empty):
    result = call(db, None, *args)
    assert result.success is False
    assert result.error.code == UNAUTHORIZED
    assert result.data == empty


# =========================================================
# 추가
# =========================================================

def test_add_subject(db, user):
    result = subject_service.add_subject(db, user.id, {
        "code": "NUR 1113", "name": "Anatomy", "year": 1, "semester": 1, "credits": 3, "grade": "A-",
    })
    assert result.success
    assert result.data.code == "NUR 1113"
    assert result.data.grade == "A-"
    assert result.data.user_id == user.id
    assert result.data.created_at is not None
    assert db.query(SubjectModel).count() == 1


def test_add_subject_derives_year_semester_credits_from_code(db, user):
    result = subject_service.add_subject(db, user.id, {"code": "nur 1234 ", "name": "Pharmacology"})
    assert result.success
    assert result.data.code == "NUR 1234"
    assert (result.data.year, result.data.semester, result.data.credits) == (1, 2, 4)
    assert result.data.grade == "N/A"


def test_add_subject_accepts_form_strings(db, user):
    result = subject_service.add_subject(db, user.id, {
        "code": "NUR 2113", "name": "Ethics", "year": "2", "semester": "1", "credits": "3", "grade": "",
    })
    assert result.success
    assert result.data.year == 2
    assert result.data.grade == "N/A"


@pytest.mark.parametrize("payload, field", [
    ({"code": "NUR12", "name": "Anatomy"}, "code"),
    ({"code": "NU 11134", "name": "Anatomy"}, "code"),
    ({"code": "NUR 1113", "name": "A"}, "name"),
    ({"code": "NUR 1113", "name": "x" * 51}, "name"),
    ({"code": "NUR 1313", "name": "Anatomy"}, "semester"),
    ({"code": "NUR 1110", "name": "Anatomy"}, "credits"),
    ({"code": "NUR 1113", "name": "Anatomy", "year": 0}, "year"),
    ({"code": "NUR 1113", "name": "Anatomy", "grade": "E"}, "grade"),
])
def test_add_subject_validation(db, user, payload, field):
    result = subject_service.add_subject(db, user.id, payload)
    assert result.success is False
    assert result.error.code == VALIDATION_ERROR
    assert field in result.error.fields
    assert db.query(SubjectModel).count() == 0


def test_add_subject_code_format_message(db, user):
    result = subject_service.add_subject(db, user.id, {"code": "1234 NUR", "name": "Anatomy"})
    assert result.error.fields["code"] == ["Course code must be in the format 'NUR 1234'."]


def test_add_subject_non_string_code(db, user):
    result = subject_service.add_subject(db, user.id, {"code": 1234, "name": "Anatomy"})
    assert result.success is False
    assert result.error.code == VALIDATION_ERROR
    assert "code" in result.error.fields
    assert db.query(SubjectModel).count() == 0


def test_duplicate_code_rejected_for_same_owner(db, user, other_user, make_subject):
    make_subject(user.id, "NUR 1113")

    dup = subject_service.add_subject(db, user.id, {"code": "NUR 1113", "name": "Again"})
    assert dup.success is False
    assert dup.error.code == DUPLICATE
    assert dup.error.message == "Subject with this code already exists"

    other = subject_service.add_subject(db, other_user.id, {"code": "NUR 1113", "name": "Anatomy"})
    assert other.success


def test_add_subject_storage_failure(db, user, monkeypatch):
    def broken_query(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db, "query", broken_query)
    result = subject_service.add_subject(db, user.id, {"code": "NUR 1113", "name": "Anatomy"})

    assert result.success is False
    assert result.error.code == STORAGE_ERROR
    assert result.error.message == "Failed to add subject"


# =========================================================
# 조회
# =========================================================

def test_get_subjects_is_owner_scoped_and_ordered(db, user, other_user, make_subject):
    make_subject(user.id, "NUR 2113")
    make_subject(user.id, "NUR 1213")
    make_subject(user.id, "NUR 1113")
    make_subject(other_user.id, "NUR 1114")

    result = subject_service.get_subjects(db, user.id)
    assert result.success
    assert [s.code for s in result.data] == ["NUR 1113", "NUR 1213", "NUR 2113"]


def test_previous_and_last_semester_views(db, user, make_subject):
    make_subject(user.id, "NUR 1113", grade="A")
    make_subject(user.id, "NUR 1213", grade="B")
    make_subject(user.id, "NUR 2113", grade="F")
    make_subject(user.id, "NUR 2123", grade="C")

    previous = subject_service.get_previous_semesters_subjects(db, user.id)
    last = subject_service.get_last_semester_subjects(db, user.id)

    assert [s.code for s in previous.data] == ["NUR 1113", "NUR 1213"]
    assert sorted(s.code for s in last.data) == ["NUR 2113", "NUR 2123"]


def test_views_for_user_without_subjects(db, user):
    assert subject_service.get_previous_semesters_subjects(db, user.id).data == []
    assert subject_service.get_last_semester_subjects(db, user.id).data == []


def test_get_subject_by_id(db, user, other_user, make_subject):
    created = make_subject(user.id, "NUR 1113")

    assert subject_service.get_subject_by_id(db, user.id, created.id).data.id == created.id

    hidden = subject_service.get_subject_by_id(db, other_user.id, created.id)
    assert hidden.success is False
    assert hidden.error.code == NOT_FOUND


# =========================================================
# 수정
# =========================================================

def test_update_subject(db, user, make_subject):
    created = make_subject(user.id, "NUR 1113", grade="C")
    result = subject_service.update_subject(db, user.id, created.id, {
        "code": "NUR 1123", "name": "Anatomy II", "grade": "B+",
    })
    assert result.success
    assert result.data.code == "NUR 1123"
    assert result.data.name == "Anatomy II"
    assert result.data.grade == "B+"
    assert result.data.updated_at >= created.updated_at


def test_update_subject_rejects_code_of_another_row(db, user, make_subject):
    make_subject(user.id, "NUR 1113")
    second = make_subject(user.id, "NUR 1123")

    result = subject_service.update_subject(db, user.id, second.id, {"code": "NUR 1113", "name": "Clash"})
    assert result.error.code == DUPLICATE

    same = subject_service.update_subject(db, user.id, second.id, {"code": "NUR 1123", "name": "Renamed"})
    assert same.success


def test_update_missing_subject(db, user):
    result = subject_service.update_subject(db, user.id, "missing", {"code": "NUR 1113", "name": "Anatomy"})
    assert result.error.code == NOT_FOUND


def test_update_subject_grade(db, user, make_subject):
    created = make_subject(user.id, "NUR 1113", grade="F")
    result = subject_service.update_subject_grade(db, user.id, created.id, "B")
    assert result.success
    assert result.data.grade == "B"
    assert result.data.code == "NUR 1113"


@pytest.mark.parametrize("grade", ["", None, "Z"])
def test_update_subject_grade_validation(db, user, make_subject, grade):
    created = make_subject(user.id, "NUR 1113", grade="F")
    result = subject_service.update_subject_grade(db, user.id, created.id, grade)
    assert result.error.code == VALIDATION_ERROR
    assert "grade" in result.error.fields


def test_update_grade_of_foreign_subject(db, user, other_user, make_subject):
    created = make_subject(user.id, "NUR 1113", grade="F")
    result = subject_service.update_subject_grade(db, other_user.id, created.id, "A")
    assert result.error.code == NOT_FOUND
    assert subject_service.get_subject_by_id(db, user.id, created.id).data.grade == "F"


# =========================================================
# 삭제
# =========================================================

def test_delete_subject(db, user, other_user, make_subject):
    created = make_subject(user.id, "NUR 1113")

    foreign = subject_service.delete_subject(db, other_user.id, created.id)
    assert foreign.error.code == NOT_FOUND

    assert subject_service.delete_subject(db, user.id, created.id).success
    assert subject_service.get_subjects(db, user.id).data == []


def test_delete_multiple_subjects(db, user, other_user, make_subject):
    a = make_subject(user.id, "NUR 1113")
    b = make_subject(user.id, "NUR 1123")
    keep = make_subject(user.id, "NUR 1133")
    foreign = make_subject(other_user.id, "NUR 1113")

    result = subject_service.delete_multiple_subjects(db, user.id, [a.id, b.id, foreign.id, "missing"])
    assert result.success
    assert result.data["deleted"] == [a.id, b.id]

    assert [s.id for s in subject_service.get_subjects(db, user.id).data] == [keep.id]
    assert subject_service.get_subjects(db, other_user.id).data[0].id == foreign.id


def test_delete_multiple_keeps_earlier_deletions_on_failure(db, user, make_subject, monkeypatch):
    a = make_subject(user.id, "NUR 1113")
    b = make_subject(user.id, "NUR 1123")
    c = make_subject(user.id, "NUR 1133")

    real_commit = db.commit
    calls = {"n": 0}

    def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("DELETE FROM subjects", {}, Exception("disk I/O error"))
        return real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    result = subject_service.delete_multiple_subjects(db, user.id, [a.id, b.id, c.id])
    monkeypatch.undo()

    assert result.success is False
    assert result.error.code == STORAGE_ERROR
    assert result.data == {"deleted": [a.id]}

    remaining = [s.id for s in subject_service.get_subjects(db, user.id).data]
    assert remaining == [b.id, c.id]
