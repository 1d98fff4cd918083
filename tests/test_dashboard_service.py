import pytest

from schemas.common import NOT_FOUND, UNAUTHORIZED, VALIDATION_ERROR
from schemas.simulation import AddAction, OverrideAction, RemoveAction, ResetAction
from services import dashboard_service, simulation_service, subject_service


@pytest.fixture
def transcript(user, make_subject):
    return [
        make_subject(user.id, "NUR 1113", grade="A"),
        make_subject(user.id, "NUR 1213", grade="F"),
        make_subject(user.id, "NUR 2113", grade="B"),
    ]


# =========================================================
# 대시보드
# =========================================================

def test_stats_unauthorized(db):
    result = dashboard_service.get_dashboard_stats(db, None)
    assert result.success is False
    assert result.error.code == UNAUTHORIZED
    assert result.data is None


def test_stats_without_subjects(db, user):
    result = dashboard_service.get_dashboard_stats(db, user.id)
    assert result.success
    assert result.data.total_gpa == 0
    assert result.data.growth_rate == 0
    assert result.data.latest_year is None


def test_stats(db, user, transcript):
    stats = dashboard_service.get_dashboard_stats(db, user.id).data
    assert stats.total_gpa == 2.33
    assert stats.previous_gpa == 2.0
    assert stats.last_semester_gpa == 3.0
    assert stats.total_credits == 9
    assert stats.total_repeats == 1
    assert stats.last_semester_repeats == 0
    assert stats.growth_rate == pytest.approx(16.67)


def test_stats_follow_grade_updates(db, user, transcript):
    subject_service.update_subject_grade(db, user.id, transcript[1].id, "A")
    stats = dashboard_service.get_dashboard_stats(db, user.id).data
    assert stats.total_gpa == 3.67
    assert stats.total_repeats == 0


def test_semester_overview(db, user, transcript):
    overview = dashboard_service.get_semester_overview(db, user.id).data
    assert overview.range == "all"
    assert overview.total_gpa == 2.33
    assert [g.semester_label for g in overview.groups] == ["Y1S1", "Y1S2", "Y2S1"]
    assert [g.gpa for g in overview.groups] == [4.0, 0.0, 3.0]
    assert overview.groups[0].subjects[0].code == "NUR 1113"

    recent = dashboard_service.get_semester_overview(db, user.id, period="last").data
    assert recent.range == "last"
    assert [g.semester_label for g in recent.groups] == ["Y1S2", "Y2S1"]


# =========================================================
# 시뮬레이션
# =========================================================

def test_run_simulation_does_not_persist(db, user, transcript):
    failed = transcript[1]
    actions = [
        OverrideAction(action="override", subject_id=failed.id, grade="B"),
        AddAction(action="add", id="tmp-1", credits=3, grade="A"),
    ]
    result = simulation_service.run_simulation(db, user.id, actions)

    assert result.success
    outcome = result.data
    assert outcome.original_gpa == 2.33
    assert outcome.simulated_gpa == 3.5
    assert outcome.gpa_delta == pytest.approx(1.17)
    assert outcome.has_grade_changes and outcome.has_dummy_subjects
    assert [c.subject.id for c in outcome.candidates] == [failed.id]
    assert outcome.candidates[0].simulated_grade == "B"

    stored = subject_service.get_subject_by_id(db, user.id, failed.id).data
    assert stored.grade == "F"
    assert len(subject_service.get_subjects(db, user.id).data) == 3


def test_run_simulation_remove_and_reset(db, user, transcript):
    failed = transcript[1]
    actions = [
        AddAction(action="add", id="tmp-1", credits=3, grade="A"),
        OverrideAction(action="override", subject_id=failed.id, grade="A"),
        RemoveAction(action="remove", subject_id="tmp-1"),
    ]
    outcome = simulation_service.run_simulation(db, user.id, actions).data
    assert not outcome.has_dummy_subjects
    assert outcome.simulated_gpa == 3.67

    outcome = simulation_service.run_simulation(db, user.id, [*actions, ResetAction(action="reset")]).data
    assert outcome.simulated_gpa == outcome.original_gpa
    assert not outcome.has_grade_changes


def test_run_simulation_unknown_subject(db, user, transcript):
    result = simulation_service.run_simulation(db, user.id, [
        OverrideAction(action="override", subject_id="missing", grade="A"),
    ])
    assert result.error.code == NOT_FOUND
    assert result.error.fields == {"step": ["1"]}


def test_run_simulation_invalid_dummy(db, user, transcript):
    result = simulation_service.run_simulation(db, user.id, [
        ResetAction(action="reset"),
        AddAction(action="add", grade="A"),
    ])
    assert result.error.code == VALIDATION_ERROR
    assert result.error.fields == {"step": ["2"]}


def test_simulation_unauthorized(db):
    assert simulation_service.run_simulation(db, None, []).error.code == UNAUTHORIZED
    candidates = simulation_service.get_simulation_candidates(db, None)
    assert candidates.error.code == UNAUTHORIZED
    assert candidates.data == []


def test_simulation_candidates(db, user, transcript, make_subject):
    make_subject(user.id, "NUR 2123", grade="C-")
    make_subject(user.id, "NUR 2133", grade="C")
    result = simulation_service.get_simulation_candidates(db, user.id)
    assert sorted(c.subject.grade for c in result.data) == ["C-", "F"]
