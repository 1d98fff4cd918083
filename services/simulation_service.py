import logging
from typing import Iterable

from sqlalchemy.orm import Session

from schemas.common import NOT_FOUND, VALIDATION_ERROR, ServiceResult
from schemas.simulation import AddAction, OverrideAction, RemoveAction, ResetAction
from services.simulation import GPASimulation, UnknownSubjectError
from services.subject_service import load_subjects, owner_scoped, to_schemas

logger = logging.getLogger(__name__)


def apply_action(simulation: GPASimulation, action) -> None:
    if isinstance(action, OverrideAction):
        simulation.override_grade(action.subject_id, action.grade)
    elif isinstance(action, AddAction):
        simulation.add_dummy(
            credits=action.credits,
            grade=action.grade,
            code=action.code,
            name=action.name,
            year=action.year,
            semester=action.semester,
            subject_id=action.id,
        )
    elif isinstance(action, RemoveAction):
        simulation.remove(action.subject_id)
    elif isinstance(action, ResetAction):
        simulation.reset()
    else:
        raise ValueError(f"Unsupported simulation action: {action!r}")


@owner_scoped("Failed to run simulation")
def run_simulation(db: Session, user_id: str, actions: Iterable) -> ServiceResult:
    """
    저장된 과목으로 작업 사본을 만들고 동작을 순서대로 재생
    - DB에는 아무것도 쓰지 않음
    """
    simulation = GPASimulation(to_schemas(load_subjects(db, user_id)))

    for step, action in enumerate(actions, start=1):
        try:
            apply_action(simulation, action)
        except UnknownSubjectError as exc:
            return ServiceResult.fail(NOT_FOUND, f"Subject not found: {exc.args[0]}", fields={"step": [str(step)]})
        except ValueError as exc:
            return ServiceResult.fail(VALIDATION_ERROR, str(exc), fields={"step": [str(step)]})

    logger.debug(
        f"시뮬레이션 완료: user_id={user_id}, 원래={simulation.original_gpa}, 가정={simulation.simulated_gpa}"
    )
    return ServiceResult.ok(simulation.to_outcome())


@owner_scoped("Failed to fetch simulation candidates", empty=[])
def get_simulation_candidates(db: Session, user_id: str) -> ServiceResult:
    simulation = GPASimulation(to_schemas(load_subjects(db, user_id)))
    return ServiceResult.ok(simulation.low_grade_candidates())
