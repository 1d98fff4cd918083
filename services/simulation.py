"""
services/simulation.py

- 저장된 과목을 건드리지 않고 "만약 이 과목 성적이 바뀐다면" GPA를 계산하는 작업 사본
- 변경(등급 가정, 가상 과목 추가/삭제, 초기화)마다 GPA를 즉시 다시 계산
"""

import random
import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from schemas.simulation import SimulationCandidate, SimulationOutcome
from schemas.subjects import Subject
from services.gpa import SIMULATION_GRADE_OPTIONS, calculate_gpa, is_low_grade, is_valid_grade


class UnknownSubjectError(LookupError):
    """작업 사본에 없는 과목 ID"""


class GPASimulation:
    def __init__(self, originals: Iterable):
        self._originals: List[Subject] = [Subject.model_validate(s).model_copy() for s in originals]
        self._original_by_id = {s.id: s for s in self._originals}
        self._working: List[Subject] = list(self._originals)

        self.original_gpa = calculate_gpa(self._originals)
        self.simulated_gpa = self.original_gpa

    # =========================================================
    # 조회
    # =========================================================

    @property
    def originals(self) -> List[Subject]:
        return list(self._originals)

    @property
    def subjects(self) -> List[Subject]:
        return list(self._working)

    @property
    def dummy_subjects(self) -> List[Subject]:
        return [s for s in self._working if s.id not in self._original_by_id]

    @property
    def gpa_delta(self) -> float:
        return round(self.simulated_gpa - self.original_gpa, 2)

    @property
    def has_dummy_subjects(self) -> bool:
        return bool(self.dummy_subjects)

    @property
    def has_grade_changes(self) -> bool:
        return any(
            s.grade != self._original_by_id[s.id].grade
            for s in self._working
            if s.id in self._original_by_id
        )

    def get(self, subject_id: str) -> Optional[Subject]:
        for s in self._working:
            if s.id == subject_id:
                return s
        return None

    def low_grade_candidates(self) -> List[SimulationCandidate]:
        """저장된 성적 기준 저성적(C-, D+, D, F) 과목과 현재 가정 등급"""
        candidates = []
        for original in self._originals:
            if not is_low_grade(original.grade):
                continue
            current = self.get(original.id)
            candidates.append(SimulationCandidate(
                subject=original,
                simulated_grade=current.grade if current else original.grade,
            ))
        return candidates

    # =========================================================
    # 변경
    # =========================================================

    def override_grade(self, subject_id: str, grade: str) -> Subject:
        if not is_valid_grade(grade):
            raise ValueError(f"Unknown grade '{grade}'")

        for idx, s in enumerate(self._working):
            if s.id == subject_id:
                updated = s.model_copy(update={"grade": grade})
                self._working[idx] = updated
                self._recompute()
                return updated

        raise UnknownSubjectError(subject_id)

    def add_dummy(
        self,
        credits: Optional[int] = None,
        grade: Optional[str] = None,
        code: Optional[str] = None,
        name: Optional[str] = None,
        year: Optional[int] = None,
        semester: Optional[int] = None,
        subject_id: Optional[str] = None,
    ) -> Subject:
        if not credits or not grade:
            raise ValueError("Dummy subject needs credits and grade")
        if credits < 0:
            raise ValueError("Credits must be positive")
        if not is_valid_grade(grade):
            raise ValueError(f"Unknown grade '{grade}'")

        subject_id = subject_id or str(uuid.uuid4())
        if self.get(subject_id) is not None:
            raise ValueError(f"Subject id '{subject_id}' already exists")

        dummy = Subject(
            id=subject_id,
            code=code or f"DUMMY{random.randint(0, 999)}",
            name=name or "Dummy Subject",
            year=year or datetime.now().year,
            semester=semester or 1,
            credits=credits,
            grade=grade,
        )
        self._working.append(dummy)
        self._recompute()
        return dummy

    def remove(self, subject_id: str) -> None:
        """
        저장된 과목 → 원래 등급으로 되돌림 (삭제하지 않음)
        가상 과목 → 작업 사본에서 제거
        """
        original = self._original_by_id.get(subject_id)
        if original is not None:
            self._working = [original if s.id == subject_id else s for s in self._working]
        else:
            self._working = [s for s in self._working if s.id != subject_id]
        self._recompute()

    def reset(self) -> None:
        self._working = list(self._originals)
        self._recompute()

    def _recompute(self) -> None:
        self.simulated_gpa = calculate_gpa(self._working)

    # =========================================================
    # 응답
    # =========================================================

    def to_outcome(self) -> SimulationOutcome:
        return SimulationOutcome(
            original_gpa=self.original_gpa,
            simulated_gpa=self.simulated_gpa,
            gpa_delta=self.gpa_delta,
            has_grade_changes=self.has_grade_changes,
            has_dummy_subjects=self.has_dummy_subjects,
            subjects=self.subjects,
            candidates=self.low_grade_candidates(),
            grade_options=list(SIMULATION_GRADE_OPTIONS),
        )
