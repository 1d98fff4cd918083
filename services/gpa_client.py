"""
services/gpa_client.py

- GPA Dashboard API 호출용 httpx 클라이언트 (스크립트/다른 서비스/테스트에서 사용)
- SubjectsStore: 화면 쪽에서 쓰던 "과목 목록 상태"를 명시적인 객체로 분리
  * 전역 상태 없이 호출자가 store 인스턴스를 넘겨서 사용
  * 추가 직후에는 임시 ID를 가진 pending 항목으로 보관 → refresh() 시 서버 데이터로 교체
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from schemas.dashboard import DashboardStats
from services.gpa import compute_dashboard_stats, group_by_semester

logger = logging.getLogger(__name__)


class GPAClient:
    def __init__(self, http: httpx.Client, token: Optional[str] = None, prefix: str = "/v1"):
        self.http = http
        self.token = token
        self.prefix = prefix.rstrip("/")

    @property
    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        r = self.http.request(method, f"{self.prefix}{path}", headers=self.headers, **kwargs)
        if r.status_code >= 500:
            r.raise_for_status()
        return r.json()

    # ---------- 인증 ----------
    def login(self, email: str, password: str) -> Dict[str, Any]:
        r = self.http.post(f"{self.prefix}/auth/login", json={"email": email, "password": password})
        r.raise_for_status()
        body = r.json()
        self.token = body["token"]
        return body

    def logout(self) -> Dict[str, Any]:
        body = self._request("POST", "/auth/logout")
        self.token = None
        return body

    # ---------- 과목 ----------
    def get_subjects(self) -> Dict[str, Any]:
        return self._request("GET", "/subjects")

    def get_previous_semesters_subjects(self) -> Dict[str, Any]:
        return self._request("GET", "/subjects/previous")

    def get_last_semester_subjects(self) -> Dict[str, Any]:
        return self._request("GET", "/subjects/last")

    def get_subject(self, subject_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/subjects/{subject_id}")

    def add_subject(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/subjects", json=payload)

    def update_subject(self, subject_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/subjects/{subject_id}", json=payload)

    def update_subject_grade(self, subject_id: str, grade: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/subjects/{subject_id}/grade", json={"grade": grade})

    def delete_subject(self, subject_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/subjects/{subject_id}")

    def delete_subjects(self, ids: Iterable[str]) -> Dict[str, Any]:
        return self._request("POST", "/subjects/bulk-delete", json={"ids": list(ids)})

    # ---------- 대시보드 / 시뮬레이션 ----------
    def get_dashboard_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/dashboard/stats")

    def get_semester_overview(self, period: str = "all") -> Dict[str, Any]:
        return self._request("GET", "/dashboard/semesters", params={"range": period})

    def simulate(self, actions: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("POST", "/simulation", json={"actions": actions})


class StoredSubject(BaseModel):
    """store 안의 과목 한 건. pending=True 는 서버 확인 전 임시 항목"""
    id: str
    code: str
    name: str
    year: int
    semester: int
    credits: int
    grade: str = "N/A"
    pending: bool = False

    model_config = ConfigDict(extra="ignore")

    @field_validator("grade", mode="before")
    @classmethod
    def _default_grade(cls, v):
        return v or "N/A"


class SubjectsStore:
    def __init__(self, client: GPAClient):
        self.client = client
        self._confirmed: List[StoredSubject] = []
        self._pending: List[StoredSubject] = []
        self.last_error: Optional[str] = None

    @property
    def subjects(self) -> List[StoredSubject]:
        return [*self._confirmed, *self._pending]

    @property
    def pending(self) -> List[StoredSubject]:
        return list(self._pending)

    def refresh(self) -> bool:
        """서버 목록으로 교체하고 pending 항목은 버림"""
        result = self.client.get_subjects()
        if not result.get("success"):
            self.last_error = (result.get("error") or {}).get("message", "Failed to fetch subjects")
            logger.warning(f"과목 목록 갱신 실패: {self.last_error}")
            return False

        self._confirmed = [StoredSubject.model_validate(d) for d in result.get("data") or []]
        self._pending = []
        self.last_error = None
        return True

    def add_subject(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        서버에 추가 요청 후 성공하면 임시 ID로 pending 항목을 붙임
        - 실제 ID는 다음 refresh()에서 반영
        """
        result = self.client.add_subject(payload)
        if not result.get("success"):
            self.last_error = (result.get("error") or {}).get("message")
            return result

        data = dict(result.get("data") or {})
        data["id"] = f"pending-{uuid.uuid4()}"
        data["pending"] = True
        self._pending.append(StoredSubject.model_validate(data))
        return result

    # 파생 값은 매 호출마다 다시 계산
    def stats(self) -> DashboardStats:
        return compute_dashboard_stats(self.subjects)

    def semester_groups(self):
        return group_by_semester(self.subjects)
