"""HTTP client for the task API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .exceptions import ValidationError
from .models import TITLE_REQUIRED_MESSAGE, UNSET

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    """Error payload returned by the task API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TaskApiClient:
    """
    タスクAPIのクライアント

    サーバーが常に正であり、ここでの検証はタイトル必須チェックのみ。
    """

    def __init__(
        self,
        api_url: str = "http://localhost:8000/api",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            api_url: APIのベースURL（/tasks の手前まで）
            timeout: リクエストタイムアウト秒
            session: テスト用に差し替え可能なSession
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"タスクAPIへの接続に失敗: {method} {url}: {e}")
            raise

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            message = None
            if isinstance(payload, dict):
                message = payload.get("error")
            if not message:
                message = response.reason or "Request failed"
            raise TaskApiError(response.status_code, message)
        return response.json()

    def list_tasks(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {
            key: value
            for key, value in (
                ("search", search),
                ("status", status),
                ("priority", priority),
                ("sort", sort),
            )
            if value
        }
        return self._request("GET", "/tasks", params=params)

    def get_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(
        self,
        title: str,
        details: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not title or not title.strip():
            raise ValidationError(TITLE_REQUIRED_MESSAGE)
        payload = {
            "title": title.strip(),
            "details": details,
            "priority": priority,
            "due_date": due_date,
        }
        return self._request("POST", "/tasks", json=payload)

    def update_task(
        self,
        task_id: int,
        *,
        title: Any = UNSET,
        details: Any = UNSET,
        priority: Any = UNSET,
        due_date: Any = UNSET,
    ) -> Dict[str, Any]:
        """UNSETのフィールドは送信しない（サーバー側で現状維持）"""
        payload = {
            key: value
            for key, value in (
                ("title", title),
                ("details", details),
                ("priority", priority),
                ("due_date", due_date),
            )
            if value is not UNSET
        }
        return self._request("PUT", f"/tasks/{task_id}", json=payload)

    def toggle_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}/complete")

    def delete_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/tasks/{task_id}")
