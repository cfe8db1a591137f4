"""
Client HTTP de l'API TaskFlow (requests).

`http` peut être n'importe quel objet avec l'interface requests
(get/post/patch/delete) : requests.Session en prod, TestClient en test.
"""

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
REQUEST_TIMEOUT = 10


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SessionExpired(ApiError):
    """401 sur une route protégée : la session est finie côté client."""


class TaskApi:
    def __init__(self, http: Optional[Any] = None, base_url: str = DEFAULT_BASE_URL, token: Optional[str] = None):
        if http is None:
            http = requests.Session()
            self.base_url = base_url.rstrip("/")
            self.timeout = REQUEST_TIMEOUT
        else:
            # client déjà configuré (TestClient...), URLs relatives
            self.base_url = ""
            self.timeout = None
        self.http = http
        self.token = token

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        response = getattr(self.http, method)(f"{self.base_url}/api{path}", headers=headers, **kwargs)

        if response.status_code >= 400:
            try:
                message = response.json().get("detail", "Request failed")
            except ValueError:
                message = response.text or "Request failed"
            if response.status_code == 401:
                raise SessionExpired(response.status_code, message)
            raise ApiError(response.status_code, message)

        return response.json()

    # auth
    def register(self, username: str, email: str, password: str, display_name: Optional[str] = None) -> dict:
        body = {"username": username, "email": email, "password": password}
        if display_name is not None:
            body["displayName"] = display_name
        return self._request("post", "/auth/register", json=body)["user"]

    def login(self, email: str, password: str) -> dict:
        return self._request("post", "/auth/login", json={"email": email, "password": password})["user"]

    def logout(self) -> None:
        self._request("post", "/auth/logout")

    def me(self) -> dict:
        return self._request("get", "/auth/me")["user"]

    def list_users(self) -> list:
        return self._request("get", "/users")

    # tasks
    def list_tasks(self) -> list:
        return self._request("get", "/tasks")

    def get_task(self, task_id: str) -> dict:
        return self._request("get", f"/tasks/{task_id}")

    def create_task(self, fields: dict) -> dict:
        return self._request("post", "/tasks", json=fields)

    def update_task(self, task_id: str, fields: dict) -> dict:
        return self._request("patch", f"/tasks/{task_id}", json=fields)

    def delete_task(self, task_id: str) -> None:
        self._request("delete", f"/tasks/{task_id}")
