"""Tasks REST API client for studioboard."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from studioboard.engine.ranking import newest_first
from studioboard.models.constants import FETCH_PAGE_SIZE
from studioboard.models.task import (
    ServiceRequestSummary,
    Task,
    TaskPriority,
    TaskStatus,
    UserSummary,
    to_utc_naive,
)

load_dotenv()

logger = logging.getLogger(__name__)

STUDIOBOARD_API_BASE = os.getenv("STUDIOBOARD_API_BASE", "http://localhost:8000")
STUDIOBOARD_HTTP_TIMEOUT = float(os.getenv("STUDIOBOARD_HTTP_TIMEOUT", "10"))
STUDIOBOARD_FETCH_WORKERS = int(os.getenv("STUDIOBOARD_FETCH_WORKERS", "4"))


class TasksApiError(Exception):
    """Base error for failed calls to the tasks backend."""


class TasksTransportError(TasksApiError):
    """The request never produced a response (connection, timeout, ...)."""


class TasksResponseError(TasksApiError):
    """The backend answered with an error status or `success: false`."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{message} (HTTP {status_code})" if status_code else message)


class TaskFilter(BaseModel):
    """Filters for fetching tasks.

    status, priority, assigned_user_id and title are sent to the backend; the
    rest are applied client-side after all pages are joined.
    """

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_user_id: Optional[str] = None
    title: Optional[str] = Field(None, description="Case-insensitive title substring")
    service_request_id: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    completed_from: Optional[datetime] = None
    completed_to: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    def to_query(self) -> Dict[str, str]:
        """Query parameters for the server-side filters."""
        params = {
            "status": self.status,
            "priority": self.priority,
            "assignedUserId": self.assigned_user_id,
            "title": self.title,
        }
        return {key: value for key, value in params.items() if value}

    def matches(self, task: Task) -> bool:
        """Apply the client-side filters to one task."""
        if self.service_request_id and task.service_request_ref != self.service_request_id:
            return False
        if not _in_range(task.created_at, self.created_from, self.created_to):
            return False
        if not _in_range(task.completed_date, self.completed_from, self.completed_to):
            return False
        return True

    def has_client_filters(self) -> bool:
        return any(
            value is not None
            for value in (
                self.service_request_id,
                self.created_from,
                self.created_to,
                self.completed_from,
                self.completed_to,
            )
        )


def _parse_records(model, items: list) -> list:
    """Validate backend records, reporting malformed ones as a response error."""
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as e:
        logger.warning(f"Malformed {model.__name__} payload: {e.error_count()} errors")
        raise TasksResponseError("Malformed task payload") from e


def _in_range(value: Optional[datetime], start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is None and end is None:
        return True
    if value is None:
        return False
    value = to_utc_naive(value)
    if start is not None and value < to_utc_naive(start):
        return False
    if end is not None and value > to_utc_naive(end):
        return False
    return True


class PaginationInfo(BaseModel):
    """Pagination block of a task listing."""

    current_page: int = Field(1, alias="currentPage")
    total_pages: int = Field(1, alias="totalPages")
    total_items: int = Field(0, alias="totalItems")
    items_per_page: int = Field(0, alias="itemsPerPage")
    has_next_page: bool = Field(False, alias="hasNextPage")
    has_prev_page: bool = Field(False, alias="hasPrevPage")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class TaskPage(BaseModel):
    """One page of a task listing."""

    tasks: List[Task]
    pagination: PaginationInfo


class TasksApiClient:
    """Client for the tasks REST backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
        session: Optional[Any] = None,
    ):
        """Initialize the tasks client.

        Args:
            base_url: Backend root URL. If None, reads STUDIOBOARD_API_BASE.
            api_token: Bearer token. If None, reads STUDIOBOARD_API_TOKEN (optional).
            timeout: Per-request timeout in seconds. If None, reads STUDIOBOARD_HTTP_TIMEOUT.
            max_workers: Threads used to fetch the remaining pages of a listing.
            session: requests-compatible session (defaults to a new requests.Session).
        """
        self.base_url = (base_url or STUDIOBOARD_API_BASE).rstrip("/")
        self.api_token = api_token or os.getenv("STUDIOBOARD_API_TOKEN")
        self.timeout = timeout if timeout is not None else STUDIOBOARD_HTTP_TIMEOUT
        self.max_workers = max_workers or STUDIOBOARD_FETCH_WORKERS
        self.session = session or requests.Session()

        self.headers = {"Content-Type": "application/json"}
        if self.api_token:
            self.headers["Authorization"] = f"Bearer {self.api_token}"

    def _request(self, method: str, path: str, **kwargs) -> dict:
        """Send a request and return the decoded success payload.

        Raises:
            TasksTransportError: If no response was received
            TasksResponseError: If the backend reports a failure
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TasksTransportError(f"{method} {path} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400 or not isinstance(payload, dict) or not payload.get("success"):
            message = "Unexpected response from tasks backend"
            if isinstance(payload, dict):
                message = payload.get("message") or payload.get("error") or message
            raise TasksResponseError(message, status_code=response.status_code)
        return payload

    def fetch_page(self, filters: Optional[TaskFilter] = None, page: int = 1, limit: int = FETCH_PAGE_SIZE) -> TaskPage:
        """Fetch one page of tasks, newest first."""
        params = {"page": page, "limit": limit, "sortBy": "createdAt", "sortOrder": "desc"}
        if filters:
            params.update(filters.to_query())

        payload = self._request("GET", "/tasks", params=params)
        pagination = payload.get("pagination") or {"currentPage": page, "totalPages": 1}
        try:
            info = PaginationInfo.model_validate(pagination)
        except ValidationError as e:
            raise TasksResponseError("Malformed pagination block") from e
        return TaskPage(tasks=_parse_records(Task, payload.get("data") or []), pagination=info)

    def fetch_all(self, filters: Optional[TaskFilter] = None, page_size: int = FETCH_PAGE_SIZE) -> List[Task]:
        """Fetch every task matching `filters` across all backend pages.

        The first page tells how many pages exist; the rest are requested
        concurrently and joined in page order. Client-side filters run on the
        joined list. Any failing page fails the whole fetch.

        Returns:
            Tasks sorted newest-created first
        """
        first = self.fetch_page(filters, page=1, limit=page_size)
        tasks = list(first.tasks)

        remaining = list(range(2, first.pagination.total_pages + 1))
        if remaining:
            logger.debug(f"Fetching {len(remaining)} more task pages")
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(remaining))) as executor:
                pages = executor.map(lambda page: self.fetch_page(filters, page=page, limit=page_size), remaining)
                for page in pages:
                    tasks.extend(page.tasks)

        if filters and filters.has_client_filters():
            tasks = [task for task in tasks if filters.matches(task)]
        return newest_first(tasks)

    def create_task(self, fields: Dict[str, Any]) -> Task:
        """Create a task from wire-format fields."""
        payload = self._request("POST", "/tasks", json=fields)
        return _parse_records(Task, [payload.get("data")])[0]

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """Send a partial update `{_id, **fields}` (wire-format names).

        Returns:
            The updated task when the backend echoes it, else None
        """
        payload = self._request("PUT", "/tasks", json={"_id": task_id, **fields})
        data = payload.get("data")
        return _parse_records(Task, [data])[0] if data else None

    def delete_task(self, task_id: str) -> str:
        """Delete a task; returns the backend's message."""
        payload = self._request("DELETE", "/tasks", params={"id": task_id})
        return payload.get("message") or "Task deleted"

    def list_users(self) -> List[UserSummary]:
        """Users for the assignee select."""
        payload = self._request("GET", "/users")
        return _parse_records(UserSummary, payload.get("data") or [])

    def list_service_requests(self) -> List[ServiceRequestSummary]:
        """Service requests for the service request select."""
        payload = self._request("GET", "/serviceRequests")
        return _parse_records(ServiceRequestSummary, payload.get("data") or [])
