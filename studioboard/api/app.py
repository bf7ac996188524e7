"""FastAPI backend for studioboard.

Serves the tasks REST contract the board client consumes, plus the user and
service-request listings that feed the editor's select fields.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from studioboard.auth.dependencies import require_admin
from studioboard.database.database import get_db, init_db
from studioboard.database.repository import TaskRepository
from studioboard.database.user_repository import ServiceRequestRepository, UserRepository
from studioboard.models.actor import Actor
from studioboard.models.constants import DEFAULT_PAGE_LIMIT, DEFAULT_SORT_BY
from studioboard.models.task import TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="studioboard API",
    description="Task board backend for the studio back-office",
    version="0.1.0",
)


@app.on_event("startup")
def on_startup():
    init_db()


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Report errors in the same envelope as successful responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": f"Invalid request: {len(exc.errors())} errors"},
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request, exc: IntegrityError):
    """Unknown assignee or service request ids end up here."""
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Task references an unknown record"},
    )


# Request models
class TaskCreate(BaseModel):
    """Body of POST /tasks."""

    title: str = Field(..., min_length=1)
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    notes: str = ""
    deliverables: str = ""
    attached_video: Optional[str] = Field(None, alias="attachedVideo")
    assigned_user_id: Optional[str] = Field(None, alias="assignedUserId")
    service_request_id: Optional[str] = Field(None, alias="serviceRequestId")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    completed_date: Optional[datetime] = Field(None, alias="completedDate")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class TaskUpdate(BaseModel):
    """Body of PUT /tasks and PATCH /tasks/detail (every field optional)."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    notes: Optional[str] = None
    deliverables: Optional[str] = None
    attached_video: Optional[str] = Field(None, alias="attachedVideo")
    assigned_user_id: Optional[str] = Field(None, alias="assignedUserId")
    service_request_id: Optional[str] = Field(None, alias="serviceRequestId")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    completed_date: Optional[datetime] = Field(None, alias="completedDate")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class UserCreate(BaseModel):
    name: str
    email: Optional[str] = None
    role: str = "user"


class ServiceRequestCreate(BaseModel):
    title: str


def _parse_update(body: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return TaskUpdate.model_validate(body).model_dump(exclude_unset=True)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid task fields: {e.error_count()} errors")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/tasks")
def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1),
    sort_by: str = Query(DEFAULT_SORT_BY, alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    assigned_user_id: Optional[str] = Query(None, alias="assignedUserId"),
    title: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List tasks with filters, sorting and pagination."""
    repo = TaskRepository(db)
    tasks, total = repo.list_page(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        status=task_status.value if task_status else None,
        priority=priority.value if priority else None,
        assigned_user_id=assigned_user_id,
        title=title,
    )
    total_pages = math.ceil(total / limit)
    return {
        "success": True,
        "message": "Tasks retrieved successfully",
        "data": [task.to_wire() for task in tasks],
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages,
            "totalItems": total,
            "itemsPerPage": limit,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        },
    }


@app.post("/tasks", status_code=status.HTTP_201_CREATED)
def create_task(body: TaskCreate, db: Session = Depends(get_db)):
    """Create a task."""
    task = TaskRepository(db).create(body.model_dump())
    return {"success": True, "message": "Task created successfully", "data": task.to_wire()}


@app.put("/tasks")
def update_task(body: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Partially update the task named by `_id` in the body."""
    body = dict(body)
    task_id = body.pop("_id", None)
    if not task_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task ID is required")

    task = TaskRepository(db).update(task_id, _parse_update(body))
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return {"success": True, "message": "Task updated successfully", "data": task.to_wire()}


@app.delete("/tasks")
def delete_task(
    task_id: Optional[str] = Query(None, alias="id"),
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a task (admins only)."""
    if not task_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task ID is required")

    task = TaskRepository(db).delete(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    logger.info(f"Task {task_id} deleted by {actor.user_id}")
    return {"success": True, "message": "Task deleted successfully", "data": task.to_wire()}


@app.get("/tasks/detail")
def get_task_detail(task_id: Optional[str] = Header(None, alias="id"), db: Session = Depends(get_db)):
    """Get one task; the id travels in the `id` header."""
    task = TaskRepository(db).get(task_id) if task_id else None
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return {"success": True, "data": task.to_wire()}


@app.patch("/tasks/detail")
def patch_task_detail(
    body: Dict[str, Any] = Body(...),
    task_id: Optional[str] = Header(None, alias="id"),
    db: Session = Depends(get_db),
):
    """Partially update one task; the id travels in the `id` header."""
    if not task_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task ID is required")

    task = TaskRepository(db).update(task_id, _parse_update(body))
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return {"success": True, "message": "Task updated successfully", "data": task.to_wire()}


@app.delete("/tasks/detail")
def delete_task_detail(
    task_id: Optional[str] = Header(None, alias="id"),
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete one task (admins only); the id travels in the `id` header."""
    task = TaskRepository(db).delete(task_id) if task_id else None
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    logger.info(f"Task {task_id} deleted by {actor.user_id}")
    return {"success": True, "message": "Task deleted successfully"}


@app.get("/users")
def list_users(db: Session = Depends(get_db)):
    """Users for assignee selects."""
    users = UserRepository(db).get_all()
    return {"success": True, "data": [user.model_dump(by_alias=True) for user in users]}


@app.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    user = UserRepository(db).create(name=body.name, email=body.email, role=body.role)
    return {"success": True, "data": user.model_dump(by_alias=True)}


@app.get("/serviceRequests")
def list_service_requests(db: Session = Depends(get_db)):
    """Service requests for the task form select."""
    requests_ = ServiceRequestRepository(db).get_all()
    return {"success": True, "data": [item.model_dump(by_alias=True) for item in requests_]}


@app.post("/serviceRequests", status_code=status.HTTP_201_CREATED)
def create_service_request(body: ServiceRequestCreate, db: Session = Depends(get_db)):
    item = ServiceRequestRepository(db).create(title=body.title)
    return {"success": True, "data": item.model_dump(by_alias=True)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
