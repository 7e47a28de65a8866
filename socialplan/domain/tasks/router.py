"""Task router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from .schemas import TaskDocument, TaskListUpdate
from .service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("", response_model=TaskDocument)
async def get_tasks(
    current_user: UserProfile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return service.get_tasks(current_user.uid)


@router.put("", response_model=TaskDocument)
async def save_tasks(
    data: TaskListUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Replace the full task list"""
    return service.save_tasks(current_user.uid, data.tasks)
