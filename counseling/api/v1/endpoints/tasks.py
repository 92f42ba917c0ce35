"""Follow-up task endpoints (dashboard list, completion and removal)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from counseling.core.database import get_db
from counseling.schemas.common import MessageResponse
from counseling.schemas.follow_up import FollowUpTaskResponse
from counseling.services.follow_up import FollowUpTaskService

router = APIRouter()


@router.get("", response_model=list[FollowUpTaskResponse])
def list_tasks(
    db: Annotated[Session, Depends(get_db)],
    pending_only: bool = False,
):
    """All follow-up tasks, open ones first, then by deadline."""
    service = FollowUpTaskService(db)
    return service.list_tasks(pending_only=pending_only)


@router.patch("/{task_id}/toggle", response_model=FollowUpTaskResponse)
def toggle_task(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Mark a task completed, or open again."""
    service = FollowUpTaskService(db)
    return service.toggle_task(task_id)


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    service = FollowUpTaskService(db)
    service.delete_task(task_id)
    return MessageResponse(message="Task deleted successfully")
