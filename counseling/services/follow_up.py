"""Follow-up task service: the counselor's action plan."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from counseling.core.exceptions import NotFoundError
from counseling.models.follow_up import FollowUpTask
from counseling.models.student import Student
from counseling.schemas.follow_up import FollowUpTaskCreate, FollowUpTaskResponse

logger = logging.getLogger(__name__)


class FollowUpTaskService:
    """Create, complete and list follow-up tasks.

    Lists put open tasks first, then order by deadline, earliest first.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_task(self, task_id: int) -> FollowUpTask:
        task = self.db.get(FollowUpTask, task_id)
        if not task:
            raise NotFoundError("Task", str(task_id))
        return task

    def _base_query(self):
        return (
            select(FollowUpTask)
            .options(selectinload(FollowUpTask.student))
            .order_by(FollowUpTask.is_completed, FollowUpTask.deadline, FollowUpTask.id)
        )

    def create_task(self, student_id: int, request: FollowUpTaskCreate) -> FollowUpTaskResponse:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))

        task = FollowUpTask(student_id=student.id, **request.model_dump())
        self.db.add(task)
        self.db.flush()
        self.db.refresh(task)

        logger.info(f"[TASKS] Task {task.id} planned for student {student.id}, due {task.deadline}")
        return FollowUpTaskResponse.model_validate(task)

    def list_for_student(self, student_id: int) -> list[FollowUpTaskResponse]:
        if not self.db.get(Student, student_id):
            raise NotFoundError("Student", str(student_id))
        result = self.db.execute(self._base_query().where(FollowUpTask.student_id == student_id))
        return [FollowUpTaskResponse.model_validate(t) for t in result.scalars().all()]

    def list_tasks(self, pending_only: bool = False) -> list[FollowUpTaskResponse]:
        """Every student's tasks, as shown on the dashboard."""
        query = self._base_query()
        if pending_only:
            query = query.where(FollowUpTask.is_completed.is_(False))
        result = self.db.execute(query)
        return [FollowUpTaskResponse.model_validate(t) for t in result.scalars().all()]

    def toggle_task(self, task_id: int) -> FollowUpTaskResponse:
        """Flip a task between open and completed."""
        task = self._get_task(task_id)
        task.is_completed = not task.is_completed
        self.db.flush()
        self.db.refresh(task)
        logger.debug(f"[TASKS] Task {task.id} completed={task.is_completed}")
        return FollowUpTaskResponse.model_validate(task)

    def delete_task(self, task_id: int) -> None:
        task = self._get_task(task_id)
        self.db.delete(task)
        self.db.flush()
        logger.info(f"[TASKS] Task {task_id} deleted")
