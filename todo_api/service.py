import logging
from datetime import tzinfo
from typing import Any, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from .exceptions import StoreFailure
from .models import TaskItem
from .patching import apply_patch, parse_patch_document
from .schemas import TaskItemCreate, TaskItemResponse, TaskItemUpdate
from .timeutils import local_timezone, to_local, utcnow

logger = logging.getLogger(__name__)


class TaskItemService:
    """Reads and writes task items through one database session.

    Lookups that find nothing return ``None`` (``False`` for delete).
    Database errors roll the session back and surface as StoreFailure.
    """

    def __init__(self, session: AsyncSession, tz: Optional[tzinfo] = None):
        self.session = session
        # resolved up front so a bad zone fails before anything is written
        self.tz = tz if tz is not None else local_timezone()

    def _to_response(self, db_task: TaskItem) -> TaskItemResponse:
        return TaskItemResponse(
            id=db_task.id,
            title=db_task.title,
            description=db_task.description,
            status=db_task.status,
            assigned_user=db_task.assigned_user,
            created_date=to_local(db_task.created_date, self.tz),
        )

    async def _fail(self, action: str, error: SQLAlchemyError):
        logger.error("Error %s: %s", action, error)
        try:
            await self.session.rollback()
        finally:
            raise StoreFailure(f"Error {action}") from error

    async def _find(self, task_id: int) -> Optional[TaskItem]:
        return await self.session.get(TaskItem, task_id)

    async def list_tasks(self) -> List[TaskItemResponse]:
        """All task items, newest first"""
        try:
            result = await self.session.execute(
                select(TaskItem).order_by(TaskItem.created_date.desc(), TaskItem.id.desc())
            )
            return [self._to_response(task) for task in result.scalars().all()]
        except SQLAlchemyError as e:
            await self._fail("fetching task items", e)

    async def get_task(self, task_id: int) -> Optional[TaskItemResponse]:
        try:
            db_task = await self._find(task_id)
        except SQLAlchemyError as e:
            await self._fail(f"fetching task item {task_id}", e)
        if db_task is None:
            return None
        return self._to_response(db_task)

    async def create_task(self, task: TaskItemCreate) -> TaskItemResponse:
        """Insert a task item; the store assigns the id"""
        db_task = TaskItem(
            title=task.title,
            description=task.description,
            status=task.status,
            assigned_user=task.assigned_user,
            created_date=task.created_date or utcnow(),
        )
        try:
            self.session.add(db_task)
            await self.session.commit()
            await self.session.refresh(db_task)
        except SQLAlchemyError as e:
            await self._fail("creating task item", e)
        logger.info("Created task item with ID: %s", db_task.id)
        return self._to_response(db_task)

    async def replace_task(self, task_id: int, task: TaskItemUpdate) -> Optional[TaskItemResponse]:
        """Overwrite every field except id and created_date"""
        try:
            db_task = await self._find(task_id)
            if db_task is None:
                return None

            db_task.title = task.title
            db_task.description = task.description
            db_task.status = task.status
            db_task.assigned_user = task.assigned_user

            await self.session.commit()
            await self.session.refresh(db_task)
        except SQLAlchemyError as e:
            await self._fail(f"updating task item {task_id}", e)
        logger.info("Updated task item with ID: %s", task_id)
        return self._to_response(db_task)

    async def patch_task(self, task_id: int, document: Any) -> Optional[TaskItemResponse]:
        """Apply a JSON Patch document to one task item.

        The document is validated before the lookup, so a malformed body
        raises InvalidPatchDocument even for an unknown id.
        """
        operations = parse_patch_document(document)
        try:
            db_task = await self._find(task_id)
            if db_task is None:
                return None

            apply_patch(db_task, operations)

            await self.session.commit()
            await self.session.refresh(db_task)
        except SQLAlchemyError as e:
            await self._fail(f"patching task item {task_id}", e)
        logger.info("Patched task item with ID: %s (%d operations)", task_id, len(operations))
        return self._to_response(db_task)

    async def delete_task(self, task_id: int) -> bool:
        try:
            db_task = await self._find(task_id)
            if db_task is None:
                return False

            await self.session.delete(db_task)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail(f"deleting task item {task_id}", e)
        logger.info("Deleted task item with ID: %s", task_id)
        return True
