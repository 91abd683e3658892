from typing import Any, List
from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from ..db import get_db
from ..schemas import TaskItemCreate, TaskItemResponse, TaskItemUpdate
from ..service import TaskItemService

router = APIRouter(prefix="/taskitems", tags=["taskitems"])


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskItemService:
    return TaskItemService(db)


def _not_found(task_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task item {task_id} not found")


@router.get("", response_model=List[TaskItemResponse])
async def get_task_items(service: TaskItemService = Depends(get_task_service)):
    """Get all task items, newest first"""
    return await service.list_tasks()


@router.get("/{task_id}", response_model=TaskItemResponse)
async def get_task_item(task_id: int, service: TaskItemService = Depends(get_task_service)):
    """Get a specific task item by ID"""
    task = await service.get_task(task_id)
    if task is None:
        raise _not_found(task_id)
    return task


@router.post("", response_model=TaskItemResponse, status_code=status.HTTP_201_CREATED)
async def create_task_item(
    task: TaskItemCreate,
    request: Request,
    response: Response,
    service: TaskItemService = Depends(get_task_service)
):
    """Create a new task item"""
    created = await service.create_task(task)
    response.headers["Location"] = str(request.url_for("get_task_item", task_id=created.id))
    return created


@router.put("/{task_id}", response_model=TaskItemResponse)
async def update_task_item(
    task_id: int,
    task: TaskItemUpdate,
    service: TaskItemService = Depends(get_task_service)
):
    """Replace a task item; createdDate is kept"""
    updated = await service.replace_task(task_id, task)
    if updated is None:
        raise _not_found(task_id)
    return updated


@router.patch("/{task_id}", response_model=TaskItemResponse)
async def patch_task_item(
    task_id: int,
    document: Any = Body(None),
    service: TaskItemService = Depends(get_task_service)
):
    """Partially update a task item with a JSON Patch document"""
    updated = await service.patch_task(task_id, document)
    if updated is None:
        raise _not_found(task_id)
    return updated


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task_item(task_id: int, service: TaskItemService = Depends(get_task_service)):
    """Delete a task item"""
    deleted = await service.delete_task(task_id)
    if not deleted:
        raise _not_found(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
