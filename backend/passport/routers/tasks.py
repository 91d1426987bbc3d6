"""Tasks router - personal and property-linked to-dos."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import TaskStatus
from passport.models.task import Task
from passport.policies.roles import UserSession, can_edit_property
from passport.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from passport.services.access import viewable_property

router = APIRouter(prefix="/tasks", tags=["tasks"])


async def _get_task(db: AsyncSession, session: UserSession, task_id: UUID) -> Task:
    """A live task the caller created, was assigned, or can edit via its property."""
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.deleted_at.is_(None))
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise LookupError("Task not found")

    if session.id in (task.created_by_user_id, task.assigned_to_user_id):
        return task
    if task.property_id and can_edit_property(session, task.property_id):
        return task
    raise LookupError("Task not found")


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    property_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """My tasks (created or assigned), or every task on one property."""
    stmt = select(Task).where(Task.deleted_at.is_(None))
    if property_id:
        await viewable_property(db, current_user, property_id)
        stmt = stmt.where(Task.property_id == property_id)
    else:
        stmt = stmt.where(
            or_(
                Task.created_by_user_id == current_user.id,
                Task.assigned_to_user_id == current_user.id,
            )
        )
    result = await db.execute(stmt.order_by(Task.due_date.is_(None), Task.due_date, Task.created_at.desc()))
    return [TaskResponse.model_validate(task) for task in result.scalars()]


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    if data.property_id:
        await viewable_property(db, current_user, data.property_id)

    task = Task(
        created_by_user_id=current_user.id,
        status=TaskStatus.OPEN,
        **data.model_dump(),
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    task = await _get_task(db, current_user, task_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(task, field, value)
    await db.commit()
    await db.refresh(task)
    return TaskResponse.model_validate(task)


@router.post("/{task_id}/toggle")
async def toggle_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Flip a task between open and completed."""
    task = await _get_task(db, current_user, task_id)
    task.status = TaskStatus.OPEN if task.status == TaskStatus.COMPLETED else TaskStatus.COMPLETED
    await db.commit()
    return {"success": True, "status": task.status.value}


@router.delete("/{task_id}")
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    task = await _get_task(db, current_user, task_id)
    task.deleted_at = datetime.utcnow()
    await db.commit()
    return {"success": True}
