"""
Router de tareas del usuario autenticado
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import CurrentUserId
from app.core.database import get_session
from app.models.task import TaskPriority, TaskStatus
from app.schemas.tasks import TaskCreate, TaskPatch, TaskRead, TaskReplace, TaskSort, TaskStatusUpdate
from app.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    user_id: CurrentUserId,
    session: Session = Depends(get_session),
):
    """
    Crear una tarea

    - **title**: 1 a 120 caracteres
    - **description**: hasta 2000 caracteres
    - **priority**: LOW, MEDIUM o HIGH
    - **due_date**: fecha límite opcional
    """
    return TaskService.create_task(
        session,
        user_id=user_id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
    )


@router.get("", response_model=List[TaskRead])
def list_tasks(
    user_id: CurrentUserId,
    task_status: Optional[TaskStatus] = Query(default=None, alias="status"),
    priority: Optional[TaskPriority] = Query(default=None),
    due_date: Optional[date] = Query(default=None, description="Tareas que vencen ese día"),
    sort: TaskSort = Query(default=TaskSort.CREATED_AT, description="Orden descendente por este campo"),
    session: Session = Depends(get_session),
):
    """Listar tareas propias; los filtros se combinan con AND"""
    return TaskService.list_tasks(
        session,
        user_id=user_id,
        status=task_status,
        priority=priority,
        due_date=due_date,
        sort=sort,
    )


@router.get("/{task_id}", response_model=TaskRead)
def read_task(task_id: int, user_id: CurrentUserId, session: Session = Depends(get_session)):
    return TaskService.get_task(session, user_id=user_id, task_id=task_id)


@router.put("/{task_id}", response_model=TaskRead)
def replace_task(
    task_id: int,
    task: TaskReplace,
    user_id: CurrentUserId,
    session: Session = Depends(get_session),
):
    """Reemplazo completo de title, description, priority y due_date"""
    return TaskService.replace_task(
        session,
        user_id=user_id,
        task_id=task_id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
    )


@router.patch("/{task_id}", response_model=TaskRead)
def patch_task(
    task_id: int,
    task: TaskPatch,
    user_id: CurrentUserId,
    session: Session = Depends(get_session),
):
    """Actualización parcial: solo los campos presentes en el cuerpo"""
    return TaskService.patch_task(
        session,
        user_id=user_id,
        task_id=task_id,
        changes=task.model_dump(exclude_unset=True),
    )


@router.patch("/{task_id}/status", response_model=TaskRead)
def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    user_id: CurrentUserId,
    session: Session = Depends(get_session),
):
    return TaskService.set_status(session, user_id=user_id, task_id=task_id, status=payload.status)


@router.patch("/{task_id}/complete", response_model=TaskRead)
def complete_task(task_id: int, user_id: CurrentUserId, session: Session = Depends(get_session)):
    return TaskService.complete_task(session, user_id=user_id, task_id=task_id)
