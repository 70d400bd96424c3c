"""
Esquemas Pydantic para tareas
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.task import TaskPriority, TaskStatus


class TaskSort(str, Enum):
    """Campo por el que se ordena el listado (siempre descendente)"""
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=2000)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None


class TaskReplace(BaseModel):
    """Reemplazo completo: los cuatro campos son obligatorios (due_date admite null)"""
    title: str = Field(min_length=1, max_length=120)
    description: str = Field(max_length=2000)
    priority: TaskPriority
    due_date: Optional[datetime]


class TaskPatch(BaseModel):
    """
    Actualización parcial.

    Los campos omitidos no se tocan; un `null` explícito en due_date la borra.
    Se distingue usando model_dump(exclude_unset=True).
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
