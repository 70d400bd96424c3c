"""
Modelo de tareas y sus enums de estado/prioridad
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime


class TaskPriority(str, Enum):
    """Prioridad de la tarea"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskStatus(str, Enum):
    """Estado de la tarea"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    CANCELED = "CANCELED"


class Task(SQLModel, table=True):
    """Tarea personal, siempre asociada a su dueño"""
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=120)
    description: str = Field(default="", max_length=2000)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, index=True)
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)
    due_date: Optional[datetime] = Field(default=None, index=True)
    completed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: Optional[datetime] = Field(default=None)
