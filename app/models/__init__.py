"""
Modelos SQLModel para la API de tareas
"""

from .user import UserBase, User
from .task import TaskPriority, TaskStatus, Task
from .password_reset_token import PasswordResetToken
from .refresh_token import RefreshToken

__all__ = [
    "UserBase",
    "User",
    "TaskPriority",
    "TaskStatus",
    "Task",
    "PasswordResetToken",
    "RefreshToken",
]
