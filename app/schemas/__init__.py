# Schemas
from .users import (
    UserCreate,
    UserUpdate,
    UserRead,
    PasswordChange,
    MessageResponse,
)

from .auth import (
    Token,
    RegisterResponse,
    LoginRequest,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)

from .tasks import (
    TaskSort,
    TaskCreate,
    TaskReplace,
    TaskPatch,
    TaskStatusUpdate,
    TaskRead,
)

__all__ = [
    # Users
    "UserCreate",
    "UserUpdate",
    "UserRead",
    "PasswordChange",
    "MessageResponse",
    # Auth
    "Token",
    "RegisterResponse",
    "LoginRequest",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    # Tasks
    "TaskSort",
    "TaskCreate",
    "TaskReplace",
    "TaskPatch",
    "TaskStatusUpdate",
    "TaskRead",
]
