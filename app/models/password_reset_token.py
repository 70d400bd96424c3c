from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class PasswordResetToken(SQLModel, table=True):
    __tablename__ = "password_reset_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    # Solo se guarda el hash del código de 6 dígitos
    code_hash: str = Field(index=True, max_length=64)
    issued_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    expires_at: datetime = Field(index=True)
    used: bool = Field(default=False, index=True)
    used_at: Optional[datetime] = Field(default=None)
