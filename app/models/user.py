from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime


class UserBase(SQLModel):
    """Modelo base para Usuario"""
    full_name: str = Field(max_length=100)
    age: int = Field(ge=0)
    email: str = Field(unique=True, index=True, max_length=255)


class User(UserBase, table=True):
    """Modelo de Usuario para la base de datos"""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = Field(default=None)
