"""
Esquemas Pydantic para usuarios (API)
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime


class UserBase(BaseModel):
    full_name: str = Field(min_length=3, max_length=100)
    age: int = Field(ge=0)
    email: EmailStr


class UserCreate(UserBase):
    """Esquema para registrar usuario"""
    password: str = Field(min_length=6, description="Contraseña (mínimo 6 caracteres)")


class UserUpdate(BaseModel):
    """Esquema para actualizar el perfil: solo se aplican los campos enviados"""
    full_name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    age: Optional[int] = Field(default=None, ge=0)
    email: Optional[EmailStr] = None


class UserRead(UserBase):
    """Esquema para leer usuario (respuesta, nunca incluye el hash)"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class PasswordChange(BaseModel):
    """Esquema para cambio de contraseña"""
    current_password: str = Field(min_length=6)
    new_password: str = Field(min_length=6)


# Respuestas genéricas
class MessageResponse(BaseModel):
    """Respuesta genérica con mensaje"""
    message: str
