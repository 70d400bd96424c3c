"""
Esquemas Pydantic para autenticación
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.schemas.users import UserRead


class Token(BaseModel):
    """Esquema para token de acceso"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # segundos


class RegisterResponse(Token):
    """Respuesta del registro: usuario creado más su token de acceso"""
    user: UserRead


class LoginRequest(BaseModel):
    """Esquema para login con JSON"""
    email: EmailStr
    password: str = Field(min_length=6)


class RefreshTokenRequest(BaseModel):
    """Refresh token enviado en el cuerpo cuando no llega por cookie"""
    refresh_token: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Código OTP de 6 dígitos y nueva contraseña"""
    code: int = Field(ge=100000, le=999999)
    new_password: str = Field(min_length=6)
