"""
Router de autenticación: registro, login, refresh, logout y recuperación de contraseña
"""
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request, Response, status
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.database import get_session
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterResponse,
    ResetPasswordRequest,
    Token,
)
from app.schemas.users import MessageResponse, UserCreate, UserRead
from app.services.auth import AuthService, SessionTokens
from app.services.email_service import dispatch_password_reset_code

router = APIRouter(prefix="/auth", tags=["authentication"])

SettingsDep = Annotated[Settings, Depends(get_settings)]


def _client_info(request: Request) -> dict:
    return {
        "user_agent": request.headers.get("User-Agent"),
        "ip_address": request.client.host if request.client else None,
    }


def _set_refresh_cookie(response: Response, settings: Settings, refresh_token: str) -> None:
    """Refresh token en cookie httpOnly, limitada a las rutas de autenticación"""
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=refresh_token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path=settings.refresh_cookie_path,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
    )


def _access_token_response(settings: Settings, tokens: SessionTokens) -> Token:
    return Token(
        access_token=tokens.access.token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


def _presented_refresh_token(
    request: Request,
    settings: Settings,
    payload: Optional[RefreshTokenRequest],
) -> Optional[str]:
    """Un refresh token explícito en el cuerpo tiene prioridad sobre la cookie"""
    if payload is not None and payload.refresh_token:
        return payload.refresh_token
    return request.cookies.get(settings.refresh_cookie_name)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    user: UserCreate,
    request: Request,
    response: Response,
    settings: SettingsDep,
    session: Session = Depends(get_session),
):
    """
    Registrar un nuevo usuario

    Devuelve el usuario creado (sin contraseña) y un access token;
    el refresh token se envía en cookie httpOnly.
    """
    tokens = AuthService.register(
        session,
        settings,
        full_name=user.full_name,
        age=user.age,
        email=user.email,
        password=user.password,
        **_client_info(request),
    )
    _set_refresh_cookie(response, settings, tokens.refresh.token)

    return RegisterResponse(
        user=UserRead.model_validate(tokens.user),
        **_access_token_response(settings, tokens).model_dump(),
    )


@router.post("/login", response_model=Token)
def login_user(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    settings: SettingsDep,
    session: Session = Depends(get_session),
):
    """
    Iniciar sesión con JSON

    - **email**: Email del usuario
    - **password**: Contraseña
    """
    tokens = AuthService.login(
        session,
        settings,
        email=credentials.email,
        password=credentials.password,
        **_client_info(request),
    )
    _set_refresh_cookie(response, settings, tokens.refresh.token)
    return _access_token_response(settings, tokens)


@router.post("/refresh", response_model=Token)
def refresh_access_token(
    request: Request,
    settings: SettingsDep,
    payload: Optional[RefreshTokenRequest] = Body(default=None),
    session: Session = Depends(get_session),
):
    """Renovar el access token usando el refresh token (cookie o cuerpo)"""
    access = AuthService.refresh(session, settings, _presented_refresh_token(request, settings, payload))
    return Token(
        access_token=access.token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    settings: SettingsDep,
    payload: Optional[RefreshTokenRequest] = Body(default=None),
    session: Session = Depends(get_session),
):
    """Revocar el refresh token actual y borrar la cookie"""
    AuthService.logout(session, settings, _presented_refresh_token(request, settings, payload))
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return MessageResponse(message="Sesión cerrada")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    settings: SettingsDep,
    session: Session = Depends(get_session),
):
    """
    Solicitar código de recuperación

    El email se envía en segundo plano: la respuesta no depende del resultado del envío.
    """
    reset = AuthService.forgot_password(session, settings, email=payload.email)
    background_tasks.add_task(dispatch_password_reset_code, settings, reset.email, reset.code)
    return MessageResponse(message="Código de recuperación enviado al email")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, session: Session = Depends(get_session)):
    """Restablecer la contraseña con el código de 6 dígitos"""
    AuthService.reset_password(session, code=payload.code, new_password=payload.new_password)
    return MessageResponse(message="Contraseña restablecida correctamente")
