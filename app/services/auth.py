"""
Servicio de sesión: registro, login, refresh, logout y recuperación de contraseña
"""
from dataclasses import dataclass
from typing import Optional
import logging

from sqlmodel import Session

from app.core.config import Settings
from app.core.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.core.security import IssuedToken, access_token_issuer, issue_token_pair, refresh_token_issuer
from app.models.user import User
from app.services.password_reset import PasswordResetService
from app.services.refresh_tokens import get_active_refresh_token, revoke_refresh_token, store_refresh_token
from app.services.users import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email o contraseña incorrectos"
INVALID_REFRESH_TOKEN = "Refresh token inválido"


@dataclass
class SessionTokens:
    """Resultado de un login/registro: el access va en el cuerpo, el refresh en cookie"""
    user: User
    access: IssuedToken
    refresh: IssuedToken


@dataclass
class PasswordResetRequest:
    email: str
    code: int


class AuthService:
    @staticmethod
    def _start_session(
        session: Session,
        settings: Settings,
        user: User,
        *,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SessionTokens:
        access, refresh = issue_token_pair(settings, user.id)
        store_refresh_token(
            session,
            settings,
            user_id=user.id,
            refresh_token=refresh.token,
            jti=refresh.jti,
            expires_at=refresh.expires_at,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        return SessionTokens(user=user, access=access, refresh=refresh)

    @staticmethod
    def register(
        session: Session,
        settings: Settings,
        *,
        full_name: str,
        age: int,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SessionTokens:
        user = UserService.create_user(
            session,
            full_name=full_name,
            age=age,
            email=email,
            password=password,
        )
        logger.info("Usuario registrado: %s", user.id)
        return AuthService._start_session(session, settings, user, user_agent=user_agent, ip_address=ip_address)

    @staticmethod
    def login(
        session: Session,
        settings: Settings,
        *,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SessionTokens:
        user = UserService.authenticate_user(session, email, password)
        if not user:
            # Mismo mensaje para email inexistente y contraseña incorrecta
            logger.info("Login fallido")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return AuthService._start_session(session, settings, user, user_agent=user_agent, ip_address=ip_address)

    @staticmethod
    def refresh(session: Session, settings: Settings, refresh_token: Optional[str]) -> IssuedToken:
        """
        Emitir un nuevo access token a partir de un refresh token válido.

        El refresh token no se rota: sigue siendo válido hasta que expire
        o se revoque (logout / reset de contraseña).
        """
        if not refresh_token:
            raise UnauthorizedError("Refresh token requerido")

        user_id = refresh_token_issuer(settings).verify_subject(refresh_token)
        if user_id is None:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        record = get_active_refresh_token(session, settings, refresh_token)
        if record is None or record.user_id != user_id:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        return access_token_issuer(settings).issue(user_id)

    @staticmethod
    def logout(session: Session, settings: Settings, refresh_token: Optional[str]) -> bool:
        """Revocar el refresh token presentado; True si había uno activo"""
        if not refresh_token:
            return False
        record = get_active_refresh_token(session, settings, refresh_token)
        if record is None:
            return False
        revoke_refresh_token(session, record)
        return True

    @staticmethod
    def forgot_password(session: Session, settings: Settings, *, email: str) -> PasswordResetRequest:
        """
        Crear un código de recuperación para el email.

        El envío del email queda a cargo del llamador (en segundo plano).
        """
        user = UserService.get_user_by_email(session, email)
        if not user:
            raise NotFoundError("Email no registrado")

        code, _ = PasswordResetService.create_reset_code(
            session,
            user,
            expires_in_minutes=settings.password_reset_code_expire_minutes,
        )
        logger.info("Código de recuperación emitido para usuario %s", user.id)
        return PasswordResetRequest(email=user.email, code=code)

    @staticmethod
    def reset_password(session: Session, *, code: int, new_password: str) -> User:
        try:
            user = PasswordResetService.reset_password(session, code, new_password)
        except ValueError as e:
            raise BadRequestError(str(e))
        logger.info("Contraseña restablecida para usuario %s", user.id)
        return user
