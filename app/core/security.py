from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
import uuid

from jose import JWTError, jwt
import bcrypt
import logging

from app.core.config import Settings

# Configurar logging
logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _truncate_password_safely(password: str) -> bytes:
    """
    Truncar contraseña de forma segura a 72 bytes para bcrypt.
    Retorna bytes directamente para evitar problemas de codificación.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= 72:
        return password_bytes
    return password_bytes[:72]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verificar contraseña plana contra hash usando bcrypt"""
    try:
        return bcrypt.checkpw(
            _truncate_password_safely(plain_password),
            hashed_password.encode("utf-8"),
        )
    except ValueError as e:
        # Hash con formato inválido: se trata como credencial incorrecta
        logger.error(f"Hash de contraseña inválido: {e}")
        return False


def get_password_hash(password: str) -> str:
    """Generar hash de contraseña con salt usando bcrypt"""
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(_truncate_password_safely(password), salt)
    return hashed.decode("utf-8")


@dataclass(frozen=True)
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime


class TokenIssuer:
    """
    Emisor y verificador de tokens JWT firmados.

    Cada tipo de token (access/refresh) usa su propio secreto, así un token
    firmado con un secreto nunca es aceptado donde se espera el otro.
    """

    def __init__(self, *, secret: str, lifetime: timedelta, token_type: str, algorithm: str = "HS256"):
        self.secret = secret
        self.lifetime = lifetime
        self.token_type = token_type
        self.algorithm = algorithm

    def issue(self, subject: int, expires_delta: Optional[timedelta] = None) -> IssuedToken:
        """Crear token firmado para el sujeto indicado"""
        now = datetime.utcnow()
        expire = now + (expires_delta if expires_delta is not None else self.lifetime)
        jti = uuid.uuid4().hex
        to_encode = {
            "sub": str(subject),
            "type": self.token_type,
            "jti": jti,
            "iat": now,
            "exp": expire,
        }
        encoded_jwt = jwt.encode(to_encode, self.secret, algorithm=self.algorithm)
        return IssuedToken(token=encoded_jwt, jti=jti, expires_at=expire)

    def decode(self, token: str) -> Optional[dict]:
        """Verificar firma y expiración; None si el token no es válido"""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != self.token_type:
            return None
        return payload

    def verify_subject(self, token: str) -> Optional[int]:
        """Obtener el id de usuario del claim `sub`, o None si falta o no es válido"""
        payload = self.decode(token)
        if payload is None:
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.isdigit():
            return None
        return int(subject)


def access_token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(
        secret=settings.access_token_secret,
        lifetime=timedelta(minutes=settings.access_token_expire_minutes),
        token_type=ACCESS_TOKEN_TYPE,
        algorithm=settings.jwt_algorithm,
    )


def refresh_token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(
        secret=settings.refresh_token_secret,
        lifetime=timedelta(days=settings.refresh_token_expire_days),
        token_type=REFRESH_TOKEN_TYPE,
        algorithm=settings.jwt_algorithm,
    )


def issue_token_pair(settings: Settings, user_id: int) -> Tuple[IssuedToken, IssuedToken]:
    """Emitir par access + refresh ligado al mismo usuario"""
    return (
        access_token_issuer(settings).issue(user_id),
        refresh_token_issuer(settings).issue(user_id),
    )
