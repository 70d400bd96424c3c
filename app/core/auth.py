"""
Dependencias de autenticación (guardia de rutas protegidas)
"""
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.database import get_session
from app.core.errors import UnauthorizedError
from app.core.security import access_token_issuer
from app.models.user import User

# auto_error=False: la ausencia de header se reporta con nuestro propio 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> int:
    """Id del usuario a partir del header `Authorization: Bearer <token>`"""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError()

    user_id = access_token_issuer(settings).verify_subject(credentials.credentials)
    if user_id is None:
        raise UnauthorizedError()
    return user_id


def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    session: Session = Depends(get_session),
) -> User:
    """Obtener usuario actual desde el token JWT"""
    user = session.get(User, user_id)
    if user is None:
        raise UnauthorizedError()
    return user


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
CurrentUser = Annotated[User, Depends(get_current_user)]
