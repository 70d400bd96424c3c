"""
Router del perfil del usuario autenticado
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import CurrentUser
from app.core.database import get_session
from app.schemas.users import PasswordChange, UserRead, UserUpdate
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: CurrentUser):
    """
    Obtener información del usuario autenticado

    Requiere token JWT válido en el header:
    Authorization: Bearer <token>
    """
    return current_user


@router.put("/me", response_model=UserRead)
@router.patch("/me", response_model=UserRead)
def update_current_user(
    user_update: UserUpdate,
    current_user: CurrentUser,
    session: Session = Depends(get_session),
):
    """
    Actualizar el perfil propio

    Solo se modifican los campos enviados (full_name, age, email).
    """
    return UserService.update_user(session, current_user, user_update.model_dump(exclude_unset=True))


@router.patch("/me/password", response_model=UserRead)
def change_password(
    password_change: PasswordChange,
    current_user: CurrentUser,
    session: Session = Depends(get_session),
):
    """Cambiar contraseña verificando la actual"""
    return UserService.change_password(
        session,
        current_user,
        current_password=password_change.current_password,
        new_password=password_change.new_password,
    )
