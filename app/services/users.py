"""
Servicio CRUD para usuarios
"""
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from datetime import datetime
import logging

from app.core.errors import BadRequestError, ConflictError
from app.core.security import get_password_hash, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Normalizar email a lowercase para evitar duplicados por case"""
    return email.lower().strip()


class UserService:
    """Servicio para operaciones CRUD de usuarios"""

    @staticmethod
    def _commit_unique_email(session: Session, user: User) -> User:
        """Commit delegando la unicidad del email al índice único de la base"""
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ConflictError("El email ya está registrado")
        session.refresh(user)
        return user

    @staticmethod
    def create_user(
        session: Session,
        *,
        full_name: str,
        age: int,
        email: str,
        password: str,
    ) -> User:
        """
        Crear un nuevo usuario

        Args:
            session: Sesión de base de datos
            full_name: Nombre completo
            age: Edad (entero no negativo)
            email: Email único
            password: Contraseña en texto plano (será hasheada)

        Returns:
            Usuario creado

        Raises:
            ConflictError: si el email ya existe
        """
        email_normalized = normalize_email(email)
        if UserService.get_user_by_email(session, email_normalized):
            raise ConflictError("El email ya está registrado")

        db_user = User(
            full_name=full_name.strip(),
            age=age,
            email=email_normalized,
            password_hash=get_password_hash(password),
        )
        return UserService._commit_unique_email(session, db_user)

    @staticmethod
    def get_user_by_email(session: Session, email: str) -> Optional[User]:
        """Obtener usuario por email (case-insensitive)"""
        statement = select(User).where(User.email == normalize_email(email))
        return session.exec(statement).first()

    @staticmethod
    def authenticate_user(session: Session, email: str, password: str) -> Optional[User]:
        """Usuario si email y contraseña coinciden; None en cualquier otro caso"""
        user = UserService.get_user_by_email(session, email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def update_user(session: Session, user: User, changes: dict) -> User:
        """
        Actualizar datos del perfil

        Solo se aplican las claves presentes en `changes` (full_name, age, email).
        """
        if changes.get("email") is not None:
            email_normalized = normalize_email(changes["email"])
            if email_normalized != user.email:
                existing = UserService.get_user_by_email(session, email_normalized)
                if existing and existing.id != user.id:
                    raise ConflictError("El email ya está registrado")
            user.email = email_normalized
        if changes.get("full_name") is not None:
            user.full_name = changes["full_name"].strip()
        if changes.get("age") is not None:
            user.age = changes["age"]

        user.updated_at = datetime.utcnow()
        return UserService._commit_unique_email(session, user)

    @staticmethod
    def change_password(session: Session, user: User, *, current_password: str, new_password: str) -> User:
        if not verify_password(current_password, user.password_hash):
            raise BadRequestError("La contraseña actual es incorrecta")

        user.password_hash = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info("Contraseña actualizada para usuario %s", user.id)
        return user
