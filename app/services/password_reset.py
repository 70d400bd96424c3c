from datetime import datetime, timedelta
import hashlib
import secrets
from typing import Optional, Tuple

from sqlalchemy import update
from sqlmodel import Session, select

from app.core.security import get_password_hash
from app.models.password_reset_token import PasswordResetToken
from app.models.user import User
from app.services.refresh_tokens import revoke_user_refresh_tokens


def compute_reset_code_hash(code: int) -> str:
    return hashlib.sha256(str(code).encode("utf-8")).hexdigest()


def generate_reset_code() -> int:
    """Código numérico de 6 dígitos (100000-999999)"""
    return 100000 + secrets.randbelow(900000)


class PasswordResetService:
    @staticmethod
    def invalidate_user_codes(session: Session, user_id: int) -> None:
        """Marcar como usados los códigos pendientes del usuario (sin commit)"""
        pending = session.exec(
            select(PasswordResetToken).where(
                PasswordResetToken.user_id == user_id,
                PasswordResetToken.used == False,  # noqa: E712
            )
        ).all()
        for record in pending:
            record.used = True
            session.add(record)

    @staticmethod
    def create_reset_code(
        session: Session,
        user: User,
        expires_in_minutes: int = 15,
    ) -> Tuple[int, PasswordResetToken]:
        """
        Crear un nuevo código de recuperación para el usuario.

        Los códigos anteriores sin usar quedan invalidados, así solo hay uno activo.
        """
        PasswordResetService.invalidate_user_codes(session, user.id)

        # El código identifica al usuario: no puede coincidir con otro activo
        code = generate_reset_code()
        while PasswordResetService.find_valid_token(session, code) is not None:
            code = generate_reset_code()

        record = PasswordResetToken(
            user_id=user.id,
            code_hash=compute_reset_code_hash(code),
            expires_at=datetime.utcnow() + timedelta(minutes=expires_in_minutes),
            used=False,
        )
        session.add(record)
        session.commit()
        session.refresh(record)
        return code, record

    @staticmethod
    def find_valid_token(session: Session, code: int) -> Optional[PasswordResetToken]:
        return session.exec(
            select(PasswordResetToken)
            .where(
                PasswordResetToken.code_hash == compute_reset_code_hash(code),
                PasswordResetToken.used == False,  # noqa: E712
                PasswordResetToken.expires_at > datetime.utcnow(),
            )
            .order_by(PasswordResetToken.issued_at.desc())
        ).first()

    @staticmethod
    def _claim(session: Session, record: PasswordResetToken) -> bool:
        """
        Marcar el código como usado solo si sigue activo.

        El UPDATE condicional hace que dos canjes concurrentes no puedan
        ganar ambos: solo uno ve rowcount == 1.
        """
        now = datetime.utcnow()
        table = PasswordResetToken.__table__
        result = session.connection().execute(
            update(table)
            .where(
                table.c.id == record.id,
                table.c.used == False,  # noqa: E712
                table.c.expires_at > now,
            )
            .values(used=True, used_at=now)
        )
        return result.rowcount == 1

    @staticmethod
    def reset_password(session: Session, code: int, new_password: str) -> User:
        record = PasswordResetService.find_valid_token(session, code)
        if not record:
            raise ValueError("Código inválido o expirado")

        user = session.get(User, record.user_id)
        if not user:
            raise ValueError("Código inválido o expirado")

        if not PasswordResetService._claim(session, record):
            session.rollback()
            raise ValueError("Código inválido o expirado")

        user.password_hash = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        session.add(user)

        revoke_user_refresh_tokens(session, user.id)

        # Canje del código, nueva contraseña y revocación en una sola transacción
        session.commit()
        session.refresh(user)
        return user
