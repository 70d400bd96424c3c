import hashlib
import hmac
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from app.core.config import Settings
from app.models.refresh_token import RefreshToken


def compute_refresh_token_hash(settings: Settings, refresh_token: str) -> str:
    secret = settings.refresh_token_secret.encode("utf-8")
    message = refresh_token.encode("utf-8")
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


def get_refresh_token_by_hash(session: Session, token_hash: str) -> Optional[RefreshToken]:
    statement = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
    return session.exec(statement).first()


def get_active_refresh_token(session: Session, settings: Settings, refresh_token: str) -> Optional[RefreshToken]:
    """Registro del refresh token si existe, no está revocado y no expiró"""
    record = get_refresh_token_by_hash(session, compute_refresh_token_hash(settings, refresh_token))
    if not record:
        return None
    if record.revoked_at is not None:
        return None
    if record.expires_at <= datetime.utcnow():
        return None
    return record


def store_refresh_token(
    session: Session,
    settings: Settings,
    *,
    user_id: int,
    refresh_token: str,
    jti: str,
    expires_at: datetime,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
    commit: bool = True,
) -> RefreshToken:
    token_hash = compute_refresh_token_hash(settings, refresh_token)
    record = RefreshToken(
        user_id=user_id,
        token_hash=token_hash,
        jti=jti,
        expires_at=expires_at,
        user_agent=user_agent[:512] if user_agent else None,
        ip_address=ip_address,
    )
    session.add(record)
    if commit:
        session.commit()
        session.refresh(record)
    return record


def revoke_refresh_token(session: Session, record: RefreshToken) -> RefreshToken:
    record.revoked_at = datetime.utcnow()
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def revoke_user_refresh_tokens(session: Session, user_id: int) -> int:
    """Revocar todos los refresh tokens activos del usuario (sin commit)"""
    tokens = session.exec(
        select(RefreshToken).where(RefreshToken.user_id == user_id, RefreshToken.revoked_at == None)  # noqa: E711
    ).all()
    now = datetime.utcnow()
    for t in tokens:
        t.revoked_at = now
        session.add(t)
    return len(tokens)
