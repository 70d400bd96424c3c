#!/usr/bin/env python3
import argparse
import sys
from datetime import datetime
from pathlib import Path

project_root = Path(__file__).resolve().parents[1]
sys.path.append(str(project_root))

from sqlmodel import Session

from app.core.database import engine
from app.core.security import get_password_hash
from app.services.refresh_tokens import revoke_user_refresh_tokens
from app.services.users import UserService


def main() -> int:
    parser = argparse.ArgumentParser(description="Resetear password de un usuario por email")
    parser.add_argument("--email", required=True, help="Email del usuario")
    parser.add_argument("--password", required=True, help="Nueva contraseña (mínimo 6 caracteres)")
    args = parser.parse_args()

    if len(args.password) < 6:
        print("❌ La contraseña debe tener al menos 6 caracteres")
        return 1

    with Session(engine) as session:
        user = UserService.get_user_by_email(session, args.email)
        if not user:
            print(f"❌ Usuario no encontrado: {args.email}")
            return 1

        user.password_hash = get_password_hash(args.password)
        user.updated_at = datetime.utcnow()
        session.add(user)
        revoked = revoke_user_refresh_tokens(session, user.id)
        email = user.email
        session.commit()

    print(f"✅ Password actualizado para {email} ({revoked} sesiones revocadas)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
