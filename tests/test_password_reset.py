from datetime import datetime, timedelta

from sqlmodel import Session, select

from app.models.password_reset_token import PasswordResetToken


def _register(client, *, email: str, password: str = "StrongPass1!"):
    res = client.post(
        "/api/auth/register",
        json={"full_name": "Reset User", "age": 25, "email": email, "password": password},
    )
    assert res.status_code == 201
    return res.json()


def _login(client, email: str, password: str):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_forgot_password_unknown_email_returns_404(client, sent_codes):
    res = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert res.status_code == 404
    assert sent_codes == []


def test_forgot_password_creates_active_code(client, db_session: Session, sent_codes):
    data = _register(client, email="forgot@example.com")

    before = datetime.utcnow()
    res = client.post("/api/auth/forgot-password", json={"email": "forgot@example.com"})
    assert res.status_code == 200
    assert res.json()["message"]

    assert len(sent_codes) == 1
    to_email, code = sent_codes[0]
    assert to_email == "forgot@example.com"
    assert 100000 <= code <= 999999

    records = db_session.exec(select(PasswordResetToken)).all()
    assert len(records) == 1
    record = records[0]
    assert record.user_id == data["user"]["id"]
    assert record.used is False
    expected = before + timedelta(minutes=15)
    assert abs((record.expires_at - expected).total_seconds()) < 60


def test_forgot_password_invalidates_previous_code(client, sent_codes):
    _register(client, email="twice@example.com")

    client.post("/api/auth/forgot-password", json={"email": "twice@example.com"})
    client.post("/api/auth/forgot-password", json={"email": "twice@example.com"})
    first_code, second_code = sent_codes[0][1], sent_codes[1][1]

    if first_code != second_code:
        stale = client.post("/api/auth/reset-password", json={"code": first_code, "new_password": "NewPass1!"})
        assert stale.status_code == 400

    fresh = client.post("/api/auth/reset-password", json={"code": second_code, "new_password": "NewPass1!"})
    assert fresh.status_code == 200


def test_forgot_password_succeeds_when_email_dispatch_fails(client, monkeypatch):
    from app.services.email_service import EmailService

    def broken_send(*args, **kwargs):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(EmailService, "send_password_reset_code", broken_send)
    _register(client, email="smtpdown@example.com")

    res = client.post("/api/auth/forgot-password", json={"email": "smtpdown@example.com"})
    assert res.status_code == 200


def test_reset_password_changes_password_and_rejects_replay(client, sent_codes):
    reg = client.post(
        "/api/auth/register",
        json={"full_name": "Reset User", "age": 25, "email": "reset@example.com", "password": "StrongPass1!"},
    )
    assert reg.status_code == 201
    refresh_token = reg.cookies.get("refresh_token")

    client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    code = sent_codes[0][1]

    res = client.post("/api/auth/reset-password", json={"code": code, "new_password": "BrandNew1!"})
    assert res.status_code == 200

    assert _login(client, "reset@example.com", "StrongPass1!").status_code == 401
    assert _login(client, "reset@example.com", "BrandNew1!").status_code == 200

    replay = client.post("/api/auth/reset-password", json={"code": code, "new_password": "Another1!"})
    assert replay.status_code == 400
    assert _login(client, "reset@example.com", "BrandNew1!").status_code == 200

    # Los refresh tokens anteriores al reset quedan revocados
    refresh = client.post("/api/auth/refresh", json={"refresh_token": refresh_token})
    assert refresh.status_code == 401


def test_reset_password_with_expired_code_returns_400(client, db_session: Session, sent_codes):
    _register(client, email="late@example.com")
    client.post("/api/auth/forgot-password", json={"email": "late@example.com"})
    code = sent_codes[0][1]

    record = db_session.exec(select(PasswordResetToken)).one()
    record.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db_session.add(record)
    db_session.commit()

    res = client.post("/api/auth/reset-password", json={"code": code, "new_password": "BrandNew1!"})
    assert res.status_code == 400
    assert _login(client, "late@example.com", "StrongPass1!").status_code == 200


def test_reset_password_rejects_malformed_code(client):
    res = client.post("/api/auth/reset-password", json={"code": 123, "new_password": "BrandNew1!"})
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"


def _create_user(db_session: Session, email: str):
    from app.services.users import UserService

    return UserService.create_user(
        db_session,
        full_name="Reset User",
        age=25,
        email=email,
        password="StrongPass1!",
    )


def test_reset_code_can_be_claimed_only_once(db_session: Session):
    from app.services.password_reset import PasswordResetService

    user = _create_user(db_session, "claim@example.com")
    _, record = PasswordResetService.create_reset_code(db_session, user)

    assert PasswordResetService._claim(db_session, record) is True
    db_session.commit()
    assert PasswordResetService._claim(db_session, record) is False


def test_reset_password_fails_when_code_is_redeemed_concurrently(client, db_session: Session, sent_codes, monkeypatch):
    from app.services.password_reset import PasswordResetService

    _register(client, email="race@example.com")
    client.post("/api/auth/forgot-password", json={"email": "race@example.com"})
    code = sent_codes[0][1]

    # Otro canje gana entre la búsqueda y el UPDATE condicional
    record = db_session.exec(select(PasswordResetToken)).one()
    record_id = record.id
    record.used = True
    record.used_at = datetime.utcnow()
    db_session.add(record)
    db_session.commit()

    def stale_lookup(session, lookup_code):
        return session.get(PasswordResetToken, record_id) if lookup_code == code else None

    monkeypatch.setattr(PasswordResetService, "find_valid_token", stale_lookup)

    res = client.post("/api/auth/reset-password", json={"code": code, "new_password": "BrandNew1!"})
    assert res.status_code == 400
    assert _login(client, "race@example.com", "StrongPass1!").status_code == 200


def test_new_reset_code_never_matches_another_users_active_code(db_session: Session, monkeypatch):
    import app.services.password_reset as password_reset
    from app.services.password_reset import PasswordResetService

    first = _create_user(db_session, "first@example.com")
    second = _create_user(db_session, "second@example.com")

    codes = iter([111111, 111111, 222222])
    monkeypatch.setattr(password_reset, "generate_reset_code", lambda: next(codes))

    first_code, _ = PasswordResetService.create_reset_code(db_session, first)
    second_code, _ = PasswordResetService.create_reset_code(db_session, second)

    assert first_code == 111111
    assert second_code == 222222
    assert PasswordResetService.find_valid_token(db_session, first_code).user_id == first.id
    assert PasswordResetService.find_valid_token(db_session, second_code).user_id == second.id
