from rewardbin.core.security import SecurityUtils
from rewardbin.models import User, UserSession, UserStatus

PASSWORD = "recycle123"


async def _sign_up(client, email="jane@example.com", password=PASSWORD):
    return await client.post(
        "/api/v1/auth/sign-up",
        json={"name": "Jane Doe", "email": email, "password": password},
    )


async def test_sign_up_opens_session_and_sends_welcome(client, app, settings):
    response = await _sign_up(client, email="Jane@Example.com")

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "jane@example.com"
    assert body["user"]["role"] == "user"
    assert body["token"]
    assert settings.SESSION_COOKIE_NAME in response.cookies
    assert app.state.email_service.sent == [{"kind": "welcome", "to": "jane@example.com", "name": "Jane Doe"}]

    session = await client.get("/api/v1/auth/session", headers={"Authorization": f"Bearer {body['token']}"})
    assert session.status_code == 200
    assert session.json()["user"]["name"] == "Jane Doe"


async def test_sign_up_duplicate_email(client):
    await _sign_up(client)

    response = await _sign_up(client)

    assert response.status_code == 409


async def test_sign_up_weak_password(client, seed):
    response = await _sign_up(client, password="short")

    assert response.status_code == 400
    assert await seed.count(User) == 0


async def test_sign_up_invalid_email_is_422(client):
    response = await client.post(
        "/api/v1/auth/sign-up",
        json={"name": "Jane", "email": "not-an-email", "password": PASSWORD},
    )

    assert response.status_code == 422
    assert "email" in response.json()["details"]


async def test_sign_in_and_out(client, seed):
    user = await seed.user(password=PASSWORD)

    response = await client.post("/api/v1/auth/sign-in", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    signed_out = await client.post("/api/v1/auth/sign-out", headers=headers)
    assert signed_out.status_code == 200
    assert await seed.count(UserSession, UserSession.token == token) == 0

    assert (await client.get("/api/v1/auth/session", headers=headers)).status_code == 401


async def test_sign_in_wrong_password(client, seed):
    user = await seed.user(password=PASSWORD)

    response = await client.post("/api/v1/auth/sign-in", json={"email": user.email, "password": "wrong-pass1"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_sign_in_unknown_email(client):
    response = await client.post("/api/v1/auth/sign-in", json={"email": "nobody@example.com", "password": PASSWORD})

    assert response.status_code == 401


async def test_banned_user_cannot_sign_in(client, seed):
    user = await seed.user(password=PASSWORD, status=UserStatus.BANNED)

    response = await client.post("/api/v1/auth/sign-in", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 403


async def test_forgot_password_same_answer_for_unknown_email(client, app, seed):
    user = await seed.user(password=PASSWORD)

    known = await client.post("/api/v1/auth/forgot-password", json={"email": user.email})
    unknown = await client.post("/api/v1/auth/forgot-password", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    sent = app.state.email_service.sent
    assert len(sent) == 1
    assert sent[0]["kind"] == "reset"
    assert sent[0]["to"] == user.email


async def test_reset_password_revokes_sessions(client, app, seed):
    user = await seed.user(password=PASSWORD)
    old_token = await seed.session_token(user)
    await client.post("/api/v1/auth/forgot-password", json={"email": user.email})
    reset_token = app.state.email_service.sent[0]["token"]

    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": reset_token, "newPassword": "fresh-start9"},
    )

    assert response.status_code == 200
    assert await seed.count(UserSession, UserSession.user_id == user.id) == 0
    assert (await client.get("/api/v1/auth/session", headers={"Authorization": f"Bearer {old_token}"})).status_code == 401

    signed_in = await client.post("/api/v1/auth/sign-in", json={"email": user.email, "password": "fresh-start9"})
    assert signed_in.status_code == 200


async def test_reset_password_rejects_bad_token(client):
    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": "garbage", "newPassword": "fresh-start9"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or expired reset token"}


def test_reset_token_round_trip(settings):
    token = SecurityUtils.create_reset_token("abc", settings)

    assert SecurityUtils.decode_reset_token(token, settings)["sub"] == "abc"


def test_password_rules():
    assert SecurityUtils.validate_password("abc12345", 8) == (True, "")
    assert SecurityUtils.validate_password("abcdefgh", 8)[0] is False
    assert SecurityUtils.validate_password("12345678", 8)[0] is False
    assert SecurityUtils.validate_password("ab1", 8)[0] is False
