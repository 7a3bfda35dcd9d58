from datetime import timedelta

from sqlalchemy import select, update

from portal_api.core.config import get_settings
from portal_api.core.security import TokenSigner
from portal_api.models.auth import RefreshToken
from portal_api.models.base import utc_now
from portal_api.models.enums import UserStatus
from portal_api.services.token_store import cleanup_expired_tokens


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_login_returns_token_pair_for_active_user(api_client, seed_user):
    response = api_client.post("/auth/login", json={"email": "a@x", "password": "password123"})

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "OPERATION_SUCCESSFUL"
    assert body["message"] == "Login successful"
    data = body["data"]
    assert data["user"]["email"] == "a@x"
    assert data["user"]["organization_id"] == "O1"
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["access_token"] != data["refresh_token"]
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == 900


def test_login_with_wrong_password_is_unauthorized(api_client, seed_user):
    response = api_client.post("/auth/login", json={"email": "a@x", "password": "WRONG"})

    assert response.status_code == 401
    body = response.json()
    assert body["code"] == "UNAUTHORIZED"
    assert body["message"] == "Invalid credentials"
    assert body["details"] == []


def test_login_with_unknown_email_is_unauthorized(api_client, seed_user):
    response = api_client.post("/auth/login", json={"email": "nobody@x", "password": "password123"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_login_normalizes_email_case(api_client, seed_user):
    response = api_client.post("/auth/login", json={"email": "A@X", "password": "password123"})

    assert response.status_code == 200


def test_login_rejects_disabled_user(api_client, create_user):
    create_user(email="off@x", username="offline", status=UserStatus.SUSPENDED)

    response = api_client.post("/auth/login", json={"email": "off@x", "password": "password123"})

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    assert response.json()["message"] == "User account is disabled"


def test_register_duplicate_email_conflicts(api_client, seed_user):
    response = api_client.post(
        "/auth/register",
        json={
            "organization_id": "O1",
            "role_id": "R1",
            "name": "B",
            "username": "bbb",
            "email": "a@x",
            "password": "password123",
        },
    )

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"
    assert response.json()["message"] == "Email already registered"


def test_register_duplicate_username_conflicts(api_client, seed_user):
    response = api_client.post(
        "/auth/register",
        json={
            "organization_id": "O1",
            "role_id": "R1",
            "name": "B",
            "username": "alice",
            "email": "b@x",
            "password": "password123",
        },
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Username already taken"


def test_register_then_login_succeeds(api_client):
    register = api_client.post(
        "/auth/register",
        json={
            "organization_id": "O2",
            "role_id": "R2",
            "name": "Budi",
            "username": "budi01",
            "email": "Budi@Example.com",
            "password": "password123",
        },
    )
    assert register.status_code == 201
    assert register.json()["code"] == "RESOURCE_CREATED"
    assert register.json()["data"]["user"]["email"] == "budi@example.com"

    login = api_client.post("/auth/login", json={"email": "budi@example.com", "password": "password123"})
    assert login.status_code == 200
    assert login.json()["data"]["access_token"]
    assert login.json()["data"]["refresh_token"]


def test_register_rejects_short_password_and_non_alphanumeric_username(api_client):
    response = api_client.post(
        "/auth/register",
        json={
            "organization_id": "O1",
            "role_id": "R1",
            "name": "B",
            "username": "bad name",
            "email": "b@x",
            "password": "short",
        },
    )

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_FAILED"
    fields = {item["field"]: item["message"] for item in body["details"]}
    assert fields["username"] == "username must contain only alphanumeric characters"
    assert fields["password"] == "password must be at least 8 characters"


def test_refresh_rotates_and_old_token_is_single_use(api_client, seed_user, login):
    tokens = login()
    old_refresh = tokens["refresh_token"]

    first = api_client.post("/auth/refresh", json={"refresh_token": old_refresh})
    assert first.status_code == 200
    rotated = first.json()["data"]
    assert rotated["refresh_token"] != old_refresh
    assert rotated["access_token"] != tokens["access_token"]

    second = api_client.post("/auth/refresh", json={"refresh_token": old_refresh})
    assert second.status_code == 401

    me = api_client.get("/me", headers=_bearer(rotated["access_token"]))
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "a@x"


def test_refresh_with_unknown_token_is_invalid(api_client):
    response = api_client.post("/auth/refresh", json={"refresh_token": "not-a-token"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_refresh_with_expired_record_is_rejected(api_client, seed_user, login, db):
    tokens = login()
    db.execute(
        update(RefreshToken)
        .where(RefreshToken.refresh_token == tokens["refresh_token"])
        .values(expires_at=utc_now() - timedelta(minutes=1))
    )
    db.commit()

    response = api_client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"
    record = db.execute(
        select(RefreshToken).where(RefreshToken.refresh_token == tokens["refresh_token"])
    ).scalar_one()
    assert record.revoked is False


def test_expired_access_token_is_rejected_on_me(api_client, seed_user):
    settings = get_settings()
    stale = TokenSigner(
        secret=settings.auth_jwt_secret,
        issuer=settings.auth_jwt_issuer,
        access_ttl=timedelta(seconds=-60),
        refresh_ttl=timedelta(days=7),
    ).issue_pair(seed_user.id, "O1", "R1", "a@x")

    response = api_client.get("/me", headers=_bearer(stale.access_token))

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"
    assert response.json()["message"] == "Token expired"


def test_logout_revokes_refresh_token(api_client, seed_user, login):
    tokens = login()

    response = api_client.post(
        "/auth/logout",
        json={"refresh_token": tokens["refresh_token"]},
        headers=_bearer(tokens["access_token"]),
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Logout successful"

    refresh = api_client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refresh.status_code == 401

    me = api_client.get("/me", headers=_bearer(tokens["access_token"]))
    assert me.status_code == 401
    assert me.json()["message"] == "Token revoked"


def test_logout_with_foreign_refresh_token_is_rejected(api_client, create_user, login):
    create_user()
    create_user(email="c@x", username="carol")
    alice = login()
    carol = login(email="c@x")

    response = api_client.post(
        "/auth/logout",
        json={"refresh_token": carol["refresh_token"]},
        headers=_bearer(alice["access_token"]),
    )

    assert response.status_code == 401


def test_revoke_all_invalidates_every_refresh_token(api_client, seed_user, login):
    first = login()
    second = login()

    response = api_client.post("/auth/revoke-all", headers=_bearer(second["access_token"]))
    assert response.status_code == 200
    assert response.json()["message"] == "All tokens revoked successfully"

    for tokens in (first, second):
        refresh = api_client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert refresh.status_code == 401


def test_protected_route_requires_authorization_header(api_client):
    missing = api_client.get("/me")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Authorization header required"

    malformed = api_client.get("/me", headers={"Authorization": "Token abc"})
    assert malformed.status_code == 401
    assert malformed.json()["message"] == "Invalid authorization header format"

    garbage = api_client.get("/me", headers=_bearer("abc.def.ghi"))
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid token"


def test_cleanup_expired_tokens_removes_revoked_records(api_client, seed_user, login, db):
    tokens = login()
    api_client.post("/auth/revoke-all", headers=_bearer(tokens["access_token"]))
    login()

    removed = cleanup_expired_tokens(db)

    assert removed == 1
    remaining = db.execute(select(RefreshToken)).scalars().all()
    assert len(remaining) == 1
    assert remaining[0].revoked is False
