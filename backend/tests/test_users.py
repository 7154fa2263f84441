"""
Tests for accounts and bearer tokens:
- the first account is admin, later ones are not
- login issues a token; logout and expiry revoke it
- admin-only user management
"""

from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from tourney.models.user import AccessToken, User
from tests.conftest import ADMIN_USERNAME, auth_headers


def register(client: TestClient, username: str, password: str):
    response = client.post("/api/users/register", json={"username": username, "password": password})
    assert response.status_code == 201
    return response.json()


# ============================================================================
# Registration and login
# ============================================================================


def test_first_account_is_admin(anon_client: TestClient):
    assert register(anon_client, "alice", "alice-password")["admin"] is True
    assert register(anon_client, "bob", "bob-password")["admin"] is False


def test_register_validation(anon_client: TestClient):
    too_short = [{"username": "al", "password": "long-enough"}, {"username": "alice", "password": "short"}]
    for body in too_short:
        assert anon_client.post("/api/users/register", json=body).status_code == 422

    register(anon_client, "alice", "alice-password")
    response = anon_client.post("/api/users/register", json={"username": "alice", "password": "other-password"})
    assert response.status_code == 409


def test_password_is_stored_hashed(anon_client: TestClient, session: Session):
    assert "password_hash" not in register(anon_client, "alice", "alice-password")

    user = session.exec(select(User).where(User.username == "alice")).one()
    assert user.password_hash != "alice-password"


def test_login_and_me(anon_client: TestClient, session: Session):
    register(anon_client, "alice", "alice-password")

    response = anon_client.post("/api/users/login", json={"username": "alice", "password": "alice-password"})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"

    # Only a digest of the token is kept
    stored = session.exec(select(AccessToken)).one()
    assert stored.token_hash != data["access_token"]

    me = anon_client.get("/api/users/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_login_wrong_password(anon_client: TestClient):
    register(anon_client, "alice", "alice-password")

    response = anon_client.post("/api/users/login", json={"username": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    response = anon_client.post("/api/users/login", json={"username": "nobody", "password": "alice-password"})
    assert response.status_code == 401


def test_missing_or_unknown_token(anon_client: TestClient):
    assert anon_client.get("/api/users/me").status_code == 401

    response = anon_client.get("/api/users/me", headers={"Authorization": "Bearer not-a-real-token"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_logout_revokes_token(anon_client: TestClient):
    register(anon_client, "alice", "alice-password")
    headers = auth_headers(anon_client, "alice", "alice-password")

    assert anon_client.post("/api/users/logout", headers=headers).status_code == 200
    assert anon_client.get("/api/users/me", headers=headers).status_code == 401


def test_expired_token_is_rejected_and_removed(anon_client: TestClient, session: Session):
    register(anon_client, "alice", "alice-password")
    headers = auth_headers(anon_client, "alice", "alice-password")

    stored = session.exec(select(AccessToken)).one()
    stored.expires_at = datetime.utcnow() - timedelta(minutes=1)
    session.add(stored)
    session.commit()

    assert anon_client.get("/api/users/me", headers=headers).status_code == 401
    session.expire_all()
    assert session.exec(select(AccessToken)).all() == []


def test_change_password(anon_client: TestClient):
    register(anon_client, "alice", "alice-password")
    headers = auth_headers(anon_client, "alice", "alice-password")

    same = {"old_password": "alice-password", "new_password": "alice-password"}
    assert anon_client.patch("/api/users/me", json=same, headers=headers).status_code == 400
    wrong = {"old_password": "wrong-password", "new_password": "new-password"}
    assert anon_client.patch("/api/users/me", json=wrong, headers=headers).status_code == 400

    change = {"old_password": "alice-password", "new_password": "new-password"}
    assert anon_client.patch("/api/users/me", json=change, headers=headers).status_code == 200

    old = {"username": "alice", "password": "alice-password"}
    assert anon_client.post("/api/users/login", json=old).status_code == 401
    auth_headers(anon_client, "alice", "new-password")


# ============================================================================
# Admin-only routes
# ============================================================================


def test_non_admin_cannot_write_tournaments(client: TestClient):
    register(client, "scorer", "scorer-password")
    scorer = auth_headers(client, "scorer", "scorer-password")

    tournament = {"name": "Cup", "type": "ROUND_ROBIN", "max_teams": 4, "start_date": "2026-03-14T09:00:00"}
    assert client.post("/api/tournaments", json=tournament, headers=scorer).status_code == 403
    assert client.post("/api/tournaments", json=tournament).status_code == 201

    # Any logged-in account may manage teams
    assert client.post("/api/teams", json={"name": "Falcons"}, headers=scorer).status_code == 201


def test_admin_promotes_user(client: TestClient):
    scorer = register(client, "scorer", "scorer-password")
    scorer_headers = auth_headers(client, "scorer", "scorer-password")

    assert client.patch(f"/api/users/{scorer['id']}", json={"admin": True}, headers=scorer_headers).status_code == 403

    response = client.patch(f"/api/users/{scorer['id']}", json={"admin": True})
    assert response.status_code == 200
    assert response.json()["admin"] is True

    tournament = {"name": "Cup", "type": "ROUND_ROBIN", "max_teams": 4, "start_date": "2026-03-14T09:00:00"}
    assert client.post("/api/tournaments", json=tournament, headers=scorer_headers).status_code == 201


def test_admin_cannot_demote_or_delete_self(client: TestClient):
    me = client.get("/api/users/me").json()
    assert me["username"] == ADMIN_USERNAME

    assert client.patch(f"/api/users/{me['id']}", json={"admin": False}).status_code == 403
    assert client.delete(f"/api/users/{me['id']}").status_code == 403


def test_admin_deletes_user_and_tokens(client: TestClient, session: Session):
    scorer = register(client, "scorer", "scorer-password")
    scorer_headers = auth_headers(client, "scorer", "scorer-password")

    assert client.delete(f"/api/users/{scorer['id']}").status_code == 204
    assert client.get(f"/api/users/{scorer['id']}").status_code == 404
    assert client.get("/api/users/me", headers=scorer_headers).status_code == 401

    session.expire_all()
    assert session.exec(select(AccessToken).where(AccessToken.user_id == scorer["id"])).all() == []
    assert client.delete("/api/users/9999").status_code == 404


def test_list_users(client: TestClient):
    register(client, "scorer", "scorer-password")

    assert [u["username"] for u in client.get("/api/users").json()] == [ADMIN_USERNAME, "scorer"]
    assert client.get("/api/users/1").json()["username"] == ADMIN_USERNAME
    assert client.get("/api/users/9999").status_code == 404
