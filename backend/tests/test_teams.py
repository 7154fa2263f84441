from fastapi.testclient import TestClient


def test_create_and_get_team(client: TestClient):
    response = client.post("/api/teams", json={"name": "  Falcons "})
    assert response.status_code == 201
    team = response.json()
    assert team["name"] == "Falcons"

    assert client.get(f"/api/teams/{team['id']}").json()["name"] == "Falcons"
    assert client.get("/api/teams/9999").status_code == 404


def test_duplicate_team_name(client: TestClient):
    client.post("/api/teams", json={"name": "Falcons"})
    response = client.post("/api/teams", json={"name": "Falcons"})
    assert response.status_code == 409


def test_blank_team_name(client: TestClient):
    assert client.post("/api/teams", json={"name": "   "}).status_code == 422


def test_list_teams_in_id_order(client: TestClient):
    for name in ("Falcons", "Hawks", "Owls"):
        client.post("/api/teams", json={"name": name})

    assert [t["name"] for t in client.get("/api/teams").json()] == ["Falcons", "Hawks", "Owls"]


def test_rename_team(client: TestClient):
    falcons = client.post("/api/teams", json={"name": "Falcons"}).json()
    client.post("/api/teams", json={"name": "Hawks"})

    response = client.patch(f"/api/teams/{falcons['id']}", json={"name": "Eagles"})
    assert response.status_code == 200
    assert response.json()["name"] == "Eagles"

    assert client.patch(f"/api/teams/{falcons['id']}", json={"name": "Hawks"}).status_code == 409
    # Renaming to its own name is not a conflict
    assert client.patch(f"/api/teams/{falcons['id']}", json={"name": "Eagles"}).status_code == 200


def test_delete_team_refused_while_enrolled(client: TestClient):
    team = client.post("/api/teams", json={"name": "Falcons"}).json()
    tournament = client.post(
        "/api/tournaments",
        json={"name": "Cup", "type": "ROUND_ROBIN", "max_teams": 4, "start_date": "2026-03-14T09:00:00"},
    ).json()
    client.post(f"/api/tournaments/{tournament['id']}/teams", json={"team_id": team["id"]})

    assert client.delete(f"/api/teams/{team['id']}").status_code == 409

    client.delete(f"/api/tournaments/{tournament['id']}/teams/{team['id']}")
    assert client.delete(f"/api/teams/{team['id']}").status_code == 204
    assert client.get(f"/api/teams/{team['id']}").status_code == 404


def test_delete_team_refused_while_in_stored_matches(client: TestClient):
    falcons = client.post("/api/teams", json={"name": "Falcons"}).json()
    hawks = client.post("/api/teams", json={"name": "Hawks"}).json()
    tournament = client.post(
        "/api/tournaments",
        json={"name": "Cup", "type": "ROUND_ROBIN", "max_teams": 4, "start_date": "2026-03-14T09:00:00"},
    ).json()
    for team in (falcons, hawks):
        client.post(f"/api/tournaments/{tournament['id']}/teams", json={"team_id": team["id"]})
    client.post(f"/api/tournaments/{tournament['id']}/generate")

    # Withdrawing does not regenerate, so the match still points at Falcons
    assert client.delete(f"/api/tournaments/{tournament['id']}/teams/{falcons['id']}").status_code == 204
    response = client.delete(f"/api/teams/{falcons['id']}")
    assert response.status_code == 409
    assert "regenerate" in response.json()["detail"]

    assert client.get(f"/api/teams/{falcons['id']}").status_code == 200
    matches = client.get(f"/api/tournaments/{tournament['id']}/matches").json()
    assert [(m["team1_id"], m["team2_id"]) for m in matches] == [(falcons["id"], hawks["id"])]

    # Regenerating without Falcons releases it
    client.post(f"/api/tournaments/{tournament['id']}/generate")
    assert client.delete(f"/api/teams/{falcons['id']}").status_code == 204


def test_team_writes_require_login(anon_client: TestClient):
    assert anon_client.post("/api/teams", json={"name": "Falcons"}).status_code == 401
    assert anon_client.patch("/api/teams/1", json={"name": "Hawks"}).status_code == 401
    assert anon_client.delete("/api/teams/1").status_code == 401
    assert anon_client.get("/api/teams").status_code == 200
