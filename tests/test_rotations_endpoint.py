import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from ladder.models.court_rotation import CourtRotation

LEAGUE = {
    "name": "Rotation Test League",
    "timezone": "America/Chicago",
    "start_date": "2025-04-01",
    "end_date": "2025-04-30",
    "play_day": 3,
    "start_time": "09:00:00",
    "end_time": "11:00:00",
    "games_per_match": 6,
    "games_per_rotation": 2,
}


def _roster(*names):
    return [{"id": n, "first_name": n.upper(), "last_name": "Test", "rating": 3.0} for n in names]


@pytest.fixture
def game_day(client: TestClient):
    """Create a league and return (league_id, first game day id)"""
    league = client.post("/api/leagues", json=LEAGUE).json()
    days = client.get(f"/api/leagues/{league['id']}/game-days").json()
    return league["id"], days[0]["id"]


def _rotations_url(league_id, game_day_id):
    return f"/api/leagues/{league_id}/game-days/{game_day_id}/rotations"


def _court_url(league_id, game_day_id, court):
    return f"/api/leagues/{league_id}/game-days/{game_day_id}/courts/{court}/rotations"


def test_generate_and_read_back(game_day, client: TestClient):
    league_id, game_day_id = game_day
    body = {"assignments": {"1": _roster("a", "b", "c", "d"), "unassigned": _roster("z")}}

    response = client.post(_rotations_url(league_id, game_day_id), json=body)
    assert response.status_code == 200
    assert response.json()["courts"] == {"1": 6}

    games = client.get(_court_url(league_id, game_day_id, 1)).json()
    assert [g["game_number"] for g in games] == [1, 2, 3, 4, 5, 6]
    assert [g["rotation_number"] for g in games] == [1, 1, 2, 2, 3, 3]
    assert [p["id"] for p in games[0]["team1"]] == ["a", "d"]
    assert games[0]["team1"][0]["first_name"] == "A"
    assert games[0]["sitting_out_player_id"] is None


def test_sit_out_court(game_day, client: TestClient):
    league_id, game_day_id = game_day
    body = {
        "assignments": {"2": _roster("a", "b", "c", "d", "e")},
        "games_per_match": 4,
        "games_per_rotation": 1,
    }
    response = client.post(_rotations_url(league_id, game_day_id), json=body)
    assert response.status_code == 200

    games = client.get(_court_url(league_id, game_day_id, 2)).json()
    assert [g["sitting_out_player_id"] for g in games] == ["a", "b", "c", "d"]


def test_regeneration_replaces_not_appends(game_day, client: TestClient, session: Session):
    league_id, game_day_id = game_day
    url = _rotations_url(league_id, game_day_id)

    client.post(url, json={"assignments": {"1": _roster("a", "b", "c", "d")}})
    client.post(url, json={"assignments": {"1": _roster("e", "f", "g", "h")}, "games_per_match": 3, "games_per_rotation": 1})

    rows = session.exec(
        select(CourtRotation).where(CourtRotation.game_day_id == game_day_id, CourtRotation.court_number == 1)
    ).all()
    assert len(rows) == 3
    assert {r.team1_player1_id for r in rows} == {"e"}


def test_regenerating_one_court_keeps_others(game_day, client: TestClient):
    league_id, game_day_id = game_day
    url = _rotations_url(league_id, game_day_id)

    client.post(url, json={"assignments": {"1": _roster("a", "b", "c", "d"), "2": _roster("e", "f", "g", "h")}})
    client.post(url, json={"assignments": {"2": _roster("i", "j", "k", "l")}})

    court1 = client.get(_court_url(league_id, game_day_id, 1)).json()
    court2 = client.get(_court_url(league_id, game_day_id, 2)).json()
    assert court1[0]["team1"][0]["id"] == "a"
    assert court2[0]["team1"][0]["id"] == "i"


def test_invalid_court_leaves_storage_untouched(game_day, client: TestClient):
    league_id, game_day_id = game_day
    url = _rotations_url(league_id, game_day_id)

    client.post(url, json={"assignments": {"1": _roster("a", "b", "c", "d")}})
    response = client.post(url, json={"assignments": {"1": _roster("e", "f", "g", "h"), "2": _roster("x", "y", "z")}})
    assert response.status_code == 422
    assert "at least 4 players" in response.json()["detail"]

    games = client.get(_court_url(league_id, game_day_id, 1)).json()
    assert len(games) == 6
    assert games[0]["team1"][0]["id"] == "a"


def test_court_keys_naming_the_same_court_rejected(game_day, client: TestClient):
    league_id, game_day_id = game_day
    response = client.post(
        _rotations_url(league_id, game_day_id),
        json={"assignments": {"3": _roster("a", "b", "c", "d"), "03": _roster("e", "f", "g", "h")}},
    )
    assert response.status_code == 422
    assert "more than once" in response.json()["detail"]
    assert client.get(_court_url(league_id, game_day_id, 3)).json() == []


def test_finalize_game_day(game_day, client: TestClient):
    league_id, game_day_id = game_day
    response = client.post(f"/api/leagues/{league_id}/game-days/{game_day_id}/finalize")
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == game_day_id
    assert body["is_finalized"] is True
    assert body["status"] == "completed"

    days = client.get(f"/api/leagues/{league_id}/game-days").json()
    assert [d["is_finalized"] for d in days] == [True, False, False, False]


def test_finalize_is_idempotent(game_day, client: TestClient):
    league_id, game_day_id = game_day
    url = f"/api/leagues/{league_id}/game-days/{game_day_id}/finalize"
    first = client.post(url).json()
    second = client.post(url)
    assert second.status_code == 200
    assert second.json() == first


def test_finalize_unknown_game_day(game_day, client: TestClient):
    league_id, _ = game_day
    response = client.post(f"/api/leagues/{league_id}/game-days/999999/finalize")
    assert response.status_code == 404


def test_finalized_game_day_keeps_its_rotations(game_day, client: TestClient):
    league_id, game_day_id = game_day
    url = _rotations_url(league_id, game_day_id)
    client.post(url, json={"assignments": {"1": _roster("a", "b", "c", "d")}})
    client.post(f"/api/leagues/{league_id}/game-days/{game_day_id}/finalize")

    response = client.post(url, json={"assignments": {"1": _roster("e", "f", "g", "h")}})
    assert response.status_code == 409

    games = client.get(_court_url(league_id, game_day_id, 1)).json()
    assert games[0]["team1"][0]["id"] == "a"
    assert "team1_score" not in games[0]


def test_zero_games_per_match_rejected(game_day, client: TestClient):
    league_id, game_day_id = game_day
    response = client.post(
        _rotations_url(league_id, game_day_id),
        json={"assignments": {"1": _roster("a", "b", "c", "d")}, "games_per_match": 0},
    )
    assert response.status_code == 422


def test_unknown_game_day(game_day, client: TestClient):
    league_id, _ = game_day
    response = client.post(_rotations_url(league_id, 999999), json={"assignments": {}})
    assert response.status_code == 404


def test_game_day_regeneration_clears_its_rotations(game_day, client: TestClient, session: Session):
    league_id, game_day_id = game_day
    client.post(_rotations_url(league_id, game_day_id), json={"assignments": {"1": _roster("a", "b", "c", "d")}})

    response = client.put(f"/api/leagues/{league_id}", json={"start_time": "08:00:00"})
    assert response.status_code == 200

    rows = session.exec(select(CourtRotation).where(CourtRotation.game_day_id == game_day_id)).all()
    assert rows == []


class TestEnginePreview:

    def test_preview_sessions(self, client: TestClient):
        response = client.post(
            "/api/engine/sessions",
            json={
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
                "weekday": 2,
                "session_start": "18:00",
                "session_end": "20:00",
                "timezone": "America/New_York",
            },
        )
        assert response.status_code == 200
        sessions = response.json()
        assert len(sessions) == 4
        assert sessions[0]["start_instant"] == "2025-01-07T23:00:00Z"

    def test_preview_sessions_invalid_window(self, client: TestClient):
        response = client.post(
            "/api/engine/sessions",
            json={
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
                "weekday": 2,
                "session_start": "20:00",
                "session_end": "18:00",
            },
        )
        assert response.status_code == 422

    def test_preview_sessions_unknown_timezone(self, client: TestClient):
        response = client.post(
            "/api/engine/sessions",
            json={
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
                "weekday": 2,
                "session_start": "18:00",
                "session_end": "20:00",
                "timezone": "Nowhere/Special",
            },
        )
        assert response.status_code == 422

    def test_preview_rotations(self, client: TestClient):
        response = client.post(
            "/api/engine/rotations",
            json={"roster": _roster("a", "b", "c", "d", "e"), "games_per_match": 4, "games_per_rotation": 1},
        )
        assert response.status_code == 200
        games = response.json()
        assert [[p["id"] for p in g["team1"]] for g in games] == [["b", "e"], ["a", "e"], ["a", "e"], ["a", "e"]]

    def test_preview_rotations_too_few_players(self, client: TestClient):
        response = client.post(
            "/api/engine/rotations",
            json={"roster": _roster("a", "b", "c"), "games_per_match": 4, "games_per_rotation": 1},
        )
        assert response.status_code == 422
