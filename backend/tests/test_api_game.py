"""
Tests d'intégration API pour la connexion des joueurs et le jeu.
Testent les URLs, les codes HTTP, l'authentification et le format des réponses.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from app.schemas.game import GameActionResponse, GameStateResponse, TeamGameView
from app.schemas.player import PlayerLoginResponse, PlayerResponse
from app.services.game_service import HintCooldownError


# --- Helpers ---

def make_team_view(**kwargs) -> TeamGameView:
    return TeamGameView(
        id=kwargs.get("id", uuid.uuid4()),
        name="Équipe 1",
        current_stage=kwargs.get("current_stage", 0),
        hints_used_current_stage=kwargs.get("hints_used_current_stage", 0),
        last_hint_requested_at=None,
        started_at=kwargs.get("started_at", datetime.now(timezone.utc)),
        finished_at=None,
        gps_hint_enabled=False,
    )


def make_login_response() -> PlayerLoginResponse:
    return PlayerLoginResponse(
        token="a" * 64,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=24),
        player=PlayerResponse(
            id=uuid.uuid4(),
            session_id=uuid.uuid4(),
            team_id=uuid.uuid4(),
            first_name="Jean",
            last_name="Dupont",
            email="jean@test.be",
            created_at=datetime.now(),
        ),
        session_name="Chasse du printemps",
    )


# ============================================================
# POST /api/v1/player/login
# ============================================================

def test_login_succes_pose_le_cookie(client):
    with patch("app.routers.player.player_auth.login") as mock:
        mock.return_value = make_login_response()
        response = client.post("/api/v1/player/login", json={
            "email": "jean@test.be", "keyword": "printemps",
        })

    assert response.status_code == 200
    assert response.json()["token"] == "a" * 64
    assert response.cookies.get("player_session") == "a" * 64


def test_login_mot_cle_invalide(client):
    with patch("app.routers.player.player_auth.login") as mock:
        mock.side_effect = ValueError("Mot-clé ou email invalide.")
        response = client.post("/api/v1/player/login", json={
            "email": "jean@test.be", "keyword": "inconnu",
        })

    assert response.status_code == 401


def test_login_joueur_sans_equipe(client):
    with patch("app.routers.player.player_auth.login") as mock:
        mock.side_effect = ValueError("Vous n'êtes assigné à aucune équipe.")
        response = client.post("/api/v1/player/login", json={
            "email": "jean@test.be", "keyword": "printemps",
        })

    assert response.status_code == 403


def test_login_email_invalide(client):
    response = client.post("/api/v1/player/login", json={"email": "pas-un-email", "keyword": "abc"})
    assert response.status_code == 422


# ============================================================
# Authentification
# ============================================================

def test_jeu_sans_jeton_401(client):
    response = client.get("/api/v1/game")
    assert response.status_code == 401


def test_jeu_jeton_inconnu_401(client):
    with patch("app.auth.player_auth.get_player_by_token", return_value=None):
        response = client.get("/api/v1/game", headers={"Authorization": "Bearer inconnu"})
    assert response.status_code == 401


def test_jeu_jeton_bearer_accepte(client, current_player):
    with patch("app.auth.player_auth.get_player_by_token", return_value=current_player) as auth_mock, \
         patch("app.routers.game.game_service.get_game_state") as mock:
        mock.return_value = GameStateResponse(
            team=make_team_view(), total_stages=5, has_started=True, is_completed=False,
        )
        response = client.get("/api/v1/game", headers={"Authorization": "Bearer abc123"})

    assert response.status_code == 200
    assert auth_mock.call_args[0][1] == "abc123"


def test_logout_supprime_le_cookie(client):
    with patch("app.routers.player.player_auth.logout") as mock:
        response = client.post("/api/v1/player/logout", headers={"Authorization": "Bearer abc123"})

    assert response.status_code == 204
    mock.assert_called_once()


# ============================================================
# /api/v1/game
# ============================================================

def test_etat_du_jeu(player_client):
    with patch("app.routers.game.game_service.get_game_state") as mock:
        mock.return_value = GameStateResponse(
            team=make_team_view(current_stage=2), total_stages=5, has_started=True, is_completed=False,
        )
        response = player_client.get("/api/v1/game")

    assert response.status_code == 200
    assert response.json()["team"]["current_stage"] == 2
    assert response.json()["total_stages"] == 5


def test_etat_sans_equipe_403(player_client):
    with patch("app.routers.game.game_service.get_game_state") as mock:
        mock.side_effect = ValueError("Vous n'êtes assigné à aucune équipe.")
        response = player_client.get("/api/v1/game")

    assert response.status_code == 403


def test_demarrage(player_client):
    with patch("app.routers.game.game_service.start_game") as mock:
        mock.return_value = GameActionResponse(message="Partie commencée ! Bonne chance !", team=make_team_view())
        response = player_client.post("/api/v1/game/start")

    assert response.status_code == 200
    assert "commencée" in response.json()["message"]


def test_demarrage_deja_commence_400(player_client):
    with patch("app.routers.game.game_service.start_game") as mock:
        mock.side_effect = ValueError("Le jeu a déjà commencé.")
        response = player_client.post("/api/v1/game/start")

    assert response.status_code == 400


def test_code_correct(player_client):
    with patch("app.routers.game.game_service.submit_code") as mock:
        mock.return_value = GameActionResponse(
            message="Correct ! En route vers l'étape suivante !",
            team=make_team_view(current_stage=1),
        )
        response = player_client.post("/api/v1/game/code", json={"code": "  fontaine "})

    assert response.status_code == 200
    assert mock.call_args[0][2] == "fontaine"


def test_code_incorrect_400(player_client):
    with patch("app.routers.game.game_service.submit_code") as mock:
        mock.side_effect = ValueError("Code incorrect. Réessayez !")
        response = player_client.post("/api/v1/game/code", json={"code": "FAUX"})

    assert response.status_code == 400
    assert "incorrect" in response.json()["detail"].lower()


def test_code_vide_422(player_client):
    response = player_client.post("/api/v1/game/code", json={"code": "   "})
    assert response.status_code == 422


def test_code_conflit_409(player_client):
    with patch("app.routers.game.game_service.submit_code") as mock:
        mock.side_effect = ValueError("L'état de l'équipe a changé entre-temps (conflit). Rechargez le jeu.")
        response = player_client.post("/api/v1/game/code", json={"code": "B"})

    assert response.status_code == 409


def test_indice(player_client):
    with patch("app.routers.game.game_service.request_hint") as mock:
        mock.return_value = GameActionResponse(
            message="Indice 1 débloqué !", team=make_team_view(hints_used_current_stage=1),
            hint_number=1, hint_fr="Près de l'eau", hint_en="Near the water",
        )
        response = player_client.post("/api/v1/game/hint")

    assert response.status_code == 200
    assert response.json()["hint_number"] == 1
    assert response.json()["hint_fr"] == "Près de l'eau"


def test_indice_cooldown_400(player_client):
    with patch("app.routers.game.game_service.request_hint") as mock:
        mock.side_effect = HintCooldownError("Veuillez patienter encore 2:05 avant le prochain indice.", 125)
        response = player_client.post("/api/v1/game/hint")

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "2:05" in detail["message"]
    assert detail["remaining_seconds"] == 125
