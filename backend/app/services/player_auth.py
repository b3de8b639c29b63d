"""
Connexion des joueurs par mot-clé de session + email.

Le login crée un jeton opaque (PlayerLogin) valable PLAYER_SESSION_HOURS.
Le jeton est lu depuis le cookie ou l'en-tête Authorization: Bearer par
la dépendance app.auth.get_current_player.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.game_session import GameSession
from app.models.player import Player, PlayerLogin
from app.models.team import Team
from app.schemas.player import PlayerLoginRequest, PlayerLoginResponse, PlayerMeResponse, PlayerResponse

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Mot-clé ou email invalide."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def login(db: Session, data: PlayerLoginRequest, now: Optional[datetime] = None) -> PlayerLoginResponse:
    """
    Authentifie un joueur.

    Lève ValueError :
    - INVALID_CREDENTIALS si le mot-clé ne correspond à aucune session active
      ou si l'email n'appartient à aucun joueur de cette session
    - "Vous n'êtes assigné à aucune équipe." si le joueur n'a pas d'équipe
    """
    now = now or _utcnow()

    game_session = db.execute(
        select(GameSession).where(
            GameSession.keyword == data.keyword,
            GameSession.is_active.is_(True),
        )
    ).scalar_one_or_none()
    if game_session is None:
        logger.info("Login refusé : mot-clé inconnu ou session inactive")
        raise ValueError(INVALID_CREDENTIALS)

    player = db.execute(
        select(Player).where(
            Player.session_id == game_session.id,
            Player.email == data.email.lower(),
        )
    ).scalar_one_or_none()
    if player is None:
        logger.info("Login refusé : email inconnu dans la session %s", game_session.id)
        raise ValueError(INVALID_CREDENTIALS)

    if player.team_id is None:
        raise ValueError("Vous n'êtes assigné à aucune équipe.")

    player_login = PlayerLogin(
        player_id=player.id,
        token=secrets.token_hex(32),
        expires_at=now + timedelta(hours=settings.PLAYER_SESSION_HOURS),
    )
    db.add(player_login)
    db.commit()

    logger.info("Joueur %s connecté à la session %s", player.id, game_session.id)
    return PlayerLoginResponse(
        token=player_login.token,
        expires_at=player_login.expires_at,
        player=PlayerResponse.model_validate(player),
        session_name=game_session.name,
    )


def get_player_by_token(db: Session, token: str, now: Optional[datetime] = None) -> Optional[Player]:
    """Retourne le joueur associé à un jeton valide, None si inconnu ou expiré."""
    if not token:
        return None
    now = now or _utcnow()
    return db.execute(
        select(Player)
        .join(PlayerLogin, PlayerLogin.player_id == Player.id)
        .where(PlayerLogin.token == token, PlayerLogin.expires_at > now)
    ).scalar_one_or_none()


def logout(db: Session, token: str) -> None:
    db.execute(delete(PlayerLogin).where(PlayerLogin.token == token))
    db.commit()


def purge_expired_logins(db: Session, now: Optional[datetime] = None) -> int:
    """Supprime les sessions joueurs expirées. Retourne le nombre de lignes supprimées."""
    now = now or _utcnow()
    result = db.execute(delete(PlayerLogin).where(PlayerLogin.expires_at <= now))
    db.commit()
    return result.rowcount


def get_player_profile(db: Session, player: Player) -> PlayerMeResponse:
    game_session = db.get(GameSession, player.session_id)
    team = db.get(Team, player.team_id) if player.team_id is not None else None
    return PlayerMeResponse(
        player=PlayerResponse.model_validate(player),
        team_name=team.name if team is not None else None,
        session_name=game_session.name,
        session_active=game_session.is_active,
    )
