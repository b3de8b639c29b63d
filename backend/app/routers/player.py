"""
Router de connexion des joueurs (mot-clé de session + email).
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.auth import get_current_player, get_player_token
from app.config import settings
from app.database import get_db
from app.models.player import Player
from app.schemas.player import PlayerLoginRequest, PlayerLoginResponse, PlayerMeResponse
from app.services import player_auth

router = APIRouter(prefix="/api/v1/player", tags=["Joueur"])


@router.post("/login", response_model=PlayerLoginResponse, summary="Connexion d'un joueur")
def login(data: PlayerLoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Connecte un joueur avec le mot-clé de la session active et son email.
    Le jeton est retourné dans le corps et posé en cookie HTTP-only.
    """
    try:
        result = player_auth.login(db, data)
    except ValueError as e:
        message = str(e)
        status = 403 if "aucune équipe" in message else 401
        raise HTTPException(status_code=status, detail=message)

    response.set_cookie(
        key=settings.PLAYER_SESSION_COOKIE,
        value=result.token,
        max_age=settings.PLAYER_SESSION_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.ENV == "production",
    )
    return result


@router.get("/me", response_model=PlayerMeResponse, summary="Joueur connecté")
def me(player: Player = Depends(get_current_player), db: Session = Depends(get_db)):
    return player_auth.get_player_profile(db, player)


@router.post("/logout", status_code=204, summary="Déconnexion")
def logout(
    response: Response,
    token: str = Depends(get_player_token),
    db: Session = Depends(get_db),
):
    """Révoque le jeton courant et supprime le cookie. Sans effet si aucun jeton."""
    if token:
        player_auth.logout(db, token)
    response.delete_cookie(settings.PLAYER_SESSION_COOKIE)
