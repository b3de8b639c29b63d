"""
Dépendance FastAPI d'authentification des joueurs.
Le jeton est lu depuis le cookie de session, sinon depuis Authorization: Bearer.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.player import Player
from app.services import player_auth


def get_player_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.PLAYER_SESSION_COOKIE)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_player(
    token: Optional[str] = Depends(get_player_token),
    db: Session = Depends(get_db),
) -> Player:
    """Retourne le joueur connecté ou lève 401."""
    player = player_auth.get_player_by_token(db, token) if token else None
    if player is None:
        raise HTTPException(status_code=401, detail="Non authentifié.")
    return player
