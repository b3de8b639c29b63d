"""
Router du jeu côté joueur : état, démarrage, validation de code, indices.
Toutes les routes exigent un joueur connecté (cookie ou Bearer).
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth import get_current_player
from app.database import get_db
from app.models.player import Player
from app.schemas.game import CodeSubmission, GameActionResponse, GameStateResponse
from app.services import game_service

router = APIRouter(prefix="/api/v1/game", tags=["Jeu"])


def _raise_for(e: ValueError):
    message = str(e)
    if isinstance(e, game_service.HintCooldownError):
        raise HTTPException(
            status_code=400,
            detail={"message": message, "remaining_seconds": e.remaining_seconds},
        )
    if "aucune équipe" in message:
        raise HTTPException(status_code=403, detail=message)
    if "introuvable" in message:
        raise HTTPException(status_code=404, detail=message)
    if "conflit" in message:
        raise HTTPException(status_code=409, detail=message)
    raise HTTPException(status_code=400, detail=message)


@router.get("", response_model=GameStateResponse, summary="État du jeu de l'équipe")
def get_game_state(player: Player = Depends(get_current_player), db: Session = Depends(get_db)):
    """
    Retourne l'avancement de l'équipe, l'étape actuelle, l'étape à trouver
    (énigme et indices déjà débloqués, jamais le code) et le message de victoire
    une fois la chasse terminée.
    """
    try:
        return game_service.get_game_state(db, player)
    except ValueError as e:
        _raise_for(e)


@router.post("/start", response_model=GameActionResponse, summary="Commencer la partie")
def start_game(player: Player = Depends(get_current_player), db: Session = Depends(get_db)):
    try:
        return game_service.start_game(db, player)
    except ValueError as e:
        _raise_for(e)


@router.post("/code", response_model=GameActionResponse, summary="Valider le code d'une étape")
def submit_code(
    data: CodeSubmission,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Code correct : l'équipe passe à l'étape suivante. Code incorrect : 400, aucun changement."""
    try:
        return game_service.submit_code(db, player, data.code)
    except ValueError as e:
        _raise_for(e)


@router.post("/hint", response_model=GameActionResponse, summary="Demander un indice")
def request_hint(player: Player = Depends(get_current_player), db: Session = Depends(get_db)):
    """3 indices maximum par étape, 3 minutes minimum entre deux indices."""
    try:
        return game_service.request_hint(db, player)
    except ValueError as e:
        _raise_for(e)
