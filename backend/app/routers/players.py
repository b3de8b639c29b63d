"""
Router pour les joueurs d'une session.
Import CSV (POST /api/v1/sessions/{id}/players/upload)
Listage, création manuelle, mise à jour et suppression.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.game_session import GameSession
from app.models.player import Player
from app.models.team import Team
from app.schemas.player import PlayerCreate, PlayerImportReport, PlayerResponse, PlayerUpdate
from app.services.player_import import parse_and_import_csv

router = APIRouter(prefix="/api/v1/sessions/{session_id}/players", tags=["Joueurs"])


def _get_session_or_404(db: Session, session_id: uuid.UUID) -> GameSession:
    game_session = db.get(GameSession, session_id)
    if game_session is None:
        raise HTTPException(status_code=404, detail="Session introuvable.")
    return game_session


def _get_player_or_404(db: Session, session_id: uuid.UUID, player_id: uuid.UUID) -> Player:
    player = db.get(Player, player_id)
    if player is None or player.session_id != session_id:
        raise HTTPException(status_code=404, detail="Joueur introuvable.")
    return player


def _check_team(db: Session, session_id: uuid.UUID, team_id: uuid.UUID) -> None:
    team = db.get(Team, team_id)
    if team is None or team.session_id != session_id:
        raise HTTPException(status_code=400, detail="Équipe inconnue dans cette session.")


@router.get("", response_model=List[PlayerResponse], summary="Lister les joueurs d'une session")
def list_players(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Retourne les joueurs triés alphabétiquement par nom puis prénom."""
    _get_session_or_404(db, session_id)
    players = db.execute(
        select(Player)
        .where(Player.session_id == session_id)
        .order_by(Player.last_name, Player.first_name)
    ).scalars().all()
    return players


@router.post("", response_model=PlayerResponse, status_code=201, summary="Créer un joueur manuellement")
def create_player(session_id: uuid.UUID, data: PlayerCreate, db: Session = Depends(get_db)):
    """Crée un joueur (hors import CSV). L'email est unique dans la session."""
    _get_session_or_404(db, session_id)
    if data.team_id is not None:
        _check_team(db, session_id, data.team_id)

    player = Player(
        session_id=session_id,
        team_id=data.team_id,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
    )
    db.add(player)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Un joueur avec cet email existe déjà dans la session.")
    db.refresh(player)
    return player


@router.put("/{player_id}", response_model=PlayerResponse, summary="Modifier un joueur")
def update_player(
    session_id: uuid.UUID,
    player_id: uuid.UUID,
    data: PlayerUpdate,
    db: Session = Depends(get_db),
):
    """Met à jour les champs fournis d'un joueur. Les champs absents ne sont pas modifiés."""
    player = _get_player_or_404(db, session_id, player_id)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("team_id") is not None:
        _check_team(db, session_id, update_data["team_id"])

    for field, value in update_data.items():
        setattr(player, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Un joueur avec cet email existe déjà dans la session.")
    db.refresh(player)
    return player


@router.delete("/{player_id}", status_code=204, summary="Supprimer un joueur")
def delete_player(session_id: uuid.UUID, player_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime définitivement un joueur et ses sessions de connexion."""
    player = _get_player_or_404(db, session_id, player_id)
    db.delete(player)
    db.commit()


ALLOWED_CONTENT_TYPES = {"text/csv", "text/plain", "application/vnd.ms-excel"}
MAX_FILE_SIZE_MB = 5


@router.post("/upload", response_model=PlayerImportReport, summary="Importer des joueurs via CSV")
async def upload_players(
    session_id: uuid.UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """
    Importe une liste de joueurs depuis un fichier CSV.

    Format attendu du CSV :
    - Colonnes obligatoires : `nom`, `prenom`, `email`
    - Séparateur : virgule (`,`) ou point-virgule (`;`)
    - Encodage : UTF-8 (avec ou sans BOM)

    Retourne un rapport détaillant les insertions et les rejets.
    """
    _get_session_or_404(db, session_id)

    if file.content_type not in ALLOWED_CONTENT_TYPES and not (file.filename or "").endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail="Format invalide. Seuls les fichiers CSV sont acceptés."
        )

    content = await file.read()

    if len(content) > MAX_FILE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Fichier trop volumineux. Taille maximale : {MAX_FILE_SIZE_MB} Mo."
        )

    if not content:
        raise HTTPException(status_code=400, detail="Le fichier CSV est vide.")

    try:
        return parse_and_import_csv(content, db, session_id)
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Encodage invalide. Le fichier doit être en UTF-8.")
