"""
Router pour les équipes.

Routes par session : listage, création, génération automatique, suivi en direct.
Routes par équipe : détail, modification, suppression, composition, indice GPS.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.team import (
    GpsHintToggle,
    TeamCreate,
    TeamGenerateRequest,
    TeamGenerationReport,
    TeamPlayersAssign,
    TeamProgressSummary,
    TeamResponse,
    TeamUpdate,
)
from app.services import team_service

router = APIRouter(prefix="/api/v1/sessions/{session_id}/teams", tags=["Équipes"])
teams_router = APIRouter(prefix="/api/v1/teams", tags=["Équipes"])


def _raise_for(e: ValueError):
    message = str(e)
    status = 404 if "introuvable" in message else 400
    raise HTTPException(status_code=status, detail=message)


@router.get("", response_model=List[TeamResponse], summary="Lister les équipes d'une session")
def list_teams(session_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return team_service.list_teams(db, session_id)
    except ValueError as e:
        _raise_for(e)


@router.post("", response_model=TeamResponse, status_code=201, summary="Créer une équipe")
def create_team(session_id: uuid.UUID, data: TeamCreate, db: Session = Depends(get_db)):
    try:
        return team_service.create_team(db, session_id, data)
    except ValueError as e:
        _raise_for(e)


@router.post("/generate", response_model=TeamGenerationReport, status_code=201,
             summary="Générer les équipes automatiquement")
def generate_teams(session_id: uuid.UUID, data: TeamGenerateRequest, db: Session = Depends(get_db)):
    """
    Répartit les joueurs non assignés en équipes de `team_size` joueurs,
    par ordre alphabétique ou aléatoirement. Le dernier groupe peut être incomplet.
    """
    try:
        return team_service.generate_teams(db, session_id, data)
    except ValueError as e:
        _raise_for(e)


@router.get("/progress", response_model=List[TeamProgressSummary], summary="Suivi en direct des équipes")
def get_progress(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Étape courante, nombre d'étapes et statut de chaque équipe."""
    try:
        return team_service.get_session_progress(db, session_id)
    except ValueError as e:
        _raise_for(e)


@teams_router.get("/{team_id}", response_model=TeamResponse, summary="Détail d'une équipe")
def get_team(team_id: uuid.UUID, db: Session = Depends(get_db)):
    team = team_service.get_team(db, team_id)
    if team is None:
        raise HTTPException(status_code=404, detail="Équipe introuvable.")
    return team


@teams_router.put("/{team_id}", response_model=TeamResponse, summary="Modifier une équipe")
def update_team(team_id: uuid.UUID, data: TeamUpdate, db: Session = Depends(get_db)):
    team = team_service.update_team(db, team_id, data)
    if team is None:
        raise HTTPException(status_code=404, detail="Équipe introuvable.")
    return team


@teams_router.delete("/{team_id}", status_code=204, summary="Supprimer une équipe")
def delete_team(team_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime l'équipe et son parcours. Ses joueurs redeviennent non assignés."""
    if not team_service.delete_team(db, team_id):
        raise HTTPException(status_code=404, detail="Équipe introuvable.")


@teams_router.put("/{team_id}/players", response_model=TeamResponse, summary="Définir les joueurs d'une équipe")
def assign_players(team_id: uuid.UUID, data: TeamPlayersAssign, db: Session = Depends(get_db)):
    """Remplace la composition de l'équipe. Les joueurs retirés redeviennent non assignés."""
    try:
        return team_service.assign_players(db, team_id, data)
    except ValueError as e:
        _raise_for(e)


@teams_router.post("/{team_id}/gps-hint", response_model=TeamResponse, summary="Activer / désactiver l'indice GPS")
def set_gps_hint(team_id: uuid.UUID, data: GpsHintToggle, db: Session = Depends(get_db)):
    team = team_service.set_gps_hint(db, team_id, data.enabled)
    if team is None:
        raise HTTPException(status_code=404, detail="Équipe introuvable.")
    return team
