"""
Router pour les parcours des équipes (admin).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.path import PathGenerateRequest, PathGenerationReport, PathStage, PathsStatusResponse
from app.services import path_service

router = APIRouter(prefix="/api/v1", tags=["Parcours"])


def _raise_for(e: ValueError):
    message = str(e)
    if "introuvable" in message:
        raise HTTPException(status_code=404, detail=message)
    if "existent déjà" in message:
        raise HTTPException(status_code=409, detail=message)
    raise HTTPException(status_code=400, detail=message)


@router.get("/sessions/{session_id}/paths", response_model=PathsStatusResponse,
            summary="État des parcours d'une session")
def get_paths_status(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Indique si les étapes permettent de générer des parcours, combien d'équipes
    en ont déjà un, et si chaque équipe peut recevoir un ordre distinct.
    """
    try:
        return path_service.get_paths_status(db, session_id)
    except ValueError as e:
        _raise_for(e)


@router.post("/sessions/{session_id}/paths", response_model=PathGenerationReport, status_code=201,
             summary="Générer les parcours des équipes")
def generate_paths(session_id: uuid.UUID, data: PathGenerateRequest, db: Session = Depends(get_db)):
    """
    Génère un parcours par équipe : départ, étapes intermédiaires dans un ordre
    propre à l'équipe, arrivée.

    Refusé si la session n'a pas d'équipe, si les étapes de départ/arrivée sont
    mal configurées, ou si des parcours existent et que `regenerate` est faux.
    """
    try:
        return path_service.generate_paths(db, session_id, regenerate=data.regenerate)
    except ValueError as e:
        _raise_for(e)


@router.delete("/sessions/{session_id}/paths", summary="Supprimer les parcours d'une session")
def delete_paths(session_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        deleted = path_service.delete_paths(db, session_id)
    except ValueError as e:
        _raise_for(e)
    return {"deleted": deleted}


@router.get("/teams/{team_id}/path", response_model=List[PathStage], summary="Parcours d'une équipe")
def get_team_path(team_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return path_service.get_team_path(db, team_id)
    except ValueError as e:
        _raise_for(e)
