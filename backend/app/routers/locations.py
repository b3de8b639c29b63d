"""
Router pour les étapes (lieux) d'une session.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.location import LocationCreate, LocationResponse, LocationUpdate
from app.services import location_service

router = APIRouter(prefix="/api/v1/sessions/{session_id}/locations", tags=["Étapes"])


def _raise_for(e: ValueError):
    message = str(e)
    if "introuvable" in message:
        raise HTTPException(status_code=404, detail=message)
    if "déjà utilisé" in message:
        raise HTTPException(status_code=409, detail=message)
    raise HTTPException(status_code=400, detail=message)


@router.get("", response_model=List[LocationResponse], summary="Lister les étapes d'une session")
def list_locations(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Retourne les étapes triées par order_index."""
    try:
        return location_service.list_locations(db, session_id)
    except ValueError as e:
        _raise_for(e)


@router.post("", response_model=LocationResponse, status_code=201, summary="Créer une étape")
def create_location(session_id: uuid.UUID, data: LocationCreate, db: Session = Depends(get_db)):
    """
    Crée une étape. Le code est converti en majuscules et doit être unique dans la session.
    Marquer l'étape comme départ (ou arrivée) retire ce marquage des autres étapes.
    """
    try:
        return location_service.create_location(db, session_id, data)
    except ValueError as e:
        _raise_for(e)


@router.get("/{location_id}", response_model=LocationResponse, summary="Détail d'une étape")
def get_location(session_id: uuid.UUID, location_id: uuid.UUID, db: Session = Depends(get_db)):
    location = location_service.get_location(db, session_id, location_id)
    if location is None:
        raise HTTPException(status_code=404, detail="Étape introuvable.")
    return location


@router.put("/{location_id}", response_model=LocationResponse, summary="Modifier une étape")
def update_location(
    session_id: uuid.UUID,
    location_id: uuid.UUID,
    data: LocationUpdate,
    db: Session = Depends(get_db),
):
    try:
        location = location_service.update_location(db, session_id, location_id, data)
    except ValueError as e:
        _raise_for(e)
    if location is None:
        raise HTTPException(status_code=404, detail="Étape introuvable.")
    return location


@router.delete("/{location_id}", status_code=204, summary="Supprimer une étape")
def delete_location(session_id: uuid.UUID, location_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime l'étape. Les parcours qui la contiennent doivent être régénérés."""
    if not location_service.delete_location(db, session_id, location_id):
        raise HTTPException(status_code=404, detail="Étape introuvable.")
