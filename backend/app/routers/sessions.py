"""
Router pour les sessions de jeu (admin).
CRUD complet et activation (une seule session active à la fois).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.game_session import SessionCreate, SessionResponse, SessionUpdate
from app.services import session_service

router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])


@router.post("", response_model=SessionResponse, status_code=201, summary="Créer une session")
def create_session(data: SessionCreate, db: Session = Depends(get_db)):
    """
    Crée une session de jeu inactive.
    Le mot-clé sert de mot de passe partagé pour la connexion des joueurs : il doit être unique.
    """
    try:
        return session_service.create_session(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("", response_model=List[SessionResponse], summary="Lister les sessions")
def list_sessions(db: Session = Depends(get_db)):
    return session_service.get_sessions(db)


@router.get("/{session_id}", response_model=SessionResponse, summary="Détail d'une session")
def get_session(session_id: uuid.UUID, db: Session = Depends(get_db)):
    game_session = session_service.get_session(db, session_id)
    if game_session is None:
        raise HTTPException(status_code=404, detail="Session introuvable.")
    return game_session


@router.put("/{session_id}", response_model=SessionResponse, summary="Modifier une session")
def update_session(session_id: uuid.UUID, data: SessionUpdate, db: Session = Depends(get_db)):
    """Met à jour les champs fournis. Les champs absents ne sont pas modifiés."""
    try:
        game_session = session_service.update_session(db, session_id, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if game_session is None:
        raise HTTPException(status_code=404, detail="Session introuvable.")
    return game_session


@router.delete("/{session_id}", status_code=204, summary="Supprimer une session")
def delete_session(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime la session avec ses étapes, équipes, joueurs et parcours."""
    if not session_service.delete_session(db, session_id):
        raise HTTPException(status_code=404, detail="Session introuvable.")


@router.post("/{session_id}/activate", response_model=SessionResponse, summary="Activer / désactiver une session")
def toggle_activation(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Bascule l'état actif de la session.
    Activer une session désactive toutes les autres.
    """
    game_session = session_service.toggle_activation(db, session_id)
    if game_session is None:
        raise HTTPException(status_code=404, detail="Session introuvable.")
    return game_session
