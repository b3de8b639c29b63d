"""
Service métier pour les sessions de jeu.
Gère la création, la lecture, la modification, la suppression et l'activation.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.game_session import GameSession
from app.schemas.game_session import SessionCreate, SessionResponse, SessionUpdate

logger = logging.getLogger(__name__)


def require_session(db: Session, session_id: uuid.UUID) -> GameSession:
    """Retourne la session ou lève ValueError si elle n'existe pas."""
    game_session = db.get(GameSession, session_id)
    if game_session is None:
        raise ValueError(f"Session {session_id} introuvable.")
    return game_session


def create_session(db: Session, data: SessionCreate) -> SessionResponse:
    """
    Crée une session inactive.
    Lève ValueError si le mot-clé est déjà utilisé par une autre session.
    """
    game_session = GameSession(**data.model_dump(), is_active=False)
    db.add(game_session)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError(f"Le mot-clé '{data.keyword}' est déjà utilisé.")
    db.refresh(game_session)

    logger.info("Session créée : %s (%s)", game_session.name, game_session.id)
    return SessionResponse.model_validate(game_session)


def get_sessions(db: Session) -> list[SessionResponse]:
    """Retourne toutes les sessions, de la plus récente à la plus ancienne."""
    sessions = db.execute(
        select(GameSession).order_by(GameSession.created_at.desc())
    ).scalars().all()
    return [SessionResponse.model_validate(s) for s in sessions]


def get_session(db: Session, session_id: uuid.UUID) -> Optional[SessionResponse]:
    """Retourne une session par son ID, ou None si elle n'existe pas."""
    game_session = db.get(GameSession, session_id)
    if game_session is None:
        return None
    return SessionResponse.model_validate(game_session)


def update_session(db: Session, session_id: uuid.UUID, data: SessionUpdate) -> Optional[SessionResponse]:
    """Met à jour les champs fournis. Lève ValueError si le nouveau mot-clé est déjà pris."""
    game_session = db.get(GameSession, session_id)
    if game_session is None:
        return None

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(game_session, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Ce mot-clé est déjà utilisé.")
    db.refresh(game_session)
    return SessionResponse.model_validate(game_session)


def delete_session(db: Session, session_id: uuid.UUID) -> bool:
    """
    Supprime une session et, en cascade, ses étapes, équipes, joueurs et parcours.
    Retourne True si supprimée, False si introuvable.
    """
    game_session = db.get(GameSession, session_id)
    if game_session is None:
        return False

    db.delete(game_session)
    db.commit()
    logger.info("Session supprimée : %s", session_id)
    return True


def toggle_activation(db: Session, session_id: uuid.UUID) -> Optional[SessionResponse]:
    """
    Active ou désactive une session.
    Une seule session active à la fois : activer l'une désactive toutes les autres.
    """
    game_session = db.get(GameSession, session_id)
    if game_session is None:
        return None

    if game_session.is_active:
        game_session.is_active = False
    else:
        db.execute(
            update(GameSession)
            .where(GameSession.id != session_id)
            .values(is_active=False)
        )
        game_session.is_active = True

    db.commit()
    db.refresh(game_session)

    logger.info(
        "Session %s %s", session_id, "activée" if game_session.is_active else "désactivée"
    )
    return SessionResponse.model_validate(game_session)
