"""
Service métier pour les étapes d'une session.

Invariants maintenus ici :
- code unique au sein d'une session
- au plus une étape de départ et une étape finale par session
  (marquer une étape comme départ retire le drapeau des autres, idem arrivée)
- une étape n'est jamais à la fois départ et arrivée
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.location import Location
from app.schemas.location import LocationCreate, LocationResponse, LocationUpdate
from app.services.session_service import require_session

logger = logging.getLogger(__name__)


def get_session_locations(db: Session, session_id: uuid.UUID) -> list[Location]:
    """Étapes d'une session triées par ordre d'affichage (objets ORM)."""
    return db.execute(
        select(Location)
        .where(Location.session_id == session_id)
        .order_by(Location.order_index)
    ).scalars().all()


def list_locations(db: Session, session_id: uuid.UUID) -> list[LocationResponse]:
    require_session(db, session_id)
    return [LocationResponse.model_validate(loc) for loc in get_session_locations(db, session_id)]


def get_location(db: Session, session_id: uuid.UUID, location_id: uuid.UUID) -> Optional[LocationResponse]:
    """Retourne une étape de la session, ou None si elle n'existe pas."""
    location = _find_location(db, session_id, location_id)
    if location is None:
        return None
    return LocationResponse.model_validate(location)


def create_location(db: Session, session_id: uuid.UUID, data: LocationCreate) -> LocationResponse:
    """
    Crée une étape dans la session.
    Lève ValueError si la session est introuvable ou si le code est déjà utilisé.
    """
    require_session(db, session_id)
    _ensure_code_available(db, session_id, data.code)

    _clear_flags(db, session_id, clear_start=data.is_start, clear_end=data.is_end)

    location = Location(session_id=session_id, **data.model_dump())
    db.add(location)
    db.commit()
    db.refresh(location)

    logger.info("Étape %s créée dans la session %s", location.code, session_id)
    return LocationResponse.model_validate(location)


def update_location(
    db: Session,
    session_id: uuid.UUID,
    location_id: uuid.UUID,
    data: LocationUpdate,
) -> Optional[LocationResponse]:
    """
    Met à jour les champs fournis d'une étape.
    Lève ValueError si le nouveau code est pris ou si l'étape deviendrait
    à la fois départ et arrivée.
    """
    location = _find_location(db, session_id, location_id)
    if location is None:
        return None

    update_data = data.model_dump(exclude_unset=True)

    if "code" in update_data and update_data["code"] != location.code:
        _ensure_code_available(db, session_id, update_data["code"], exclude_id=location_id)

    is_start = update_data.get("is_start", location.is_start)
    is_end = update_data.get("is_end", location.is_end)
    if is_start and is_end:
        raise ValueError("Une étape ne peut pas être à la fois le départ et l'arrivée.")

    _clear_flags(
        db,
        session_id,
        clear_start=bool(update_data.get("is_start")),
        clear_end=bool(update_data.get("is_end")),
        exclude_id=location_id,
    )

    for field, value in update_data.items():
        setattr(location, field, value)

    db.commit()
    db.refresh(location)
    return LocationResponse.model_validate(location)


def delete_location(db: Session, session_id: uuid.UUID, location_id: uuid.UUID) -> bool:
    """
    Supprime une étape. Les lignes de parcours qui la référencent sont supprimées
    en cascade : régénérer les parcours ensuite.
    """
    location = _find_location(db, session_id, location_id)
    if location is None:
        return False

    db.delete(location)
    db.commit()
    logger.info("Étape %s supprimée de la session %s", location_id, session_id)
    return True


def _find_location(db: Session, session_id: uuid.UUID, location_id: uuid.UUID) -> Optional[Location]:
    location = db.get(Location, location_id)
    if location is None or location.session_id != session_id:
        return None
    return location


def _ensure_code_available(
    db: Session,
    session_id: uuid.UUID,
    code: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    query = select(Location.id).where(
        Location.session_id == session_id,
        Location.code == code,
    )
    if exclude_id is not None:
        query = query.where(Location.id != exclude_id)

    if db.execute(query.limit(1)).scalar() is not None:
        raise ValueError(f"Le code '{code}' est déjà utilisé dans cette session.")


def _clear_flags(
    db: Session,
    session_id: uuid.UUID,
    clear_start: bool,
    clear_end: bool,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    """Retire is_start / is_end des autres étapes de la session."""
    values = {}
    if clear_start:
        values["is_start"] = False
    if clear_end:
        values["is_end"] = False
    if not values:
        return

    query = update(Location).where(Location.session_id == session_id)
    if exclude_id is not None:
        query = query.where(Location.id != exclude_id)
    db.execute(query.values(**values))
