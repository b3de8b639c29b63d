"""
Service métier pour les parcours des équipes.

Fait le lien entre la BDD et le générateur pur (path_generator) :
validation des étapes, génération, persistance une ligne par étape,
suppression et lecture des parcours.
"""

import random
import uuid
import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.models.location import Location
from app.models.team import Team, TeamPath
from app.schemas.path import (
    PathGenerationReport,
    PathStage,
    PathStats,
    PathsStatusResponse,
    TeamPathSummary,
)
from app.services.location_service import get_session_locations
from app.services.path_generator import (
    can_generate_unique_paths,
    generate_unique_paths,
    validate_locations_for_path_generation,
)
from app.services.session_service import require_session

logger = logging.getLogger(__name__)


def get_paths_status(db: Session, session_id: uuid.UUID) -> PathsStatusResponse:
    """
    Retourne l'état des parcours d'une session : la configuration des étapes
    est-elle valide, combien d'équipes ont un parcours, l'unicité est-elle possible.
    """
    require_session(db, session_id)

    locations = get_session_locations(db, session_id)
    rows = db.execute(
        select(Team, func.count(TeamPath.id))
        .outerjoin(TeamPath, TeamPath.team_id == Team.id)
        .where(Team.session_id == session_id)
        .group_by(Team.id)
        .order_by(Team.name)
    ).all()

    validation = validate_locations_for_path_generation(locations)
    intermediate_count = len(validation.intermediate_locations)
    uniqueness = can_generate_unique_paths(intermediate_count, len(rows))

    teams = [
        TeamPathSummary(
            team_id=team.id,
            team_name=team.name,
            has_path=path_length > 0,
            path_length=path_length,
        )
        for team, path_length in rows
    ]
    teams_with_paths = sum(1 for t in teams if t.has_path)

    return PathsStatusResponse(
        can_generate_paths=validation.is_valid,
        validation_error=validation.error,
        stats=PathStats(
            total_teams=len(teams),
            teams_with_paths=teams_with_paths,
            teams_without_paths=len(teams) - teams_with_paths,
            total_locations=len(locations),
            intermediate_locations=intermediate_count,
            max_unique_paths=uniqueness.max_unique_paths,
            can_be_unique=uniqueness.can_be_unique,
        ),
        teams=teams,
    )


def generate_paths(
    db: Session,
    session_id: uuid.UUID,
    regenerate: bool = False,
    rng: Optional[random.Random] = None,
) -> PathGenerationReport:
    """
    Génère et enregistre un parcours pour chaque équipe de la session.

    Lève ValueError si :
    - la session est introuvable ou n'a aucune équipe
    - les étapes ne sont pas valides (départ/arrivée manquants ou identiques)
    - des parcours existent déjà et regenerate=False

    Avec regenerate=True, tous les parcours existants sont supprimés d'abord.
    L'avancement des équipes n'est pas réinitialisé.
    """
    require_session(db, session_id)

    teams = db.execute(
        select(Team).where(Team.session_id == session_id).order_by(Team.name)
    ).scalars().all()
    if not teams:
        raise ValueError("Aucune équipe pour laquelle générer des parcours.")

    validation = validate_locations_for_path_generation(get_session_locations(db, session_id))
    if not validation.is_valid:
        raise ValueError(validation.error)

    team_ids = [t.id for t in teams]

    if regenerate:
        started = [t.name for t in teams if t.started_at is not None]
        if started:
            logger.warning(
                "Régénération des parcours de la session %s alors que %d équipe(s) ont commencé : %s",
                session_id, len(started), ", ".join(started),
            )
        db.execute(delete(TeamPath).where(TeamPath.team_id.in_(team_ids)))
    else:
        existing = db.execute(
            select(func.count()).select_from(TeamPath).where(TeamPath.team_id.in_(team_ids))
        ).scalar() or 0
        if existing:
            raise ValueError(
                "Des parcours existent déjà pour cette session. Utilisez regenerate pour les remplacer."
            )

    generated = generate_unique_paths(
        validation.start_location,
        validation.end_location,
        validation.intermediate_locations,
        team_ids,
        rng=rng,
    )

    db.bulk_insert_mappings(TeamPath, [
        {"team_id": path.team_id, "location_id": location.id, "stage_order": index}
        for path in generated
        for index, location in enumerate(path.locations)
    ])
    db.commit()

    unique_paths = len({p.path_signature for p in generated})
    report = PathGenerationReport(
        paths_generated=len(generated),
        unique_paths=unique_paths,
        duplicate_paths=len(generated) - unique_paths,
        stages_per_path=2 + len(validation.intermediate_locations),
    )

    logger.info(
        "Session %s : %d parcours générés (%d uniques, %d étapes chacun)",
        session_id, report.paths_generated, report.unique_paths, report.stages_per_path,
    )
    return report


def delete_paths(db: Session, session_id: uuid.UUID) -> int:
    """Supprime tous les parcours de la session. Retourne le nombre de lignes supprimées."""
    require_session(db, session_id)

    result = db.execute(
        delete(TeamPath).where(
            TeamPath.team_id.in_(select(Team.id).where(Team.session_id == session_id))
        )
    )
    db.commit()

    logger.info("Session %s : %d ligne(s) de parcours supprimée(s)", session_id, result.rowcount)
    return result.rowcount


def load_team_path(db: Session, team_id: uuid.UUID) -> list[Location]:
    """Étapes du parcours d'une équipe dans l'ordre (liste vide si pas de parcours)."""
    return db.execute(
        select(Location)
        .join(TeamPath, TeamPath.location_id == Location.id)
        .where(TeamPath.team_id == team_id)
        .order_by(TeamPath.stage_order)
    ).scalars().all()


def get_team_path(db: Session, team_id: uuid.UUID) -> list[PathStage]:
    """Parcours d'une équipe pour l'écran admin. Lève ValueError si l'équipe est introuvable."""
    if db.get(Team, team_id) is None:
        raise ValueError("Équipe introuvable.")

    return [
        PathStage(
            stage_order=index,
            location_id=location.id,
            location_name=location.name_fr,
            location_code=location.code,
            is_start=location.is_start,
            is_end=location.is_end,
        )
        for index, location in enumerate(load_team_path(db, team_id))
    ]
