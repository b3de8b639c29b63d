"""
Service métier pour les équipes d'une session.
Création, composition, génération automatique à partir des joueurs non assignés,
activation de l'indice GPS et suivi en direct de l'avancement.
"""

import random
import uuid
import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.models.player import Player
from app.models.team import Team, TeamPath
from app.schemas.player import PlayerResponse
from app.schemas.team import (
    GeneratedTeam,
    TeamCreate,
    TeamGenerateRequest,
    TeamGenerationReport,
    TeamPlayersAssign,
    TeamProgressSummary,
    TeamResponse,
    TeamUpdate,
)
from app.services import team_progress
from app.services.session_service import require_session

logger = logging.getLogger(__name__)


def list_teams(db: Session, session_id: uuid.UUID) -> list[TeamResponse]:
    """Retourne les équipes de la session triées par nom, avec leurs joueurs."""
    require_session(db, session_id)
    teams = db.execute(
        select(Team).where(Team.session_id == session_id).order_by(Team.name)
    ).scalars().all()
    return [_to_response(db, t) for t in teams]


def get_team(db: Session, team_id: uuid.UUID) -> Optional[TeamResponse]:
    team = db.get(Team, team_id)
    if team is None:
        return None
    return _to_response(db, team)


def create_team(db: Session, session_id: uuid.UUID, data: TeamCreate) -> TeamResponse:
    require_session(db, session_id)
    team = Team(session_id=session_id, name=data.name)
    db.add(team)
    db.commit()
    db.refresh(team)

    logger.info("Équipe créée : %s (%s)", team.name, team.id)
    return _to_response(db, team)


def update_team(db: Session, team_id: uuid.UUID, data: TeamUpdate) -> Optional[TeamResponse]:
    team = db.get(Team, team_id)
    if team is None:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(team, field, value)

    db.commit()
    db.refresh(team)
    return _to_response(db, team)


def delete_team(db: Session, team_id: uuid.UUID) -> bool:
    """
    Supprime une équipe. Ses joueurs redeviennent non assignés,
    son parcours est supprimé en cascade.
    """
    team = db.get(Team, team_id)
    if team is None:
        return False

    db.execute(
        update(Player).where(Player.team_id == team_id).values(team_id=None)
    )
    db.delete(team)
    db.commit()
    return True


def assign_players(db: Session, team_id: uuid.UUID, data: TeamPlayersAssign) -> TeamResponse:
    """
    Remplace la composition de l'équipe par les joueurs fournis.
    Lève ValueError si l'équipe est introuvable ou si un joueur n'appartient
    pas à la session de l'équipe.
    """
    team = db.get(Team, team_id)
    if team is None:
        raise ValueError("Équipe introuvable.")

    player_ids = list(dict.fromkeys(data.player_ids))
    if player_ids:
        found = set(db.execute(
            select(Player.id).where(
                Player.id.in_(player_ids),
                Player.session_id == team.session_id,
            )
        ).scalars().all())
        unknown = [str(pid) for pid in player_ids if pid not in found]
        if unknown:
            raise ValueError(f"Joueur(s) introuvable(s) dans cette session : {', '.join(unknown)}")

    db.execute(
        update(Player).where(Player.team_id == team_id).values(team_id=None)
    )
    if player_ids:
        db.execute(
            update(Player).where(Player.id.in_(player_ids)).values(team_id=team_id)
        )
    db.commit()

    logger.info("Équipe %s : %d joueur(s) assigné(s)", team_id, len(player_ids))
    return _to_response(db, team)


def generate_teams(
    db: Session,
    session_id: uuid.UUID,
    data: TeamGenerateRequest,
    rng: Optional[random.Random] = None,
) -> TeamGenerationReport:
    """
    Crée automatiquement des équipes avec les joueurs non assignés de la session.

    - method=alphabetical : joueurs triés par nom puis prénom
    - method=random : joueurs mélangés
    Les joueurs sont regroupés par paquets de `team_size` ; le dernier groupe peut
    être incomplet. Équipes d'un joueur nommées d'après lui, sinon "Équipe N".
    """
    game_session = require_session(db, session_id)

    players = list(db.execute(
        select(Player)
        .where(Player.session_id == session_id, Player.team_id.is_(None))
        .order_by(Player.last_name, Player.first_name)
    ).scalars().all())

    if not players:
        raise ValueError("Aucun joueur disponible à assigner.")

    if data.method == "random":
        (rng or random.Random()).shuffle(players)

    existing_count = db.execute(
        select(func.count()).select_from(Team).where(Team.session_id == session_id)
    ).scalar() or 0

    team_size = max(game_session.team_size or 1, 1)
    team_number = existing_count + 1
    created: list[GeneratedTeam] = []

    for i in range(0, len(players), team_size):
        members = players[i:i + team_size]

        if team_size == 1:
            name = f"{members[0].first_name} {members[0].last_name}"
        else:
            name = f"Équipe {team_number}"
            team_number += 1

        team = Team(session_id=session_id, name=name)
        db.add(team)
        db.flush()  # Obtenir l'ID avant d'assigner les joueurs

        for member in members:
            member.team_id = team.id

        created.append(GeneratedTeam(
            name=name,
            players=[f"{m.first_name} {m.last_name}" for m in members],
        ))

    db.commit()

    logger.info(
        "Session %s : %d équipe(s) générée(s) (%s) pour %d joueur(s)",
        session_id, len(created), data.method, len(players),
    )
    return TeamGenerationReport(
        teams_created=len(created),
        teams=created,
        players_assigned=len(players),
    )


def set_gps_hint(db: Session, team_id: uuid.UUID, enabled: bool) -> Optional[TeamResponse]:
    """Active ou désactive l'affichage des coordonnées GPS de l'étape à trouver."""
    team = db.get(Team, team_id)
    if team is None:
        return None

    team.gps_hint_enabled = enabled
    db.commit()
    db.refresh(team)

    logger.info("Indice GPS %s pour l'équipe %s", "activé" if enabled else "désactivé", team_id)
    return _to_response(db, team)


def get_session_progress(db: Session, session_id: uuid.UUID) -> list[TeamProgressSummary]:
    """Tableau de suivi : étape courante et statut de chaque équipe de la session."""
    require_session(db, session_id)

    rows = db.execute(
        select(Team, func.count(TeamPath.id))
        .outerjoin(TeamPath, TeamPath.team_id == Team.id)
        .where(Team.session_id == session_id)
        .group_by(Team.id)
        .order_by(Team.name)
    ).all()

    return [
        TeamProgressSummary(
            team_id=team.id,
            team_name=team.name,
            current_stage=team.current_stage,
            total_stages=total_stages,
            hints_used_current_stage=team.hints_used_current_stage,
            gps_hint_enabled=team.gps_hint_enabled,
            started_at=team.started_at,
            finished_at=team.finished_at,
            is_completed=team_progress.reached_end(team.current_stage, team.finished_at, total_stages),
        )
        for team, total_stages in rows
    ]


def _to_response(db: Session, team: Team) -> TeamResponse:
    """Construit le schéma de réponse avec la liste des joueurs."""
    players = db.execute(
        select(Player)
        .where(Player.team_id == team.id)
        .order_by(Player.last_name, Player.first_name)
    ).scalars().all()

    return TeamResponse(
        id=team.id,
        session_id=team.session_id,
        name=team.name,
        current_stage=team.current_stage,
        hints_used_current_stage=team.hints_used_current_stage,
        gps_hint_enabled=team.gps_hint_enabled,
        started_at=team.started_at,
        finished_at=team.finished_at,
        created_at=team.created_at,
        players=[PlayerResponse.model_validate(p) for p in players],
    )
