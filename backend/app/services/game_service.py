"""
Service du jeu côté joueur : état courant, démarrage, validation de code, indices.

Charge l'équipe et son parcours, délègue la décision à la machine à états
pure (team_progress) puis persiste le nouvel état.

La persistance est conditionnelle : l'UPDATE ne s'applique que si l'équipe est
toujours dans l'état lu (étape, compteur d'indices). Deux coéquipiers qui
valident en même temps ne peuvent donc pas faire avancer l'équipe deux fois ;
le second reçoit une erreur de conflit et doit recharger l'état.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models.game_session import GameSession
from app.models.location import Location
from app.models.player import Player
from app.models.team import Team
from app.schemas.game import (
    CurrentLocationView,
    GameActionResponse,
    GameStateResponse,
    TargetLocationView,
    TeamGameView,
    TeamProgress,
)
from app.services import team_progress
from app.services.path_service import load_team_path

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "L'état de l'équipe a changé entre-temps (conflit). Rechargez le jeu."


class HintCooldownError(ValueError):
    """Indice refusé pendant le délai d'attente ; remaining_seconds = attente restante."""

    def __init__(self, message: str, remaining_seconds: int):
        super().__init__(message)
        self.remaining_seconds = remaining_seconds


def _load_team(db: Session, player: Player) -> Team:
    if player.team_id is None:
        raise ValueError("Vous n'êtes assigné à aucune équipe.")
    team = db.get(Team, player.team_id)
    if team is None:
        raise ValueError("Équipe introuvable.")
    return team


def _load_path(db: Session, team: Team) -> list[Location]:
    path = load_team_path(db, team.id)
    if not path:
        raise ValueError("Aucun parcours n'a encore été généré pour votre équipe.")
    return path


def _team_view(team: Team, progress: TeamProgress) -> TeamGameView:
    return TeamGameView(id=team.id, name=team.name, **progress.model_dump())


def _unlocked_hints(location: Location, count: int, lang: str) -> list[str]:
    hints = []
    for n in range(1, count + 1):
        text = getattr(location, f"hint{n}_{lang}", None)
        if text:
            hints.append(text)
    return hints


def _target_view(location: Location, progress: TeamProgress) -> TargetLocationView:
    view = TargetLocationView(
        id=location.id,
        name_fr=location.name_fr,
        name_en=location.name_en,
        riddle_fr=location.riddle_fr,
        riddle_en=location.riddle_en,
        hints_fr=_unlocked_hints(location, progress.hints_used_current_stage, "fr"),
        hints_en=_unlocked_hints(location, progress.hints_used_current_stage, "en"),
        is_end=location.is_end,
    )
    if progress.gps_hint_enabled:
        view.latitude = location.latitude
        view.longitude = location.longitude
    return view


def _persist(db: Session, team: Team, before: TeamProgress, after: TeamProgress, require_not_started: bool = False) -> None:
    """
    UPDATE conditionnel sur l'état lu. Lève ValueError (conflit) si une autre
    requête a modifié l'équipe entre la lecture et l'écriture.
    """
    conditions = [
        Team.id == team.id,
        Team.current_stage == before.current_stage,
        Team.hints_used_current_stage == before.hints_used_current_stage,
    ]
    if require_not_started:
        conditions.append(Team.started_at.is_(None))

    result = db.execute(
        update(Team)
        .where(*conditions)
        .values(
            current_stage=after.current_stage,
            hints_used_current_stage=after.hints_used_current_stage,
            last_hint_requested_at=after.last_hint_requested_at,
            started_at=after.started_at,
            finished_at=after.finished_at,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning("Conflit de mise à jour sur l'équipe %s (étape %d)", team.id, before.current_stage)
        db.rollback()
        raise ValueError(CONFLICT_MESSAGE)
    db.commit()


def get_game_state(db: Session, player: Player) -> GameStateResponse:
    """État du jeu pour l'équipe du joueur : étape actuelle, étape à trouver, indices débloqués."""
    team = _load_team(db, player)
    path = _load_path(db, team)
    progress = TeamProgress.model_validate(team)

    current = team_progress.current_location(progress, path)
    target = team_progress.target_location(progress, path)
    completed = team_progress.is_completed(progress, path)

    victory_fr = victory_en = None
    if completed:
        game_session = db.get(GameSession, team.session_id)
        if game_session is not None:
            victory_fr = game_session.victory_message_fr
            victory_en = game_session.victory_message_en

    return GameStateResponse(
        team=_team_view(team, progress),
        current_location=CurrentLocationView(
            id=current.id, name_fr=current.name_fr, name_en=current.name_en,
        ) if current is not None else None,
        next_location=_target_view(target, progress) if target is not None and not completed else None,
        total_stages=len(path),
        has_started=progress.started_at is not None,
        is_completed=completed,
        victory_message_fr=victory_fr,
        victory_message_en=victory_en,
    )


def start_game(db: Session, player: Player, now: Optional[datetime] = None) -> GameActionResponse:
    team = _load_team(db, player)
    _load_path(db, team)
    before = TeamProgress.model_validate(team)

    result = team_progress.start_team(before, now=now)
    if not result.ok:
        raise ValueError(result.error)

    _persist(db, team, before, result.team, require_not_started=True)
    logger.info("Équipe %s (%s) : partie commencée", team.id, team.name)
    return GameActionResponse(
        message="Partie commencée ! Bonne chance !",
        team=_team_view(team, result.team),
    )


def submit_code(db: Session, player: Player, code: str, now: Optional[datetime] = None) -> GameActionResponse:
    """
    Valide le code de l'étape à trouver. Code faux : ValueError("Code incorrect...").
    """
    team = _load_team(db, player)
    path = _load_path(db, team)
    before = TeamProgress.model_validate(team)

    result = team_progress.submit_code(before, path, code, now=now)
    if not result.ok:
        logger.debug("Équipe %s : code refusé à l'étape %d", team.id, before.current_stage)
        raise ValueError(result.error)

    _persist(db, team, before, result.team)

    if result.completed:
        logger.info("Équipe %s (%s) : chasse terminée", team.id, team.name)
        message = "Félicitations ! Vous avez terminé la chasse au trésor !"
    else:
        logger.info("Équipe %s : étape %d atteinte", team.id, result.team.current_stage)
        message = "Correct ! En route vers l'étape suivante !"

    return GameActionResponse(
        message=message,
        team=_team_view(team, result.team),
        completed=result.completed,
    )


def request_hint(db: Session, player: Player, now: Optional[datetime] = None) -> GameActionResponse:
    """Débloque l'indice suivant de l'étape à trouver (3 max, 3 minutes entre deux)."""
    team = _load_team(db, player)
    path = _load_path(db, team)
    before = TeamProgress.model_validate(team)

    target = team_progress.target_location(before, path)
    if target is None:
        raise ValueError("Aucune étape à trouver : le parcours est terminé.")

    result = team_progress.request_hint(before, now=now)
    if not result.ok:
        if result.remaining_seconds is not None:
            raise HintCooldownError(result.error, result.remaining_seconds)
        raise ValueError(result.error)

    _persist(db, team, before, result.team)

    n = result.hint_number
    logger.info("Équipe %s : indice %d débloqué à l'étape %d", team.id, n, before.current_stage)
    return GameActionResponse(
        message=f"Indice {n} débloqué !",
        team=_team_view(team, result.team),
        hint_number=n,
        hint_fr=getattr(target, f"hint{n}_fr", None),
        hint_en=getattr(target, f"hint{n}_en", None),
    )
