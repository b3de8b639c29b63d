"""
Machine à états de l'avancement d'une équipe.

États : NON_COMMENCÉ (started_at NULL) → EN_COURS → TERMINÉ (finished_at renseigné).
Transitions strictement en avant. Le parcours est une liste d'étapes où l'index 0
est le départ ; l'équipe à l'étape `current_stage` cherche l'étape
`current_stage + 1` : c'est son code qui fait avancer, ses énigme et indices
qui sont affichés.

Module pur : reçoit un instantané TeamProgress et retourne un ProgressResult.
Une action refusée ne lève jamais d'exception et ne modifie rien.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from app.schemas.game import ProgressResult, TeamProgress

MAX_HINTS_PER_STAGE = 3
HINT_COOLDOWN = timedelta(minutes=3)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Les timestamps naïfs lus en BDD sont considérés comme UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _rejected(progress: TeamProgress, error: str, **extra) -> ProgressResult:
    return ProgressResult(ok=False, team=progress, error=error, **extra)


def format_wait(seconds: int) -> str:
    """Formate une attente en m:ss (ex. 125 → '2:05')."""
    return f"{seconds // 60}:{seconds % 60:02d}"


def current_location(progress: TeamProgress, path: Sequence[Any]) -> Optional[Any]:
    """Étape où se trouve l'équipe (index current_stage)."""
    if 0 <= progress.current_stage < len(path):
        return path[progress.current_stage]
    return None


def target_location(progress: TeamProgress, path: Sequence[Any]) -> Optional[Any]:
    """Étape à trouver (index current_stage + 1), None si le parcours est terminé."""
    index = progress.current_stage + 1
    if 0 <= index < len(path):
        return path[index]
    return None


def terminal_stage(path: Sequence[Any]) -> int:
    return len(path) - 1


def reached_end(current_stage: int, finished_at: Optional[datetime], total_stages: int) -> bool:
    """Chasse terminée : étape finale atteinte et date de fin enregistrée."""
    return finished_at is not None and current_stage >= total_stages - 1


def is_completed(progress: TeamProgress, path: Sequence[Any]) -> bool:
    return reached_end(progress.current_stage, progress.finished_at, len(path))


def start_team(progress: TeamProgress, now: Optional[datetime] = None) -> ProgressResult:
    """NON_COMMENCÉ → EN_COURS. Refusé si l'équipe a déjà commencé."""
    if progress.started_at is not None:
        return _rejected(progress, "Le jeu a déjà commencé.")

    updated = progress.model_copy(update={
        "started_at": now or _utcnow(),
        "current_stage": 0,
    })
    return ProgressResult(ok=True, team=updated)


def submit_code(
    progress: TeamProgress,
    path: Sequence[Any],
    code: str,
    now: Optional[datetime] = None,
) -> ProgressResult:
    """
    Valide le code de l'étape suivante du parcours.

    Comparaison insensible à la casse et aux espaces autour. Code correct :
    étape +1, compteur d'indices et cooldown remis à zéro, finished_at posé
    si l'étape finale est atteinte. Code faux : aucun changement, aucune limite
    de tentatives.
    """
    target = target_location(progress, path)
    if target is None:
        return _rejected(progress, "Aucune étape à débloquer : le parcours est terminé.")

    if (code or "").strip().upper() != (target.code or "").strip().upper():
        return _rejected(progress, "Code incorrect. Réessayez !")

    new_stage = progress.current_stage + 1
    update = {
        "current_stage": new_stage,
        "hints_used_current_stage": 0,
        "last_hint_requested_at": None,
    }
    completed = new_stage >= terminal_stage(path)
    if completed and progress.finished_at is None:
        update["finished_at"] = now or _utcnow()

    return ProgressResult(ok=True, team=progress.model_copy(update=update), completed=completed)


def request_hint(progress: TeamProgress, now: Optional[datetime] = None) -> ProgressResult:
    """
    Débloque l'indice suivant de l'étape à trouver.

    Refusé si les 3 indices sont utilisés, ou si moins de 3 minutes se sont
    écoulées depuis le précédent (remaining_seconds indique l'attente restante).
    """
    if progress.hints_used_current_stage >= MAX_HINTS_PER_STAGE:
        return _rejected(progress, "Vous avez déjà utilisé tous les indices pour cette étape.")

    now = _as_utc(now or _utcnow())

    if progress.last_hint_requested_at is not None:
        elapsed = now - _as_utc(progress.last_hint_requested_at)
        if elapsed < HINT_COOLDOWN:
            remaining_seconds = math.ceil((HINT_COOLDOWN - elapsed).total_seconds())
            return _rejected(
                progress,
                f"Veuillez patienter encore {format_wait(remaining_seconds)} avant le prochain indice.",
                remaining_seconds=remaining_seconds,
            )

    hint_number = progress.hints_used_current_stage + 1
    updated = progress.model_copy(update={
        "hints_used_current_stage": hint_number,
        "last_hint_requested_at": now,
    })
    return ProgressResult(ok=True, team=updated, hint_number=hint_number)
