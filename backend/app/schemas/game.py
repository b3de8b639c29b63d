"""
Schémas Pydantic pour le jeu côté joueur : état d'avancement d'une équipe,
résultats des actions (démarrer, valider un code, demander un indice).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class TeamProgress(BaseModel):
    """Instantané de l'avancement d'une équipe, indépendant de la BDD."""
    current_stage: int = 0
    hints_used_current_stage: int = 0
    last_hint_requested_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    gps_hint_enabled: bool = False

    model_config = {"from_attributes": True}


class ProgressResult(BaseModel):
    """
    Résultat d'une transition. ok=False : action refusée, `team` est l'état inchangé
    et `error` le message destiné au joueur.
    """
    ok: bool
    team: TeamProgress
    error: Optional[str] = None
    completed: bool = False
    hint_number: Optional[int] = None
    remaining_seconds: Optional[int] = None


class CodeSubmission(BaseModel):
    code: str

    @field_validator("code")
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le code ne peut pas être vide.")
        return v.strip()


class CurrentLocationView(BaseModel):
    id: uuid.UUID
    name_fr: str
    name_en: str


class TargetLocationView(BaseModel):
    """Étape à trouver : énigme et indices débloqués, jamais le code."""
    id: uuid.UUID
    name_fr: str
    name_en: str
    riddle_fr: Optional[str] = None
    riddle_en: Optional[str] = None
    hints_fr: List[str] = []
    hints_en: List[str] = []
    is_end: bool
    latitude: Optional[str] = None   # Seulement si l'indice GPS est activé
    longitude: Optional[str] = None


class TeamGameView(BaseModel):
    id: uuid.UUID
    name: str
    current_stage: int
    hints_used_current_stage: int
    last_hint_requested_at: Optional[datetime]
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    gps_hint_enabled: bool


class GameStateResponse(BaseModel):
    """Réponse de GET /api/v1/game."""
    team: TeamGameView
    current_location: Optional[CurrentLocationView] = None
    next_location: Optional[TargetLocationView] = None
    total_stages: int
    has_started: bool
    is_completed: bool
    victory_message_fr: Optional[str] = None
    victory_message_en: Optional[str] = None


class GameActionResponse(BaseModel):
    """Réponse des actions joueur réussies."""
    message: str
    team: TeamGameView
    completed: bool = False
    hint_number: Optional[int] = None
    hint_fr: Optional[str] = None
    hint_en: Optional[str] = None
