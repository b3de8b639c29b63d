"""
Schémas Pydantic pour les équipes.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator

from app.schemas.player import PlayerResponse


class TeamCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de l'équipe ne peut pas être vide.")
        return v.strip()


class TeamUpdate(BaseModel):
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Le nom de l'équipe ne peut pas être null.")
        return v

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le nom de l'équipe ne peut pas être vide.")
        return v.strip() if v else v


class TeamPlayersAssign(BaseModel):
    """Remplace la composition de l'équipe par cette liste de joueurs."""
    player_ids: List[uuid.UUID]


class TeamGenerateRequest(BaseModel):
    method: Literal["random", "alphabetical"] = "random"


class GpsHintToggle(BaseModel):
    enabled: bool


class TeamResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    name: str
    current_stage: int
    hints_used_current_stage: int
    gps_hint_enabled: bool
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    created_at: datetime
    players: List[PlayerResponse] = []

    model_config = {"from_attributes": True}


class GeneratedTeam(BaseModel):
    name: str
    players: List[str]


class TeamGenerationReport(BaseModel):
    teams_created: int
    teams: List[GeneratedTeam]
    players_assigned: int


class TeamProgressSummary(BaseModel):
    """Ligne du tableau de suivi en direct des équipes."""
    team_id: uuid.UUID
    team_name: str
    current_stage: int
    total_stages: int
    hints_used_current_stage: int
    gps_hint_enabled: bool
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    is_completed: bool
