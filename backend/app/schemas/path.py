"""
Schémas Pydantic pour la génération des parcours d'équipes.
"""

import uuid
from typing import Any, List, Optional

from pydantic import BaseModel


class GeneratedPath(BaseModel):
    """Parcours généré pour une équipe (résultat du générateur, non persisté tel quel)."""
    team_id: Any
    locations: List[Any]   # Objets Location dans l'ordre des étapes
    path_signature: str    # Identifiants joints par '-' pour compter les parcours uniques


class LocationSetValidation(BaseModel):
    """Résultat de la validation des étapes d'une session avant génération."""
    is_valid: bool
    error: Optional[str] = None
    start_location: Optional[Any] = None
    end_location: Optional[Any] = None
    intermediate_locations: List[Any] = []


class UniquenessInfo(BaseModel):
    can_be_unique: bool
    max_unique_paths: int


class PathGenerateRequest(BaseModel):
    """Corps de POST /sessions/{id}/paths."""
    regenerate: bool = False


class PathStats(BaseModel):
    total_teams: int
    teams_with_paths: int
    teams_without_paths: int
    total_locations: int
    intermediate_locations: int
    max_unique_paths: int
    can_be_unique: bool


class TeamPathSummary(BaseModel):
    team_id: uuid.UUID
    team_name: str
    has_path: bool
    path_length: int


class PathsStatusResponse(BaseModel):
    """État des parcours d'une session (écran admin avant génération)."""
    can_generate_paths: bool
    validation_error: Optional[str] = None
    stats: PathStats
    teams: List[TeamPathSummary]


class PathGenerationReport(BaseModel):
    """Rapport retourné après génération des parcours."""
    paths_generated: int
    unique_paths: int
    duplicate_paths: int
    stages_per_path: int


class PathStage(BaseModel):
    """Une étape du parcours d'une équipe (vue admin)."""
    stage_order: int
    location_id: uuid.UUID
    location_name: str
    location_code: str
    is_start: bool
    is_end: bool
