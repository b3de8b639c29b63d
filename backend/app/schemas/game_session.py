"""
Schémas Pydantic pour les sessions de jeu.
"""

import re
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator

KEYWORD_REGEX = re.compile(r"^[a-zA-Z0-9_-]+$")


def _check_keyword(v: str) -> str:
    v = v.strip()
    if len(v) < 3:
        raise ValueError("Le mot-clé doit contenir au moins 3 caractères.")
    if not KEYWORD_REGEX.match(v):
        raise ValueError("Le mot-clé ne peut contenir que des lettres, chiffres, tirets et underscores.")
    return v


class SessionCreate(BaseModel):
    name: str
    keyword: str
    team_size: int = 2
    admin_display_name: Optional[str] = None
    victory_message_fr: Optional[str] = None
    victory_message_en: Optional[str] = None
    help_content_fr: Optional[Dict[str, Any]] = None
    help_content_en: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de la session ne peut pas être vide.")
        return v.strip()

    @field_validator("keyword")
    @classmethod
    def valid_keyword(cls, v: str) -> str:
        return _check_keyword(v)

    @field_validator("team_size")
    @classmethod
    def team_size_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("La taille d'équipe doit être au moins 1.")
        return v


class SessionUpdate(BaseModel):
    name: Optional[str] = None
    keyword: Optional[str] = None
    team_size: Optional[int] = None
    admin_display_name: Optional[str] = None
    victory_message_fr: Optional[str] = None
    victory_message_en: Optional[str] = None
    help_content_fr: Optional[Dict[str, Any]] = None
    help_content_en: Optional[Dict[str, Any]] = None

    @field_validator("name", "keyword", "team_size")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Ce champ ne peut pas être null.")
        return v

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le nom de la session ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("keyword")
    @classmethod
    def valid_keyword(cls, v: Optional[str]) -> Optional[str]:
        return _check_keyword(v) if v is not None else v

    @field_validator("team_size")
    @classmethod
    def team_size_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("La taille d'équipe doit être au moins 1.")
        return v


class SessionResponse(BaseModel):
    id: uuid.UUID
    name: str
    keyword: str
    team_size: int
    is_active: bool
    admin_display_name: Optional[str]
    victory_message_fr: Optional[str]
    victory_message_en: Optional[str]
    help_content_fr: Optional[Dict[str, Any]]
    help_content_en: Optional[Dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
