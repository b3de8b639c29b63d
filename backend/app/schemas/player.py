"""
Schémas Pydantic pour les joueurs et leur connexion.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator


class PlayerCreate(BaseModel):
    """Création manuelle d'un joueur (POST /sessions/{id}/players)."""
    first_name: str
    last_name: str
    email: EmailStr
    team_id: Optional[uuid.UUID] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class PlayerUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    team_id: Optional[uuid.UUID] = None

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Ce champ ne peut pas être null.")
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class PlayerResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    team_id: Optional[uuid.UUID]
    first_name: str
    last_name: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PlayerImportRow(BaseModel):
    """Représente une ligne valide du CSV après parsing."""
    first_name: str
    last_name: str
    email: str


class ImportError(BaseModel):
    """Détail d'une ligne rejetée lors de l'import."""
    row: int
    content: str
    reason: str


class PlayerImportReport(BaseModel):
    """Rapport retourné après un import CSV."""
    total_rows: int
    inserted: int
    rejected: int
    duplicates_in_file: int
    duplicates_in_db: int
    errors: List[ImportError]


class PlayerLoginRequest(BaseModel):
    email: EmailStr
    keyword: str

    @field_validator("keyword")
    @classmethod
    def keyword_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le mot-clé est obligatoire.")
        return v.strip()


class PlayerLoginResponse(BaseModel):
    token: str
    expires_at: datetime
    player: PlayerResponse
    session_name: str


class PlayerMeResponse(BaseModel):
    player: PlayerResponse
    team_name: Optional[str] = None
    session_name: str
    session_active: bool
