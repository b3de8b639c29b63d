"""
Schémas Pydantic pour les étapes d'une session.

Le code est normalisé en majuscules : c'est la chaîne que les joueurs trouvent
sur place et saisissent pour débloquer l'étape.
"""

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

CODE_REGEX = re.compile(r"^[A-Z0-9_-]+$")


def _normalize_code(v: str) -> str:
    v = v.strip().upper()
    if not v:
        raise ValueError("Le code est obligatoire.")
    if len(v) > 50:
        raise ValueError("Le code est trop long (50 caractères maximum).")
    if not CODE_REGEX.match(v):
        raise ValueError("Le code ne peut contenir que des lettres, chiffres, tirets et underscores.")
    return v


class LocationCreate(BaseModel):
    code: str
    name_fr: str
    name_en: str
    riddle_fr: Optional[str] = None
    riddle_en: Optional[str] = None
    hint1_fr: Optional[str] = None
    hint1_en: Optional[str] = None
    hint2_fr: Optional[str] = None
    hint2_en: Optional[str] = None
    hint3_fr: Optional[str] = None
    hint3_en: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    is_start: bool = False
    is_end: bool = False
    order_index: int = 0

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return _normalize_code(v)

    @field_validator("name_fr", "name_en")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de l'étape ne peut pas être vide.")
        return v.strip()

    @field_validator("order_index")
    @classmethod
    def order_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("L'ordre d'affichage doit être positif.")
        return v

    @model_validator(mode="after")
    def start_xor_end(self):
        if self.is_start and self.is_end:
            raise ValueError("Une étape ne peut pas être à la fois le départ et l'arrivée.")
        return self


class LocationUpdate(BaseModel):
    code: Optional[str] = None
    name_fr: Optional[str] = None
    name_en: Optional[str] = None
    riddle_fr: Optional[str] = None
    riddle_en: Optional[str] = None
    hint1_fr: Optional[str] = None
    hint1_en: Optional[str] = None
    hint2_fr: Optional[str] = None
    hint2_en: Optional[str] = None
    hint3_fr: Optional[str] = None
    hint3_en: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    is_start: Optional[bool] = None
    is_end: Optional[bool] = None
    order_index: Optional[int] = None

    @field_validator("code", "name_fr", "name_en", "is_start", "is_end", "order_index")
    @classmethod
    def not_null(cls, v):
        # Absent = inchangé ; null explicite refusé (colonnes NOT NULL)
        if v is None:
            raise ValueError("Ce champ ne peut pas être null.")
        return v

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return _normalize_code(v)

    @field_validator("name_fr", "name_en")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de l'étape ne peut pas être vide.")
        return v.strip()

    @field_validator("order_index")
    @classmethod
    def order_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("L'ordre d'affichage doit être positif.")
        return v

    @model_validator(mode="after")
    def start_xor_end(self):
        if self.is_start and self.is_end:
            raise ValueError("Une étape ne peut pas être à la fois le départ et l'arrivée.")
        return self


class LocationResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    code: str
    name_fr: str
    name_en: str
    riddle_fr: Optional[str]
    riddle_en: Optional[str]
    hint1_fr: Optional[str]
    hint1_en: Optional[str]
    hint2_fr: Optional[str]
    hint2_en: Optional[str]
    hint3_fr: Optional[str]
    hint3_en: Optional[str]
    latitude: Optional[str]
    longitude: Optional[str]
    is_start: bool
    is_end: bool
    order_index: int
    created_at: datetime

    model_config = {"from_attributes": True}
