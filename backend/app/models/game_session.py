"""
Modèle SQLAlchemy pour les sessions de jeu (une chasse au trésor).
Nommé game_session pour éviter la confusion avec sqlalchemy.orm.Session.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID

from app.database import Base


class GameSession(Base):
    __tablename__ = "sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    keyword = Column(String(100), unique=True, nullable=False)  # Mot-clé partagé de connexion joueurs
    team_size = Column(Integer, nullable=False, default=2)
    is_active = Column(Boolean, nullable=False, default=False)
    admin_display_name = Column(String(100), nullable=True)
    victory_message_fr = Column(Text, nullable=True)
    victory_message_en = Column(Text, nullable=True)
    help_content_fr = Column(JSONB, nullable=True)  # Contenu libre, jamais inspecté par le jeu
    help_content_en = Column(JSONB, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
