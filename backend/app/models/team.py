"""
Modèles SQLAlchemy pour les équipes et leur parcours.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Team(Base):
    """Équipe : un parcours commun et un état d'avancement partagé par ses joueurs."""
    __tablename__ = "teams"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)

    current_stage = Column(Integer, nullable=False, default=0)           # Index dans le parcours (0 = départ)
    hints_used_current_stage = Column(Integer, nullable=False, default=0)  # 0 à 3, remis à 0 à chaque étape
    last_hint_requested_at = Column(DateTime(timezone=True), nullable=True)
    gps_hint_enabled = Column(Boolean, nullable=False, default=False)    # Activé par l'organisateur

    started_at = Column(DateTime(timezone=True), nullable=True)   # NULL = pas encore commencé
    finished_at = Column(DateTime(timezone=True), nullable=True)  # Renseigné une seule fois
    created_at = Column(DateTime, server_default=func.now())


class TeamPath(Base):
    """Une ligne par étape du parcours d'une équipe (stage_order croissant depuis 0)."""
    __tablename__ = "team_paths"
    __table_args__ = (
        UniqueConstraint("team_id", "stage_order", name="team_paths_team_stage_uq"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(UUID(as_uuid=True), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    location_id = Column(UUID(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False)
    stage_order = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
