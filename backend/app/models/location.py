"""
Modèle SQLAlchemy pour les étapes (lieux physiques) d'une session.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Location(Base):
    """Étape physique : code secret, énigme et jusqu'à trois indices (FR/EN)."""
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("session_id", "code", name="locations_code_session_uq"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(50), nullable=False)  # Toujours en majuscules

    name_fr = Column(String(255), nullable=False)
    name_en = Column(String(255), nullable=False)
    riddle_fr = Column(Text, nullable=True)
    riddle_en = Column(Text, nullable=True)
    hint1_fr = Column(Text, nullable=True)
    hint1_en = Column(Text, nullable=True)
    hint2_fr = Column(Text, nullable=True)
    hint2_en = Column(Text, nullable=True)
    hint3_fr = Column(Text, nullable=True)
    hint3_en = Column(Text, nullable=True)

    latitude = Column(String(20), nullable=True)
    longitude = Column(String(20), nullable=True)

    is_start = Column(Boolean, nullable=False, default=False)
    is_end = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
