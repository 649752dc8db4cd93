"""
RefreshToken model: one row per refresh token currently accepted by the
database-backed registry.
Fields:
- token_hash (primary key) - SHA-256 hex digest of the token string
- created_at
The raw token is never stored.
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from models.base_model import Base


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    token_hash = Column(String(64), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<RefreshToken hash={self.token_hash[:12]}>"
