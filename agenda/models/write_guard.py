# agenda/models/write_guard.py
"""
WriteGuard Model - optimistic concurrency token per guarded key.
A guarded insert only commits if the token it read is still current.
"""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func
from agenda.models.base import Base


class WriteGuard(Base):
    __tablename__ = "write_guards"

    guard_key = Column(String(400), primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<WriteGuard(key={self.guard_key}, version={self.version})>"
