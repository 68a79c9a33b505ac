# brewtrack/models/Sensor.py
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from brewtrack.db import db
from brewtrack.utils.timeutil import isoformat


class Sensor(db.Model):
    """A temperature sensor. Only ``name`` and the owner change after creation."""
    __tablename__ = 'sensors'

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    created_by = relationship("User", back_populates="sensors")
    associations = relationship("Association", back_populates="sensor")
    measurements = relationship("Measurement", back_populates="sensor")

    def to_dict(self):
        return {
            'id': self.uuid,
            'name': self.name,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
