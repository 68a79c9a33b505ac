# brewtrack/models/Batch.py
import enum
import uuid

from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from brewtrack.db import db
from brewtrack.errors import ValidationError
from brewtrack.utils.timeutil import isoformat


class VolumeUnit(enum.Enum):
    GALLON = 'GALLON'
    QUART = 'QUART'

    @classmethod
    def parse(cls, token):
        if isinstance(token, cls):
            return token
        try:
            return cls[str(token).strip().upper()]
        except KeyError:
            raise ValidationError(f"Unsupported volume units: {token!r}", field='volume_units') from None


class Batch(db.Model):
    __tablename__ = 'batches'

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    # NULL means the event has not happened yet
    brewed_date = Column(DateTime(timezone=True), nullable=True)
    bottled_date = Column(DateTime(timezone=True), nullable=True)

    # NULL means unset; 0.0 is a real reading
    volume_boiled = Column(Float, nullable=True)
    volume_in_fermenter = Column(Float, nullable=True)
    volume_units = Column(Enum(VolumeUnit), nullable=True)
    original_gravity = Column(Float, nullable=True)
    final_gravity = Column(Float, nullable=True)

    brew_notes = Column(Text, nullable=False, default='')
    tasting_notes = Column(Text, nullable=False, default='')
    recipe_url = Column(String(2048), nullable=False, default='')

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    created_by = relationship("User", back_populates="batches")
    associations = relationship("Association", back_populates="batch")

    def to_dict(self):
        return {
            'id': self.uuid,
            'name': self.name,
            'brewed_date': isoformat(self.brewed_date),
            'bottled_date': isoformat(self.bottled_date),
            'volume_boiled': self.volume_boiled,
            'volume_in_fermenter': self.volume_in_fermenter,
            'volume_units': self.volume_units.name if self.volume_units else None,
            'original_gravity': self.original_gravity,
            'final_gravity': self.final_gravity,
            'brew_notes': self.brew_notes,
            'tasting_notes': self.tasting_notes,
            'recipe_url': self.recipe_url,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
