# brewtrack/models/Association.py
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from brewtrack.db import db
from brewtrack.errors import ValidationError
from brewtrack.utils.timeutil import isoformat


class Association(db.Model):
    """
    Time interval during which a sensor is attached to a batch.

    ``disassociated_at`` NULL means the association is still open. A sensor has
    at most one open association, enforced by a partial unique index.
    """
    __tablename__ = 'batch_sensor_associations'

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    sensor_id = Column(Integer, ForeignKey('sensors.id'), nullable=False)
    batch_id = Column(Integer, ForeignKey('batches.id'), nullable=False, index=True)
    description = Column(Text, nullable=False, default='')
    associated_at = Column(DateTime(timezone=True), nullable=False)
    disassociated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sensor = relationship("Sensor", back_populates="associations")
    batch = relationship("Batch", back_populates="associations")

    __table_args__ = (
        Index('idx_associations_sensor_disassociated', 'sensor_id', 'disassociated_at'),
        Index(
            'uq_associations_open_sensor', 'sensor_id',
            unique=True,
            sqlite_where=text('disassociated_at IS NULL'),
            postgresql_where=text('disassociated_at IS NULL'),
        ),
    )

    @property
    def is_open(self):
        return self.disassociated_at is None

    @staticmethod
    def validate_interval(associated_at, disassociated_at):
        """Both arguments must be aware datetimes (or None for an open end)."""
        if disassociated_at is not None and disassociated_at < associated_at:
            raise ValidationError(
                "disassociated_at must not be earlier than associated_at.",
                field='disassociated_at',
            )

    def to_dict(self):
        return {
            'id': self.uuid,
            'sensor_id': self.sensor.uuid if self.sensor else None,
            'batch_id': self.batch.uuid if self.batch else None,
            'description': self.description,
            'associated_at': isoformat(self.associated_at),
            'disassociated_at': isoformat(self.disassociated_at),
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
