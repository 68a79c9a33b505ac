# brewtrack/models/Measurement.py
import enum
import uuid

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index, Enum
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from brewtrack.db import db
from brewtrack.errors import ValidationError
from brewtrack.utils.timeutil import isoformat


class TemperatureUnit(enum.Enum):
    FAHRENHEIT = 'FAHRENHEIT'
    CELSIUS = 'CELSIUS'

    @classmethod
    def parse(cls, token):
        """Map an external unit token to the enum; anything else is invalid input."""
        if isinstance(token, cls):
            return token
        try:
            return cls[str(token).strip().upper()]
        except KeyError:
            raise ValidationError(f"Unsupported temperature units: {token!r}", field='units') from None


class Measurement(db.Model):
    """
    A temperature reading. There is no batch column: the batch is derived from
    whichever association of the sensor contained ``recorded_at``.
    """
    __tablename__ = 'temperature_measurements'

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    temperature = Column(Float, nullable=False)
    units = Column(Enum(TemperatureUnit), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False)  # when the reading happened
    sensor_id = Column(Integer, ForeignKey('sensors.id'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())  # when the row was stored
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sensor = relationship("Sensor", back_populates="measurements")
    created_by = relationship("User")

    __table_args__ = (
        Index('idx_measurements_sensor_recorded', 'sensor_id', 'recorded_at'),
    )

    @validates('units')
    def _validate_units(self, key, value):
        return TemperatureUnit.parse(value)

    def to_dict(self):
        return {
            'id': self.uuid,
            'temperature': self.temperature,
            'units': self.units.name,
            'recorded_at': isoformat(self.recorded_at),
            'sensor_id': self.sensor.uuid if self.sensor else None,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
