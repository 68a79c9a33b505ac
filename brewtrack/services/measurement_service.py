import logging
import math

from brewtrack.errors import NotFoundError, ValidationError
from brewtrack.models.Measurement import Measurement, TemperatureUnit
from brewtrack.repositories.measurement_repository import MeasurementRepository
from brewtrack.repositories.sensor_repository import SensorRepository
from brewtrack.utils.timeutil import parse_timestamp

logger = logging.getLogger(__name__)


class MeasurementService:

    def __init__(self, session):
        self.repository = MeasurementRepository(session)
        self.sensors = SensorRepository(session)

    def record_measurement(self, user_id: int, sensor_uuid: str, temperature, units, recorded_at) -> Measurement:
        """Stores one temperature reading taken by one of the user's sensors."""
        recorded_at = parse_timestamp(recorded_at, 'recorded_at')
        unit = TemperatureUnit.parse(units)
        if isinstance(temperature, bool):
            raise ValidationError("Bad temperature value", field='temperature')
        try:
            value = float(temperature)
        except (TypeError, ValueError):
            raise ValidationError("Bad temperature value", field='temperature') from None
        if not math.isfinite(value):
            raise ValidationError("Bad temperature value", field='temperature')

        sensor = self.sensors.get_by_uuid_for_user(sensor_uuid, user_id)
        if sensor is None:
            raise NotFoundError.for_entity("Sensor")

        measurement = self.repository.create(Measurement(
            temperature=value,
            units=unit,
            recorded_at=recorded_at,
            sensor=sensor,
            user_id=user_id,
        ))
        logger.debug("recorded measurement %s for sensor %s", measurement.uuid, sensor.uuid)
        return measurement

    def get_measurement(self, user_id: int, measurement_uuid: str) -> Measurement:
        measurement = self.repository.get_by_uuid_for_user(measurement_uuid, user_id)
        if measurement is None:
            raise NotFoundError.for_entity("TemperatureMeasurement")
        return measurement

    def list_measurements(self, user_id: int, sensor_uuid=None, batch_uuid=None):
        return self.repository.for_user(user_id, sensor_uuid=sensor_uuid, batch_uuid=batch_uuid)
