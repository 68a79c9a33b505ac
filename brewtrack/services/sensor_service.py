import logging

from brewtrack.errors import NotFoundError, ValidationError
from brewtrack.models.Sensor import Sensor
from brewtrack.repositories.sensor_repository import SensorRepository

logger = logging.getLogger(__name__)


def _clean_name(name) -> str:
    name = (name or '').strip()
    if not name:
        raise ValidationError("This field is required.", field='name')
    return name


class SensorService:

    def __init__(self, session):
        self.repository = SensorRepository(session)

    def create_sensor(self, user_id: int, name: str) -> Sensor:
        sensor = self.repository.create(Sensor(name=_clean_name(name), user_id=user_id))
        logger.info("created sensor %s", sensor.uuid)
        return sensor

    def get_sensor(self, user_id: int, sensor_uuid: str) -> Sensor:
        sensor = self.repository.get_by_uuid_for_user(sensor_uuid, user_id)
        if sensor is None:
            raise NotFoundError.for_entity("Sensor")
        return sensor

    def rename_sensor(self, user_id: int, sensor_uuid: str, name: str) -> Sensor:
        sensor = self.get_sensor(user_id, sensor_uuid)
        sensor.name = _clean_name(name)
        return self.repository.update(sensor)

    def list_sensors(self, user_id: int):
        return self.repository.for_user(user_id)
