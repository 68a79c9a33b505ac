from brewtrack.models.Sensor import Sensor
from brewtrack.repositories.base_repository import BaseRepository


class SensorRepository(BaseRepository[Sensor]):

    def __init__(self, session):
        super().__init__(Sensor, session)
