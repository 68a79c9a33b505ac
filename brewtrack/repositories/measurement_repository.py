from typing import Optional

from sqlalchemy.orm import aliased

from brewtrack.models.Association import Association
from brewtrack.models.Batch import Batch
from brewtrack.models.Measurement import Measurement
from brewtrack.models.Sensor import Sensor
from brewtrack.repositories.association_repository import attributed_association_id
from brewtrack.repositories.base_repository import BaseRepository


class MeasurementRepository(BaseRepository[Measurement]):

    def __init__(self, session):
        super().__init__(Measurement, session)

    def for_user(self, user_id: int, sensor_uuid: Optional[str] = None, batch_uuid: Optional[str] = None):
        """
        Query of the user's measurements ordered by recorded_at then id.

        ``batch_uuid`` keeps only readings attributed to that batch, using the
        same subquery as the attribution lookup.
        """
        query = self.session.query(Measurement).join(
            Sensor, Sensor.id == Measurement.sensor_id
        ).filter(
            Measurement.user_id == user_id,
            Sensor.user_id == user_id,
        )
        if sensor_uuid is not None:
            query = query.filter(Sensor.uuid == sensor_uuid)
        if batch_uuid is not None:
            attributed = aliased(Association)
            query = query.join(
                attributed, attributed.sensor_id == Measurement.sensor_id
            ).join(
                Batch, Batch.id == attributed.batch_id
            ).filter(
                attributed.id == attributed_association_id(Measurement.sensor_id, Measurement.recorded_at),
                Batch.uuid == batch_uuid,
                Batch.user_id == user_id,
            )
        return query.order_by(Measurement.recorded_at.asc(), Measurement.id.asc())
