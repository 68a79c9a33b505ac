# brewtrack/repositories/association_repository.py
"""
Persistence for sensor/batch association intervals.

``interval_contains`` and ``ATTRIBUTION_ORDER`` are the single definition of
"which association was active at instant t". Both the attribution lookup and
the measurement-by-batch listing are built from them.
"""
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError

from brewtrack.errors import ConflictError
from brewtrack.models.Association import Association
from brewtrack.models.Batch import Batch
from brewtrack.models.Sensor import Sensor
from brewtrack.repositories.base_repository import BaseRepository, storage_errors

# latest associated_at wins, then lowest id
ATTRIBUTION_ORDER = (Association.associated_at.desc(), Association.id.asc())

LISTING_ORDER = (Association.associated_at.asc(), Association.id.asc())


def interval_contains(instant):
    """associated_at <= instant AND (disassociated_at IS NULL OR disassociated_at >= instant)"""
    return and_(
        Association.associated_at <= instant,
        or_(
            Association.disassociated_at.is_(None),
            Association.disassociated_at >= instant,
        ),
    )


def attributed_association_id(sensor_id, instant):
    """
    Scalar subquery selecting the id of the association a reading taken by
    ``sensor_id`` at ``instant`` is attributed to. Both arguments may be
    literals or columns of an enclosing query (e.g. Measurement.sensor_id).
    """
    return (
        select(Association.id)
        .where(Association.sensor_id == sensor_id, interval_contains(instant))
        .order_by(*ATTRIBUTION_ORDER)
        .limit(1)
        .correlate_except(Association)
        .scalar_subquery()
    )


class AssociationRepository(BaseRepository[Association]):

    def __init__(self, session):
        super().__init__(Association, session)

    def _owned(self, user_id: int):
        # an association is visible only when both ends belong to the user
        return self.session.query(Association).join(
            Sensor, Sensor.id == Association.sensor_id
        ).join(
            Batch, Batch.id == Association.batch_id
        ).filter(
            Sensor.user_id == user_id,
            Batch.user_id == user_id,
        )

    def get_by_uuid_for_user(self, uuid: str, user_id: int) -> Optional[Association]:
        with storage_errors(self.session, "get Association"):
            return self._owned(user_id).filter(Association.uuid == uuid).first()

    def for_user(self, user_id: int, sensor_uuid: Optional[str] = None, batch_uuid: Optional[str] = None):
        """Query of the user's associations, oldest interval first"""
        query = self._owned(user_id)
        if sensor_uuid is not None:
            query = query.filter(Sensor.uuid == sensor_uuid)
        if batch_uuid is not None:
            query = query.filter(Batch.uuid == batch_uuid)
        return query.order_by(*LISTING_ORDER)

    def _open_query(self, sensor_id: int):
        return self.session.query(Association).filter(
            Association.sensor_id == sensor_id,
            Association.disassociated_at.is_(None),
        )

    def find_open(self, sensor_id: int) -> Optional[Association]:
        """Returns the open association of a sensor, if any"""
        with storage_errors(self.session, "find open Association"):
            return self._open_query(sensor_id).first()

    def find_open_for_update(self, sensor_id: int) -> Optional[Association]:
        """Same as find_open, locking the row where the backend supports it"""
        with storage_errors(self.session, "find open Association"):
            return self._open_query(sensor_id).with_for_update().first()

    def find_closed_after(self, sensor_id: int, instant) -> Optional[Association]:
        """A closed association of the sensor that is still running after ``instant``, if any"""
        with storage_errors(self.session, "find closed Association"):
            return self.session.query(Association).filter(
                Association.sensor_id == sensor_id,
                Association.disassociated_at > instant,
            ).order_by(Association.disassociated_at.desc()).first()

    def find_containing(self, sensor_id: int, instant) -> List[Association]:
        """Every association of the sensor whose interval contains ``instant``, best match first"""
        with storage_errors(self.session, "find containing Association"):
            return self.session.query(Association).filter(
                Association.sensor_id == sensor_id,
                interval_contains(instant),
            ).order_by(*ATTRIBUTION_ORDER).all()

    def create_open(self, association: Association) -> Association:
        """
        Inserts a new open association. A concurrent insert for the same sensor
        trips the partial unique index and is reported as a conflict.
        """
        with storage_errors(self.session, "create Association"):
            self.session.add(association)
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                raise ConflictError("Sensor already associated to Batch.") from None
        return association
