# brewtrack/services/association_service.py
"""
Association engine: attaches sensors to batches over time.

A sensor has at most one open association. ``associate`` never closes a
previous association on its own; callers close it with ``update_association``
first. Closed associations are kept for attribution and never reopened.
"""
import logging
from typing import Optional

from brewtrack.errors import ConflictError, NotFoundError, ValidationError
from brewtrack.models.Association import Association
from brewtrack.repositories.association_repository import AssociationRepository
from brewtrack.utils.timeutil import parse_timestamp, utcnow

logger = logging.getLogger(__name__)


class AssociationService:

    def __init__(self, session):
        self.repository = AssociationRepository(session)

    def associate(self, batch, sensor, description: Optional[str] = "", associated_at=None) -> Association:
        """
        Opens a new association between ``sensor`` and ``batch``.

        Ownership of both rows is checked by the caller. Raises ConflictError
        when the sensor already has an open association, whatever its batch,
        and ValidationError when ``associated_at`` falls before the end of one
        of its closed associations.
        """
        if associated_at is None:
            associated_at = utcnow()
        else:
            associated_at = parse_timestamp(associated_at, 'associated_at')

        existing = self.repository.find_open_for_update(sensor.id)
        if existing is not None:
            logger.info("sensor %s already has open association %s", sensor.uuid, existing.uuid)
            self.repository.session.rollback()
            raise ConflictError("Sensor already associated to Batch.")

        earlier = self.repository.find_closed_after(sensor.id, associated_at)
        if earlier is not None:
            self.repository.session.rollback()
            raise ValidationError(
                "Sensor was already associated to a Batch at that time.", field='associated_at'
            )

        association = Association(
            sensor=sensor,
            batch=batch,
            description=description or '',
            associated_at=associated_at,
        )
        association = self.repository.create_open(association)
        logger.info("associated sensor %s to batch %s as %s", sensor.uuid, batch.uuid, association.uuid)
        return association

    def update_association(self, association_uuid: str, user_id: int, description: Optional[str],
                           associated_at, disassociated_at=None) -> Association:
        """
        Overwrites description and both interval bounds (PUT semantics).

        ``description=None`` clears it and ``disassociated_at=None`` leaves the
        association open. An association that is already closed cannot be
        reopened.
        """
        association = self.repository.get_by_uuid_for_user(association_uuid, user_id)
        if association is None:
            raise NotFoundError.for_entity("BatchSensorAssociation")

        associated_at = parse_timestamp(associated_at, 'associated_at')
        disassociated_at = parse_timestamp(disassociated_at, 'disassociated_at', required=False)
        Association.validate_interval(associated_at, disassociated_at)

        if disassociated_at is None and not association.is_open:
            raise ValidationError("A closed association cannot be reopened.", field='disassociated_at')

        association.description = description or ''
        association.associated_at = associated_at
        association.disassociated_at = disassociated_at
        association = self.repository.update(association)
        logger.info("updated association %s", association.uuid)
        return association

    def find_open_association(self, sensor_id: int) -> Optional[Association]:
        return self.repository.find_open(sensor_id)

    def find_associations(self, user_id: int, sensor_uuid: Optional[str] = None, batch_uuid: Optional[str] = None):
        """Ordered query, ready to hand to paginate()"""
        return self.repository.for_user(user_id, sensor_uuid=sensor_uuid, batch_uuid=batch_uuid)
