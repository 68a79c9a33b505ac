# brewtrack/services/attribution_service.py
import logging
from typing import Optional

from brewtrack.models.Batch import Batch
from brewtrack.repositories.association_repository import AssociationRepository
from brewtrack.utils.timeutil import ensure_utc, parse_timestamp

logger = logging.getLogger(__name__)


class AttributionService:
    """Read-only lookup of the batch a sensor was attached to at an instant."""

    def __init__(self, session):
        self.repository = AssociationRepository(session)

    def resolve_batch_for_measurement(self, sensor_id: int, recorded_at) -> Optional[Batch]:
        """
        Returns the batch of the association whose interval contains
        ``recorded_at``, or None when the sensor was not attached.

        Overlapping intervals are a data problem, not an error: the latest
        ``associated_at`` wins, then the lowest id, and a warning is logged.
        A handoff (one interval closing at the instant the next one opens)
        is not an overlap.
        """
        recorded_at = parse_timestamp(recorded_at, 'recorded_at')
        candidates = self.repository.find_containing(sensor_id, recorded_at)
        if not candidates:
            return None
        if _overlapping(candidates, recorded_at):
            logger.warning(
                "sensor %s has %d associations containing %s; using %s",
                sensor_id, len(candidates), recorded_at.isoformat(), candidates[0].uuid,
            )
        return candidates[0].batch


def _overlapping(candidates, instant) -> bool:
    chosen, others = candidates[0], candidates[1:]
    if not others:
        return False
    if ensure_utc(chosen.associated_at) != instant:
        return True
    return any(ensure_utc(other.disassociated_at) != instant for other in others)
