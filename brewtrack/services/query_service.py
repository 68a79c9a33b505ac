# brewtrack/services/query_service.py
"""
User-scoped entry points used by the HTTP layer.

Every function takes the SQLAlchemy session and the requesting user's id
explicitly. Lookups are always filtered by owner, so a reference to another
user's row behaves like a missing row: listings come back empty and single
lookups raise NotFoundError.

This is the last place a StorageError may pass through; its message is
replaced by a generic one here.
"""
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from brewtrack.errors import StorageError
from brewtrack.models import Association, Batch, Measurement, Sensor
from brewtrack.services.association_service import AssociationService
from brewtrack.services.attribution_service import AttributionService
from brewtrack.services.batch_service import BatchService
from brewtrack.services.measurement_service import MeasurementService
from brewtrack.services.sensor_service import SensorService
from brewtrack.utils.pagination import Connection, paginate

logger = logging.getLogger(__name__)

GENERIC_STORAGE_MESSAGE = "Internal server error."


@dataclass(frozen=True)
class AssociationFilter:
    batch_id: Optional[str] = None
    sensor_id: Optional[str] = None


@dataclass(frozen=True)
class MeasurementFilter:
    sensor_id: Optional[str] = None
    batch_id: Optional[str] = None


def translate_storage_errors(func):
    @wraps(func)
    def wrapper(session, *args, **kwargs):
        try:
            return func(session, *args, **kwargs)
        except (StorageError, SQLAlchemyError) as exc:
            session.rollback()
            logger.error("%s failed: %s", func.__name__, exc)
            raise StorageError(GENERIC_STORAGE_MESSAGE) from exc
    return wrapper


# -------------------------
# Listings
# -------------------------
@translate_storage_errors
def list_batches(session, user_id: int, first: Optional[int] = None, after: Optional[str] = None) -> Connection:
    return paginate(BatchService(session).list_batches(user_id), first=first, after=after)


@translate_storage_errors
def list_sensors(session, user_id: int, first: Optional[int] = None, after: Optional[str] = None) -> Connection:
    return paginate(SensorService(session).list_sensors(user_id), first=first, after=after)


@translate_storage_errors
def list_associations(session, user_id: int, filters: Optional[AssociationFilter] = None,
                      first: Optional[int] = None, after: Optional[str] = None) -> Connection:
    filters = filters or AssociationFilter()
    query = AssociationService(session).find_associations(
        user_id, sensor_uuid=filters.sensor_id, batch_uuid=filters.batch_id
    )
    return paginate(query, first=first, after=after)


@translate_storage_errors
def list_measurements(session, user_id: int, filters: Optional[MeasurementFilter] = None,
                      first: Optional[int] = None, after: Optional[str] = None) -> Connection:
    filters = filters or MeasurementFilter()
    query = MeasurementService(session).list_measurements(
        user_id, sensor_uuid=filters.sensor_id, batch_uuid=filters.batch_id
    )
    return paginate(query, first=first, after=after)


# -------------------------
# Single lookups
# -------------------------
@translate_storage_errors
def get_batch(session, user_id: int, batch_ref: str) -> Batch:
    return BatchService(session).get_batch(user_id, batch_ref)


@translate_storage_errors
def get_sensor(session, user_id: int, sensor_ref: str) -> Sensor:
    return SensorService(session).get_sensor(user_id, sensor_ref)


@translate_storage_errors
def get_measurement(session, user_id: int, measurement_ref: str) -> Measurement:
    return MeasurementService(session).get_measurement(user_id, measurement_ref)


@translate_storage_errors
def resolve_batch_for_measurement(session, user_id: int, sensor_ref: str, recorded_at) -> Optional[Batch]:
    sensor = SensorService(session).get_sensor(user_id, sensor_ref)
    return AttributionService(session).resolve_batch_for_measurement(sensor.id, recorded_at)


@translate_storage_errors
def get_measurement_batch(session, user_id: int, measurement_ref: str) -> Optional[Batch]:
    """Batch a stored measurement is attributed to, or None."""
    measurement = MeasurementService(session).get_measurement(user_id, measurement_ref)
    return AttributionService(session).resolve_batch_for_measurement(
        measurement.sensor_id, measurement.recorded_at
    )


# -------------------------
# Writes
# -------------------------
@translate_storage_errors
def create_sensor(session, user_id: int, name: str) -> Sensor:
    return SensorService(session).create_sensor(user_id, name)


@translate_storage_errors
def rename_sensor(session, user_id: int, sensor_ref: str, name: str) -> Sensor:
    return SensorService(session).rename_sensor(user_id, sensor_ref, name)


@translate_storage_errors
def create_batch(session, user_id: int, data: Dict[str, Any]) -> Batch:
    return BatchService(session).create_batch(user_id, data)


@translate_storage_errors
def record_measurement(session, user_id: int, sensor_ref: str, temperature, units, recorded_at) -> Measurement:
    return MeasurementService(session).record_measurement(user_id, sensor_ref, temperature, units, recorded_at)


@translate_storage_errors
def associate_sensor_to_batch(session, user_id: int, batch_ref: str, sensor_ref: str,
                              description: Optional[str] = None, associated_at=None) -> Association:
    batch = BatchService(session).get_batch(user_id, batch_ref)
    sensor = SensorService(session).get_sensor(user_id, sensor_ref)
    return AssociationService(session).associate(batch, sensor, description, associated_at)


@translate_storage_errors
def update_association(session, user_id: int, association_ref: str, description: Optional[str],
                       associated_at, disassociated_at=None) -> Association:
    return AssociationService(session).update_association(
        association_ref, user_id, description, associated_at, disassociated_at
    )
