# tests/test_query_service.py
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from brewtrack.errors import ConflictError, NotFoundError, StorageError, ValidationError
from brewtrack.models import Association, Measurement
from brewtrack.services import query_service
from brewtrack.services.query_service import AssociationFilter, MeasurementFilter
from brewtrack.utils.pagination import decode_cursor

from conftest import at, make_batch, make_sensor


def _record(session, user, sensor, minutes, temperature=20.0):
    return query_service.record_measurement(session, user.id, sensor.uuid, temperature, "CELSIUS", at(minutes))


@pytest.fixture
def history(session, user, sensor, batch, second_batch):
    """
    ``sensor`` on ``batch`` during [0, 100], on ``second_batch`` from 100 on,
    with readings at t=-10, 50, 100, 150 and 200.
    """
    first = query_service.associate_sensor_to_batch(session, user.id, batch.uuid, sensor.uuid, "", at(0))
    query_service.update_association(session, user.id, first.uuid, "", at(0), at(100))
    query_service.associate_sensor_to_batch(session, user.id, second_batch.uuid, sensor.uuid, "", at(100))
    return {t: _record(session, user, sensor, t) for t in (-10, 50, 100, 150, 200)}


def test_list_batches_is_scoped_and_paginated(session, user, other_user):
    mine = [make_batch(user, f"Batch {i}") for i in range(3)]
    make_batch(other_user, "Not mine")

    page = query_service.list_batches(session, user.id, first=2)
    assert [b.id for b in page.items] == [mine[0].id, mine[1].id]
    assert page.has_next_page

    rest = query_service.list_batches(session, user.id, first=2, after=page.end_cursor)
    assert [b.id for b in rest.items] == [mine[2].id]
    assert not rest.has_next_page
    assert rest.has_previous_page


def test_list_sensors_is_scoped(session, user, other_user, sensor):
    make_sensor(other_user, "Foreign probe")
    connection = query_service.list_sensors(session, user.id)
    assert [s.id for s in connection.items] == [sensor.id]
    assert decode_cursor(connection.edges[0].cursor) == 1


def test_list_associations_filters(session, user, sensor, batch, second_batch, history):
    everything = query_service.list_associations(session, user.id)
    assert len(everything.items) == 2

    by_batch = query_service.list_associations(session, user.id, AssociationFilter(batch_id=batch.uuid))
    assert [a.batch_id for a in by_batch.items] == [batch.id]

    by_sensor = query_service.list_associations(session, user.id, AssociationFilter(sensor_id=sensor.uuid), first=1)
    assert by_sensor.items[0].batch_id == batch.id
    assert by_sensor.has_next_page


def test_list_measurements_by_sensor_orders_by_recorded_at(session, user, sensor, history):
    other_sensor = make_sensor(user, "Ambient")
    _record(session, user, other_sensor, 75)

    connection = query_service.list_measurements(session, user.id, MeasurementFilter(sensor_id=sensor.uuid))
    assert [m.id for m in connection.items] == [history[t].id for t in (-10, 50, 100, 150, 200)]


def test_list_measurements_by_batch_uses_attribution(session, user, batch, second_batch, history):
    first_batch = query_service.list_measurements(session, user.id, MeasurementFilter(batch_id=batch.uuid))
    assert [m.id for m in first_batch.items] == [history[50].id]

    second = query_service.list_measurements(session, user.id, MeasurementFilter(batch_id=second_batch.uuid))
    assert [m.id for m in second.items] == [history[100].id, history[150].id, history[200].id]


def test_batch_listing_agrees_with_resolver(session, user, sensor, batch, second_batch, history):
    """Every reading listed under a batch resolves to that batch, and vice versa."""
    for target in (batch, second_batch):
        listed = query_service.list_measurements(session, user.id, MeasurementFilter(batch_id=target.uuid)).items
        for measurement in listed:
            assert query_service.get_measurement_batch(session, user.id, measurement.uuid).id == target.id

    unattributed = history[-10]
    assert query_service.get_measurement_batch(session, user.id, unattributed.uuid) is None


def test_batch_listing_agrees_with_resolver_on_overlaps(session, user, sensor, batch):
    """With overlapping intervals a reading is listed only under the batch it resolves to."""
    later_batch = make_batch(user, "Overlap")
    session.add_all([
        Association(sensor=sensor, batch=batch, description="", associated_at=at(0), disassociated_at=at(100)),
        Association(sensor=sensor, batch=later_batch, description="", associated_at=at(20), disassociated_at=at(80)),
    ])
    session.commit()
    reading = _record(session, user, sensor, 50)

    assert query_service.list_measurements(session, user.id, MeasurementFilter(batch_id=batch.uuid)).items == []
    listed = query_service.list_measurements(session, user.id, MeasurementFilter(batch_id=later_batch.uuid)).items
    assert [m.id for m in listed] == [reading.id]


def test_list_measurements_combined_filters(session, user, sensor, second_batch, history):
    connection = query_service.list_measurements(
        session, user.id, MeasurementFilter(sensor_id=sensor.uuid, batch_id=second_batch.uuid), first=2
    )
    assert [m.id for m in connection.items] == [history[100].id, history[150].id]
    assert connection.has_next_page


def test_ownership_isolation_for_measurements(session, user, other_user, history):
    foreign_sensor = make_sensor(other_user, "Foreign")
    foreign_batch = make_batch(other_user, "Foreign batch")
    query_service.associate_sensor_to_batch(
        session, other_user.id, foreign_batch.uuid, foreign_sensor.uuid, "", at(0)
    )
    _record(session, other_user, foreign_sensor, 10)

    assert query_service.list_measurements(
        session, user.id, MeasurementFilter(sensor_id=foreign_sensor.uuid)
    ).items == []
    assert query_service.list_measurements(
        session, user.id, MeasurementFilter(batch_id=foreign_batch.uuid)
    ).items == []

    everything = query_service.list_measurements(session, user.id).items
    assert len(everything) == len(history)
    assert all(m.user_id == user.id and m.sensor.user_id == user.id for m in everything)


def test_cross_user_references_are_not_found(session, user, other_user, sensor, batch):
    foreign_sensor = make_sensor(other_user, "Foreign")
    foreign_batch = make_batch(other_user, "Foreign batch")

    with pytest.raises(NotFoundError):
        query_service.associate_sensor_to_batch(session, user.id, foreign_batch.uuid, sensor.uuid)
    with pytest.raises(NotFoundError):
        query_service.associate_sensor_to_batch(session, user.id, batch.uuid, foreign_sensor.uuid)
    with pytest.raises(NotFoundError):
        query_service.record_measurement(session, user.id, foreign_sensor.uuid, 20, "CELSIUS", at(0))
    with pytest.raises(NotFoundError):
        query_service.resolve_batch_for_measurement(session, user.id, foreign_sensor.uuid, at(0))
    assert session.query(Association).count() == 0


def test_associate_conflict_through_facade(session, user, sensor, batch, second_batch):
    query_service.associate_sensor_to_batch(session, user.id, batch.uuid, sensor.uuid)
    with pytest.raises(ConflictError):
        query_service.associate_sensor_to_batch(session, user.id, second_batch.uuid, sensor.uuid)
    assert session.query(Association).count() == 1


def test_resolve_batch_for_measurement(session, user, sensor, batch, history):
    assert query_service.resolve_batch_for_measurement(session, user.id, sensor.uuid, at(50)).id == batch.id


def test_record_measurement_validation(session, user, sensor):
    with pytest.raises(ValidationError) as excinfo:
        query_service.record_measurement(session, user.id, sensor.uuid, 20, "KELVIN", at(0))
    assert excinfo.value.field == "units"

    with pytest.raises(ValidationError) as excinfo:
        query_service.record_measurement(session, user.id, sensor.uuid, "warm", "CELSIUS", at(0))
    assert excinfo.value.field == "temperature"

    with pytest.raises(ValidationError) as excinfo:
        query_service.record_measurement(session, user.id, sensor.uuid, 20, "CELSIUS", "not a time")
    assert excinfo.value.field == "recorded_at"

    assert session.query(Measurement).count() == 0


@pytest.mark.parametrize("temperature", ["nan", "inf", "-Infinity", float("nan")])
def test_record_measurement_rejects_non_finite_temperatures(session, user, sensor, temperature):
    with pytest.raises(ValidationError) as excinfo:
        query_service.record_measurement(session, user.id, sensor.uuid, temperature, "CELSIUS", at(0))
    assert excinfo.value.field == "temperature"
    assert session.query(Measurement).count() == 0


def test_malformed_cursor_is_a_validation_error(session, user):
    with pytest.raises(ValidationError) as excinfo:
        query_service.list_batches(session, user.id, first=1, after="%%%")
    assert excinfo.value.field == "after"


def test_create_and_rename_sensor(session, user):
    sensor = query_service.create_sensor(session, user.id, " Carboy probe ")
    assert sensor.name == "Carboy probe"

    renamed = query_service.rename_sensor(session, user.id, sensor.uuid, "Conical probe")
    assert renamed.name == "Conical probe"

    with pytest.raises(ValidationError):
        query_service.create_sensor(session, user.id, "   ")


def test_create_batch_keeps_unset_fields_empty(session, user):
    batch = query_service.create_batch(session, user.id, {
        "name": "Saison",
        "volume_boiled": "0",
        "volume_units": "gallon",
        "brewed_date": "2024-03-01T12:00:00Z",
    })
    assert batch.volume_boiled == 0.0
    assert batch.volume_in_fermenter is None
    assert batch.bottled_date is None
    assert query_service.get_batch(session, user.id, batch.uuid).id == batch.id


def test_create_batch_rejects_non_finite_volumes(session, user):
    with pytest.raises(ValidationError) as excinfo:
        query_service.create_batch(session, user.id, {"name": "Saison", "volume_boiled": "inf"})
    assert excinfo.value.field == "volume_boiled"


def test_storage_errors_are_made_generic(session, user):
    with patch(
        "brewtrack.services.batch_service.BatchRepository.for_user",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    ):
        with pytest.raises(StorageError) as excinfo:
            query_service.list_batches(session, user.id)
    assert excinfo.value.message == query_service.GENERIC_STORAGE_MESSAGE
    assert "locked" not in str(excinfo.value)
