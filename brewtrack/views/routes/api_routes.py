# brewtrack/views/routes/api_routes.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from brewtrack.db import db
from brewtrack.errors import ValidationError
from brewtrack.services import query_service as service
from brewtrack.services.query_service import AssociationFilter, MeasurementFilter
from brewtrack.utils.decorators.decorators import api_errors

api = Blueprint("api", __name__, url_prefix="/api/v1")


def _payload():
    """JSON body, or the form for clients posting url-encoded data."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _page_args():
    raw_first = request.args.get("first")
    if raw_first in (None, ""):
        first = current_app.config["BREWTRACK_DEFAULT_PAGE_SIZE"]
    else:
        try:
            first = int(raw_first)
        except ValueError:
            raise ValidationError("first must be an integer.", field="first") from None
    first = min(first, current_app.config["BREWTRACK_MAX_PAGE_SIZE"])
    return first, request.args.get("after") or None


def _connection_response(connection):
    return jsonify({"success": True, **connection.to_dict()})


# -------------------------
# Batches
# -------------------------
@api.route("/batches", methods=["GET"])
@login_required
@api_errors
def list_batches():
    first, after = _page_args()
    return _connection_response(service.list_batches(db.session, current_user.id, first=first, after=after))


@api.route("/batches", methods=["POST"])
@login_required
@api_errors
def create_batch():
    batch = service.create_batch(db.session, current_user.id, _payload())
    return jsonify({"success": True, "batch": batch.to_dict()}), 201


@api.route("/batches/<batch_id>", methods=["GET"])
@login_required
@api_errors
def get_batch(batch_id):
    batch = service.get_batch(db.session, current_user.id, batch_id)
    return jsonify({"success": True, "batch": batch.to_dict()})


# -------------------------
# Sensors
# -------------------------
@api.route("/sensors", methods=["GET"])
@login_required
@api_errors
def list_sensors():
    first, after = _page_args()
    return _connection_response(service.list_sensors(db.session, current_user.id, first=first, after=after))


@api.route("/sensors", methods=["POST"])
@login_required
@api_errors
def create_sensor():
    sensor = service.create_sensor(db.session, current_user.id, _payload().get("name"))
    return jsonify({"success": True, "sensor": sensor.to_dict()}), 201


@api.route("/sensors/<sensor_id>", methods=["GET"])
@login_required
@api_errors
def get_sensor(sensor_id):
    sensor = service.get_sensor(db.session, current_user.id, sensor_id)
    return jsonify({"success": True, "sensor": sensor.to_dict()})


@api.route("/sensors/<sensor_id>", methods=["PATCH"])
@login_required
@api_errors
def rename_sensor(sensor_id):
    sensor = service.rename_sensor(db.session, current_user.id, sensor_id, _payload().get("name"))
    return jsonify({"success": True, "sensor": sensor.to_dict()})


# -------------------------
# Associations
# -------------------------
@api.route("/associations", methods=["GET"])
@login_required
@api_errors
def list_associations():
    first, after = _page_args()
    filters = AssociationFilter(
        batch_id=request.args.get("batch_id"),
        sensor_id=request.args.get("sensor_id"),
    )
    return _connection_response(
        service.list_associations(db.session, current_user.id, filters, first=first, after=after)
    )


@api.route("/associations", methods=["POST"])
@login_required
@api_errors
def associate_sensor_to_batch():
    data = _payload()
    association = service.associate_sensor_to_batch(
        db.session,
        current_user.id,
        batch_ref=data.get("batch_id"),
        sensor_ref=data.get("sensor_id"),
        description=data.get("description"),
        associated_at=data.get("associated_at") or None,
    )
    return jsonify({"success": True, "association": association.to_dict()}), 201


@api.route("/associations/<association_id>", methods=["PUT"])
@login_required
@api_errors
def update_association(association_id):
    data = _payload()
    association = service.update_association(
        db.session,
        current_user.id,
        association_id,
        description=data.get("description"),
        associated_at=data.get("associated_at"),
        disassociated_at=data.get("disassociated_at") or None,
    )
    return jsonify({"success": True, "association": association.to_dict()})


# -------------------------
# Measurements
# -------------------------
@api.route("/measurements", methods=["GET"])
@login_required
@api_errors
def list_measurements():
    first, after = _page_args()
    filters = MeasurementFilter(
        sensor_id=request.args.get("sensor_id"),
        batch_id=request.args.get("batch_id"),
    )
    return _connection_response(
        service.list_measurements(db.session, current_user.id, filters, first=first, after=after)
    )


@api.route("/measurements", methods=["POST"])
@login_required
@api_errors
def record_measurement():
    data = _payload()
    metric = data.get("metric", "temperature")
    if metric != "temperature":
        raise ValidationError("Unsupported metric", field="metric")
    measurement = service.record_measurement(
        db.session,
        current_user.id,
        sensor_ref=data.get("sensor_id"),
        temperature=data.get("value", data.get("temperature")),
        units=data.get("units"),
        recorded_at=data.get("recorded_at"),
    )
    return jsonify({"success": True, "measurement": measurement.to_dict()}), 201


@api.route("/measurements/<measurement_id>", methods=["GET"])
@login_required
@api_errors
def get_measurement(measurement_id):
    measurement = service.get_measurement(db.session, current_user.id, measurement_id)
    return jsonify({"success": True, "measurement": measurement.to_dict()})


@api.route("/measurements/<measurement_id>/batch", methods=["GET"])
@login_required
@api_errors
def get_measurement_batch(measurement_id):
    batch = service.get_measurement_batch(db.session, current_user.id, measurement_id)
    return jsonify({"success": True, "batch": batch.to_dict() if batch else None})
