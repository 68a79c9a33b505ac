import logging
import math
from typing import Any, Dict

from brewtrack.errors import NotFoundError, ValidationError
from brewtrack.models.Batch import Batch, VolumeUnit
from brewtrack.repositories.batch_repository import BatchRepository
from brewtrack.utils.timeutil import parse_timestamp

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = ('volume_boiled', 'volume_in_fermenter', 'original_gravity', 'final_gravity')
DATE_FIELDS = ('brewed_date', 'bottled_date')
TEXT_FIELDS = ('brew_notes', 'tasting_notes', 'recipe_url')


def _optional_float(value, field):
    # missing stays None so that 0.0 remains a real reading
    if value is None or value == '':
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("A number is required.", field=field) from None
    if not math.isfinite(number):
        raise ValidationError("A number is required.", field=field)
    return number


class BatchService:

    def __init__(self, session):
        self.repository = BatchRepository(session)

    def create_batch(self, user_id: int, data: Dict[str, Any]) -> Batch:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError("This field is required.", field='name')

        fields = {'name': name, 'user_id': user_id}
        for key in NUMERIC_FIELDS:
            fields[key] = _optional_float(data.get(key), key)
        for key in DATE_FIELDS:
            fields[key] = parse_timestamp(data.get(key), key, required=False)
        for key in TEXT_FIELDS:
            fields[key] = data.get(key) or ''
        if data.get('volume_units'):
            fields['volume_units'] = VolumeUnit.parse(data['volume_units'])

        batch = self.repository.create(Batch(**fields))
        logger.info("created batch %s", batch.uuid)
        return batch

    def get_batch(self, user_id: int, batch_uuid: str) -> Batch:
        batch = self.repository.get_by_uuid_for_user(batch_uuid, user_id)
        if batch is None:
            raise NotFoundError.for_entity("Batch")
        return batch

    def list_batches(self, user_id: int):
        return self.repository.for_user(user_id)
