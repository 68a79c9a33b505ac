from brewtrack.models.Batch import Batch
from brewtrack.repositories.base_repository import BaseRepository


class BatchRepository(BaseRepository[Batch]):

    def __init__(self, session):
        super().__init__(Batch, session)
