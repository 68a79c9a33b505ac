import logging
from contextlib import contextmanager
from typing import TypeVar, Generic, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from brewtrack.errors import StorageError

T = TypeVar('T')

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(session: Session, action: str):
    """Rolls back and re-raises any SQLAlchemy failure as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("%s failed", action)
        raise StorageError(f"{action} failed: {exc}") from exc


class BaseRepository(Generic[T]):

    def __init__(self, model_class, session: Session):
        self.model_class = model_class
        self.session = session

    def create(self, obj: T) -> T:
        """Inserts a new row and commits"""
        with storage_errors(self.session, f"create {self.model_class.__name__}"):
            self.session.add(obj)
            self.session.commit()
        return obj

    def get_by_uuid_for_user(self, uuid: str, user_id: int) -> Optional[T]:
        """Looks up by public identifier, only among rows owned by ``user_id``"""
        with storage_errors(self.session, f"get {self.model_class.__name__}"):
            return self.session.query(self.model_class).filter(
                self.model_class.uuid == uuid,
                self.model_class.user_id == user_id,
            ).first()

    def for_user(self, user_id: int):
        """Query of every row owned by ``user_id``, ordered by primary key"""
        return self.session.query(self.model_class).filter(
            self.model_class.user_id == user_id
        ).order_by(self.model_class.id.asc())

    def update(self, obj: T) -> T:
        """Commits pending changes on ``obj``"""
        with storage_errors(self.session, f"update {self.model_class.__name__}"):
            self.session.add(obj)
            self.session.commit()
        return obj
