from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.access.exceptions import ConcurrentModification


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def insert(self, record, conflict_message: str):
        """Add and flush a row; a unique-key violation means a concurrent writer won."""
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConcurrentModification(conflict_message) from e
        return record
