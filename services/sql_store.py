# services/sql_store.py
"""
SQLAlchemy-backed Record Store.

Each collection maps to one ORM table. Reads convert rows into the pydantic
records the services work with; ``write_all`` merges every given record and
deletes rows that are no longer present, all inside the session owned by
the current unit of work.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models
from services.exceptions import InternalError
from services.record_store import Collection, RecordStore, RECORD_TYPES

logger = logging.getLogger(__name__)


ORM_MODELS = {
     Collection.USERS: models.User,
     Collection.PROPERTIES: models.Property,
     Collection.RENTALS: models.Rental,
     Collection.PAYMENTS: models.Payment,
     Collection.TERMINATIONS: models.RentalTermination,
     Collection.RENEWALS: models.RentalRenewal,
}


class SqlRecordStore(RecordStore):
     """Record store over a SQLAlchemy session factory."""

     def __init__(self, session_factory: Callable[[], Session]) -> None:
          super().__init__()
          self._session_factory = session_factory
          self._local = threading.local()

     def _current_session(self) -> Optional[Session]:
          return getattr(self._local, "session", None)

     @contextmanager
     def _transaction(self):
          if self._current_session() is not None:
               yield
               return
          session = self._session_factory()
          self._local.session = session
          try:
               yield
               session.commit()
          except SQLAlchemyError as exc:
               session.rollback()
               logger.exception("Record store transaction failed")
               raise InternalError("Storage failure") from exc
          except Exception:
               session.rollback()
               raise
          finally:
               self._local.session = None
               session.close()

     def read_all(self, collection: Collection) -> list:
          collection = Collection(collection)
          model = ORM_MODELS[collection]
          record_type = RECORD_TYPES[collection]

          session = self._current_session()
          if session is not None:
               return [record_type.model_validate(row) for row in session.query(model).all()]

          session = self._session_factory()
          try:
               return [record_type.model_validate(row) for row in session.query(model).all()]
          finally:
               session.close()

     def write_all(self, collection: Collection, records: Sequence) -> None:
          collection = Collection(collection)
          if self._current_session() is None:
               with self.unit_of_work():
                    self.write_all(collection, records)
               return

          session = self._current_session()
          model = ORM_MODELS[collection]
          keep_ids = [r.id for r in records]

          # Full replace: drop rows that are gone, upsert the rest
          session.query(model).filter(model.id.notin_(keep_ids)).delete(synchronize_session=False)
          for record in records:
               session.merge(model(**record.model_dump()))
          session.flush()
