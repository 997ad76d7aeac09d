# services/record_store.py
"""
Record Store - the persistence seam used by every service.

The store exposes whole collections: ``read_all`` returns every record of
a collection and ``write_all`` replaces the collection. Services never see
a concrete storage format, so the same lifecycle code runs against the
in-memory store (tests, demos) and the SQLAlchemy store (deployments).

Single-writer discipline: ``unit_of_work()`` holds a store-wide re-entrant
lock for the whole read-validate-write sequence and commits or rolls back
as one unit, so an operation that fails validation leaves nothing behind.
"""
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Generator, Iterable, Optional, Sequence, TypeVar

from schemas.user import User
from schemas.property import Property
from schemas.rental import Rental, RentalTermination, RentalRenewal
from schemas.payment import Payment


class Collection(str, Enum):
     USERS = "users"
     PROPERTIES = "properties"
     RENTALS = "rentals"
     PAYMENTS = "payments"
     TERMINATIONS = "terminations"
     RENEWALS = "renewals"


RECORD_TYPES = {
     Collection.USERS: User,
     Collection.PROPERTIES: Property,
     Collection.RENTALS: Rental,
     Collection.PAYMENTS: Payment,
     Collection.TERMINATIONS: RentalTermination,
     Collection.RENEWALS: RentalRenewal,
}

T = TypeVar("T")


def find_by_id(records: Iterable[T], record_id: str) -> Optional[T]:
     """Return the record with ``id == record_id`` or None."""
     return next((r for r in records if r.id == record_id), None)


class RecordStore(ABC):
     """Abstract record store keyed by id."""

     def __init__(self) -> None:
          self._write_lock = threading.RLock()

     @abstractmethod
     def read_all(self, collection: Collection) -> list:
          """Return every record in ``collection``."""

     @abstractmethod
     def write_all(self, collection: Collection, records: Sequence) -> None:
          """Replace ``collection`` with ``records``."""

     @abstractmethod
     def _transaction(self):
          """Context manager making the enclosed writes atomic."""

     def generate_id(self, prefix: str) -> str:
          return f"{prefix}_{uuid.uuid4().hex[:12]}"

     @contextmanager
     def unit_of_work(self) -> Generator["RecordStore", None, None]:
          """
          Serialize a read-validate-write operation.

          Nested calls from the same thread join the outer unit of work.
          """
          with self._write_lock:
               with self._transaction():
                    yield self

     def snapshot(self, *collections: Collection) -> Dict[Collection, list]:
          """Read several collections without interleaving a writer."""
          with self._write_lock:
               return {Collection(c): self.read_all(c) for c in collections}


class MemoryRecordStore(RecordStore):
     """
     In-process store. Records are copied on the way in and out, so a
     caller mutating what it read never changes stored state by accident.
     """

     def __init__(self, seed: Optional[Dict[Collection, Sequence]] = None) -> None:
          super().__init__()
          self._data: Dict[Collection, list] = {c: [] for c in Collection}
          self._in_transaction = False
          for collection, records in (seed or {}).items():
               self.write_all(collection, records)

     def read_all(self, collection: Collection) -> list:
          collection = Collection(collection)
          with self._write_lock:
               return [r.model_copy(deep=True) for r in self._data[collection]]

     def write_all(self, collection: Collection, records: Sequence) -> None:
          collection = Collection(collection)
          record_type = RECORD_TYPES[collection]
          for record in records:
               if not isinstance(record, record_type):
                    raise TypeError(f"{collection.value} only holds {record_type.__name__} records")
          with self._write_lock:
               self._data[collection] = [r.model_copy(deep=True) for r in records]

     @contextmanager
     def _transaction(self):
          if self._in_transaction:
               yield
               return
          # Stored records are replaced, never mutated, so shallow list copies suffice
          backup = {c: list(records) for c, records in self._data.items()}
          self._in_transaction = True
          try:
               yield
          except Exception:
               self._data = backup
               raise
          finally:
               self._in_transaction = False
