# services/__init__.py
from .exceptions import (
     RentalServiceError,
     ValidationError,
     AuthenticationError,
     AuthorizationError,
     NotFoundError,
     StateConflictError,
     InternalError,
)
from .record_store import Collection, RecordStore, MemoryRecordStore
from .sql_store import SqlRecordStore
from .availability import find_blocking_rental, is_blocked
from .rental_lifecycle import RentalLifecycleService
from .property_service import PropertyService
from .payment_service import PaymentService
from .user_service import UserService
from .dashboard_service import DashboardService

__all__ = [
     "RentalServiceError",
     "ValidationError",
     "AuthenticationError",
     "AuthorizationError",
     "NotFoundError",
     "StateConflictError",
     "InternalError",
     "Collection",
     "RecordStore",
     "MemoryRecordStore",
     "SqlRecordStore",
     "find_blocking_rental",
     "is_blocked",
     "RentalLifecycleService",
     "PropertyService",
     "PaymentService",
     "UserService",
     "DashboardService",
]
