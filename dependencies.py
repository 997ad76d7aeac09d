import logging
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Request
from jose import JWTError, jwt

import config
from schemas.user import Identity, User, UserRole
from services.exceptions import AuthenticationError, AuthorizationError
from services.record_store import RecordStore
from services.rental_lifecycle import RentalLifecycleService
from services.property_service import PropertyService
from services.payment_service import PaymentService
from services.user_service import UserService
from services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)


# Token handling
def create_access_token(user: User) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"id": user.id, "role": user.role.value, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def verify_token(request: Request) -> Identity:
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise AuthenticationError("Missing token")
    token = auth.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        return Identity(user_id=payload["id"], role=UserRole(payload["role"]))
    except (JWTError, KeyError, ValueError):
        logger.info("Rejected bearer token")
        raise AuthenticationError("Invalid token")


def require_role(role: UserRole) -> Callable[..., Identity]:
    """Dependency factory: the caller must hold ``role``."""
    def dependency(identity: Identity = Depends(verify_token)) -> Identity:
        if identity.role != role:
            raise AuthorizationError(f"Only {role.value} users can access this")
        return identity
    return dependency


# Storage and time
@lru_cache
def get_record_store() -> RecordStore:
    from database import SessionLocal
    from services.sql_store import SqlRecordStore
    return SqlRecordStore(SessionLocal)


def get_clock() -> Callable[[], date]:
    return date.today


# Services
def get_lifecycle_service(
    store: RecordStore = Depends(get_record_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> RentalLifecycleService:
    return RentalLifecycleService(
        store,
        clock=clock,
        restore_end_date_on_reject=config.RESTORE_END_DATE_ON_TERMINATION_REJECT,
    )


def get_property_service(
    store: RecordStore = Depends(get_record_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> PropertyService:
    return PropertyService(store, clock=clock)


def get_payment_service(
    store: RecordStore = Depends(get_record_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> PaymentService:
    return PaymentService(store, clock=clock)


def get_user_service(store: RecordStore = Depends(get_record_store)) -> UserService:
    return UserService(store)


def get_dashboard_service(
    store: RecordStore = Depends(get_record_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> DashboardService:
    return DashboardService(store, clock=clock, ministry_areas=config.MINISTRY_AREAS)
