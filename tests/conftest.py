from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from dependencies import create_access_token, get_clock, get_record_store
from main import create_app
from schemas.user import Identity, User, UserRole
from schemas.property import Property
from schemas.rental import Rental, RentalStatus
from schemas.payment import Payment, PaymentStatus
from services.record_store import Collection, MemoryRecordStore, find_by_id
from services.rental_lifecycle import RentalLifecycleService

TODAY = date(2025, 1, 15)
CREATED = datetime(2024, 12, 1, tzinfo=timezone.utc)

USERS = [
    User(id="u_tenant", name="Rahim Uddin", email="rahim@example.com", role=UserRole.TENANT, created_at=CREATED),
    User(id="u_tenant2", name="Karim Ahmed", email="karim@example.com", role=UserRole.TENANT, created_at=CREATED),
    User(id="u_landlord", name="Nasima Begum", email="nasima@example.com", role=UserRole.LANDLORD, created_at=CREATED),
    User(id="u_landlord2", name="Jamal Hossain", email="jamal@example.com", role=UserRole.LANDLORD, created_at=CREATED),
    User(id="u_bank", name="City Bank", email="credit@citybank.example", role=UserRole.BANK, created_at=CREATED),
    User(id="u_ministry", name="Housing Ministry", email="ministry@gov.example", role=UserRole.MINISTRY, created_at=CREATED),
]


def seed_properties():
    return [
        # Offered window 2025-03-01 .. 2025-05-01 => landlord minimum of 2 months
        Property(
            id="p_1",
            owner_id="u_landlord",
            address="House 12, Road 5, Dhanmondi, Dhaka",
            rent=Decimal("18000"),
            start_date=date(2025, 3, 1),
            end_date=date(2025, 5, 1),
            created_at=CREATED,
        ),
        # No window => default 12 month minimum, rental starts today
        Property(
            id="p_2",
            owner_id="u_landlord",
            address="Flat 3B, Section 10, Mirpur, Dhaka",
            rent=Decimal("12000"),
            created_at=CREATED,
        ),
        Property(
            id="p_3",
            owner_id="u_landlord2",
            address="Road 90, Gulshan 2, Dhaka",
            rent=Decimal("25000"),
            created_at=CREATED,
        ),
    ]


@pytest.fixture
def store():
    return MemoryRecordStore(seed={
        Collection.USERS: USERS,
        Collection.PROPERTIES: seed_properties(),
    })


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def tenant():
    return Identity(user_id="u_tenant", role=UserRole.TENANT)


@pytest.fixture
def tenant2():
    return Identity(user_id="u_tenant2", role=UserRole.TENANT)


@pytest.fixture
def landlord():
    return Identity(user_id="u_landlord", role=UserRole.LANDLORD)


@pytest.fixture
def other_landlord():
    return Identity(user_id="u_landlord2", role=UserRole.LANDLORD)


@pytest.fixture
def bank():
    return Identity(user_id="u_bank", role=UserRole.BANK)


@pytest.fixture
def ministry():
    return Identity(user_id="u_ministry", role=UserRole.MINISTRY)


@pytest.fixture
def lifecycle(store, clock):
    return RentalLifecycleService(store, clock=clock)


@pytest.fixture
def add_rental(store):
    """Write a rental straight into the store, bypassing the lifecycle checks."""
    def _add(rental_id, property_id="p_2", tenant_id="u_tenant", landlord_id="u_landlord",
             start_date=date(2024, 6, 1), end_date=date(2025, 6, 1),
             status=RentalStatus.ACTIVE, monthly_rent=Decimal("12000")):
        rental = Rental(
            id=rental_id,
            tenant_id=tenant_id,
            landlord_id=landlord_id,
            property_id=property_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            monthly_rent=monthly_rent,
            created_at=CREATED,
        )
        rentals = store.read_all(Collection.RENTALS)
        rentals.append(rental)
        store.write_all(Collection.RENTALS, rentals)
        return rental
    return _add


@pytest.fixture
def add_payment(store):
    def _add(payment_id, rental_id, month, amount=Decimal("12000"), status=PaymentStatus.PAID):
        payment = Payment(
            id=payment_id,
            rental_id=rental_id,
            amount=amount,
            month=month,
            status=status,
            timestamp=datetime(int(month[:4]), int(month[5:]), 5, tzinfo=timezone.utc),
            method="online_payment",
        )
        payments = store.read_all(Collection.PAYMENTS)
        payments.append(payment)
        store.write_all(Collection.PAYMENTS, payments)
        return payment
    return _add


@pytest.fixture
def get_record(store):
    def _get(collection, record_id):
        return find_by_id(store.read_all(collection), record_id)
    return _get


@pytest.fixture
def active_rental(lifecycle, tenant, landlord):
    """Approved rental of p_1 for u_tenant, 2025-03-01 .. 2025-05-01."""
    rental = lifecycle.request_rental(tenant, "p_1")
    return lifecycle.decide_rental(landlord, rental.id, "approve")


@pytest.fixture
def client(store, clock):
    app = create_app(init_database=False)
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        user = next(u for u in USERS if u.id == user_id)
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers
