from datetime import date
from decimal import Decimal

import pytest

from schemas.payment import PaymentCreate, PaymentStatus
from schemas.rental import RentalStatus
from services.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from services.payment_service import PaymentService
from services.record_store import Collection


@pytest.fixture
def payments(store, clock):
    return PaymentService(store, clock=clock)


@pytest.fixture
def rental(add_rental):
    return add_rental("r_1", property_id="p_2", monthly_rent=Decimal("12000"))


def pay(month="2025-01", amount="12000", rental_id="r_1", method=None):
    return PaymentCreate(rental_id=rental_id, month=month, amount=Decimal(amount), method=method)


def test_create_payment(payments, store, tenant, rental):
    payment = payments.create_payment(tenant, pay())

    assert payment.status == PaymentStatus.PAID
    assert payment.amount == Decimal("12000")
    assert payment.method == "online_payment"
    assert [p.id for p in store.read_all(Collection.PAYMENTS)] == [payment.id]


def test_one_payment_per_month(payments, store, tenant, rental):
    payments.create_payment(tenant, pay())

    with pytest.raises(StateConflictError, match="already exists"):
        payments.create_payment(tenant, pay())
    payments.create_payment(tenant, pay(month="2025-02"))

    months = [p.month for p in store.read_all(Collection.PAYMENTS) if p.rental_id == "r_1"]
    assert sorted(months) == ["2025-01", "2025-02"]


def test_amount_must_match_rent(payments, tenant, rental):
    with pytest.raises(ValidationError, match="exactly"):
        payments.create_payment(tenant, pay(amount="11999.99"))


def test_only_the_rental_tenant_pays(payments, tenant2, rental):
    with pytest.raises(AuthorizationError):
        payments.create_payment(tenant2, pay())


def test_landlord_cannot_pay(payments, landlord, rental):
    with pytest.raises(AuthorizationError):
        payments.create_payment(landlord, pay())


def test_unknown_rental(payments, tenant):
    with pytest.raises(NotFoundError):
        payments.create_payment(tenant, pay(rental_id="r_missing"))


def test_rental_must_be_live(payments, tenant, add_rental):
    add_rental("r_pending", status=RentalStatus.PENDING)
    with pytest.raises(StateConflictError):
        payments.create_payment(tenant, pay(rental_id="r_pending"))


def test_terminating_rental_can_still_pay(payments, tenant, add_rental):
    add_rental("r_leaving", status=RentalStatus.TERMINATING)
    payment = payments.create_payment(tenant, pay(rental_id="r_leaving"))
    assert payment.rental_id == "r_leaving"


def test_list_payments_is_scoped_by_role(payments, tenant, tenant2, landlord, other_landlord, bank, rental, add_payment):
    add_payment("pay_1", "r_1", "2024-12")
    add_payment("pay_2", "r_1", "2025-01")

    assert [p.id for p in payments.list_payments(tenant)] == ["pay_2", "pay_1"]
    assert [p.id for p in payments.list_payments(landlord)] == ["pay_2", "pay_1"]
    assert payments.list_payments(tenant2) == []
    assert payments.list_payments(other_landlord) == []
    assert len(payments.list_payments(bank)) == 2


def test_receipt(payments, tenant, tenant2, rental, add_payment):
    add_payment("pay_1", "r_1", "2025-01")

    receipt = payments.get_receipt(tenant, "pay_1")

    assert receipt["receipt_number"] == "RCPT-pay_1"
    assert receipt["property"].id == "p_2"
    assert receipt["tenant"]["name"] == "Rahim Uddin"
    assert receipt["landlord"]["id"] == "u_landlord"
    with pytest.raises(AuthorizationError):
        payments.get_receipt(tenant2, "pay_1")
    with pytest.raises(NotFoundError):
        payments.get_receipt(tenant, "pay_missing")
