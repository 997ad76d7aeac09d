from collections import Counter
from datetime import date, timedelta
from decimal import Decimal

import pytest

from schemas.rental import RentalStatus, RequestStatus
from services.availability import find_blocking_rental
from services.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from services.record_store import Collection
from services.rental_lifecycle import MAX_OPEN_RENTALS_PER_TENANT, RentalLifecycleService

from tests.conftest import TODAY


def live_rentals_per_property(store, today=TODAY):
    rentals = store.read_all(Collection.RENTALS)
    return Counter(r.property_id for r in rentals if r.is_live_on(today))


def assert_request_status_consistent(store):
    """terminating <=> one pending termination, renewal_pending <=> one pending renewal."""
    rentals = store.read_all(Collection.RENTALS)
    terminations = store.read_all(Collection.TERMINATIONS)
    renewals = store.read_all(Collection.RENEWALS)
    for rental in rentals:
        pending_terms = [t for t in terminations if t.rental_id == rental.id and t.status == RequestStatus.PENDING]
        pending_renewals = [r for r in renewals if r.rental_id == rental.id and r.status == RequestStatus.PENDING]
        assert (rental.status == RentalStatus.TERMINATING) == (len(pending_terms) == 1)
        assert (rental.status == RentalStatus.RENEWAL_PENDING) == (len(pending_renewals) == 1)
        assert len(pending_terms) <= 1
        assert len(pending_renewals) <= 1


class TestRequestRental:

    def test_defaults_to_the_offered_window(self, lifecycle, tenant):
        rental = lifecycle.request_rental(tenant, "p_1")

        assert rental.status == RentalStatus.PENDING
        assert rental.start_date == date(2025, 3, 1)
        assert rental.end_date == date(2025, 5, 1)
        assert rental.landlord_id == "u_landlord"
        assert rental.monthly_rent == Decimal("18000")

    def test_duration_below_landlord_minimum_is_rejected(self, lifecycle, tenant):
        with pytest.raises(ValidationError, match="cannot be less than 2 months"):
            lifecycle.request_rental(tenant, "p_1", rental_duration=1)

        rental = lifecycle.request_rental(tenant, "p_1", rental_duration=2)
        assert rental.end_date == date(2025, 5, 1)

    def test_property_without_window_starts_today_for_a_year(self, lifecycle, tenant):
        rental = lifecycle.request_rental(tenant, "p_2")

        assert rental.start_date == TODAY
        assert rental.end_date == date(2026, 1, 15)

    def test_duration_over_24_months_is_rejected(self, lifecycle, tenant):
        with pytest.raises(ValidationError, match="cannot exceed 24 months"):
            lifecycle.request_rental(tenant, "p_2", rental_duration=25)

        rental = lifecycle.request_rental(tenant, "p_2", rental_duration=24)
        assert rental.end_date == date(2027, 1, 15)

    def test_only_tenants_can_request(self, lifecycle, landlord):
        with pytest.raises(AuthorizationError):
            lifecycle.request_rental(landlord, "p_1")

    def test_unknown_property(self, lifecycle, tenant):
        with pytest.raises(NotFoundError):
            lifecycle.request_rental(tenant, "p_missing")

    def test_duplicate_pending_request(self, lifecycle, tenant):
        lifecycle.request_rental(tenant, "p_1")
        with pytest.raises(StateConflictError, match="already have a pending request"):
            lifecycle.request_rental(tenant, "p_1")

    def test_occupied_property_cannot_be_requested(self, lifecycle, tenant2, active_rental):
        with pytest.raises(StateConflictError):
            lifecycle.request_rental(tenant2, "p_1")

    def test_blocked_even_when_flag_says_available(self, lifecycle, store, tenant2, add_rental):
        add_rental("r_live", property_id="p_2", end_date=date(2025, 6, 1))

        with pytest.raises(StateConflictError, match="active rental until 2025-06-01"):
            lifecycle.request_rental(tenant2, "p_2")

    def test_open_rental_limit(self, lifecycle, tenant, add_rental):
        for i in range(MAX_OPEN_RENTALS_PER_TENANT):
            add_rental(f"r_open_{i}", property_id=f"p_elsewhere_{i}", status=RentalStatus.PENDING)

        with pytest.raises(StateConflictError, match="up to 20"):
            lifecycle.request_rental(tenant, "p_2")

    def test_failed_request_writes_nothing(self, lifecycle, store, tenant):
        with pytest.raises(ValidationError):
            lifecycle.request_rental(tenant, "p_1", rental_duration=1)
        assert store.read_all(Collection.RENTALS) == []


class TestDecideRental:

    def test_approve_activates_and_marks_property_unavailable(self, lifecycle, tenant, landlord, get_record):
        rental = lifecycle.request_rental(tenant, "p_1")
        approved = lifecycle.decide_rental(landlord, rental.id, "approve")

        assert approved.status == RentalStatus.ACTIVE
        assert get_record(Collection.RENTALS, rental.id).status == RentalStatus.ACTIVE
        assert get_record(Collection.PROPERTIES, "p_1").available is False

    def test_second_approval_conflicts(self, lifecycle, landlord, active_rental):
        with pytest.raises(StateConflictError, match="not pending"):
            lifecycle.decide_rental(landlord, active_rental.id, "approve")

    def test_decline_cancels(self, lifecycle, tenant, landlord, get_record):
        rental = lifecycle.request_rental(tenant, "p_1")
        declined = lifecycle.decide_rental(landlord, rental.id, "decline")

        assert declined.status == RentalStatus.CANCELLED
        assert get_record(Collection.PROPERTIES, "p_1").available is True

        with pytest.raises(StateConflictError):
            lifecycle.decide_rental(landlord, rental.id, "approve")

    def test_only_the_owner_can_decide(self, lifecycle, tenant, other_landlord):
        rental = lifecycle.request_rental(tenant, "p_1")
        with pytest.raises(AuthorizationError):
            lifecycle.decide_rental(other_landlord, rental.id, "approve")

    def test_unknown_action(self, lifecycle, tenant, landlord):
        rental = lifecycle.request_rental(tenant, "p_1")
        with pytest.raises(ValidationError):
            lifecycle.decide_rental(landlord, rental.id, "maybe")

    def test_competing_requests_only_one_is_approved(self, lifecycle, store, tenant, tenant2, landlord, get_record):
        first = lifecycle.request_rental(tenant, "p_2")
        second = lifecycle.request_rental(tenant2, "p_2")

        lifecycle.decide_rental(landlord, first.id, "approve")
        with pytest.raises(StateConflictError, match="already occupies"):
            lifecycle.decide_rental(landlord, second.id, "approve")

        assert get_record(Collection.RENTALS, second.id).status == RentalStatus.PENDING
        assert live_rentals_per_property(store)["p_2"] == 1

    def test_approved_rental_blocks_its_property(self, store, active_rental):
        blocking = find_blocking_rental("p_1", store.read_all(Collection.RENTALS), TODAY)
        assert blocking.id == active_rental.id


class TestTermination:

    def test_two_months_notice_required(self, lifecycle, tenant, active_rental, get_record):
        with pytest.raises(ValidationError, match="at least 2 months"):
            lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=45))

        requested = TODAY + timedelta(days=65)
        termination = lifecycle.request_termination(tenant, active_rental.id, requested, "Moving abroad")

        rental = get_record(Collection.RENTALS, active_rental.id)
        assert termination.status == RequestStatus.PENDING
        assert termination.previous_end_date == date(2025, 5, 1)
        assert rental.status == RentalStatus.TERMINATING
        assert rental.end_date == requested

    def test_approval_completes_the_rental(self, lifecycle, store, tenant, landlord, active_rental, get_record):
        requested = TODAY + timedelta(days=65)
        termination = lifecycle.request_termination(tenant, active_rental.id, requested)

        decided = lifecycle.decide_termination(landlord, termination.id, approve=True)

        rental = get_record(Collection.RENTALS, active_rental.id)
        assert decided.status == RequestStatus.APPROVED
        assert rental.status == RentalStatus.COMPLETED
        assert rental.end_date == requested
        # Completion does not relist the property
        assert get_record(Collection.PROPERTIES, "p_1").available is False
        assert_request_status_consistent(store)

    def test_rejection_keeps_the_requested_end_date(self, lifecycle, store, tenant, landlord, active_rental, get_record):
        requested = TODAY + timedelta(days=65)
        termination = lifecycle.request_termination(tenant, active_rental.id, requested)

        decided = lifecycle.decide_termination(landlord, termination.id, approve=False)

        rental = get_record(Collection.RENTALS, active_rental.id)
        assert decided.status == RequestStatus.REJECTED
        assert rental.status == RentalStatus.ACTIVE
        assert rental.end_date == requested
        assert_request_status_consistent(store)

    def test_rejection_can_restore_the_previous_end_date(self, store, clock, tenant, landlord, active_rental, get_record):
        lifecycle = RentalLifecycleService(store, clock=clock, restore_end_date_on_reject=True)
        termination = lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=65))

        lifecycle.decide_termination(landlord, termination.id, approve=False)

        rental = get_record(Collection.RENTALS, active_rental.id)
        assert rental.status == RentalStatus.ACTIVE
        assert rental.end_date == date(2025, 5, 1)

    def test_only_active_rentals(self, lifecycle, tenant):
        pending = lifecycle.request_rental(tenant, "p_1")
        with pytest.raises(StateConflictError):
            lifecycle.request_termination(tenant, pending.id, TODAY + timedelta(days=90))

    def test_only_the_rental_tenant(self, lifecycle, tenant2, active_rental):
        with pytest.raises(AuthorizationError):
            lifecycle.request_termination(tenant2, active_rental.id, TODAY + timedelta(days=90))

    def test_second_request_while_pending(self, lifecycle, store, tenant, active_rental):
        lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=90))
        with pytest.raises(StateConflictError):
            lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=120))
        assert len(store.read_all(Collection.TERMINATIONS)) == 1
        assert_request_status_consistent(store)

    def test_deciding_twice(self, lifecycle, tenant, landlord, active_rental):
        termination = lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=90))
        lifecycle.decide_termination(landlord, termination.id, approve=True)

        with pytest.raises(StateConflictError, match="already been processed"):
            lifecycle.decide_termination(landlord, termination.id, approve=False)

    def test_other_landlord_cannot_decide(self, lifecycle, tenant, other_landlord, active_rental):
        termination = lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=90))
        with pytest.raises(AuthorizationError):
            lifecycle.decide_termination(other_landlord, termination.id, approve=True)

    def test_landlord_id_follows_the_property_owner(self, lifecycle, tenant, add_rental, get_record):
        add_rental("r_stale", property_id="p_2", landlord_id="u_previous_owner")

        termination = lifecycle.request_termination(tenant, "r_stale", TODAY + timedelta(days=90))

        assert termination.landlord_id == "u_landlord"
        assert get_record(Collection.RENTALS, "r_stale").landlord_id == "u_landlord"

    def test_date_must_fall_within_the_rental(self, lifecycle, store, tenant, add_rental, get_record):
        add_rental("r_future", property_id="p_2", start_date=date(2025, 6, 1), end_date=date(2026, 6, 1))

        with pytest.raises(ValidationError, match="before the rental start date"):
            lifecycle.request_termination(tenant, "r_future", date(2025, 4, 1))
        with pytest.raises(ValidationError, match=r"after the current end date \(2026-06-01\)"):
            lifecycle.request_termination(tenant, "r_future", date(2026, 7, 1))

        rental = get_record(Collection.RENTALS, "r_future")
        assert rental.status == RentalStatus.ACTIVE
        assert rental.end_date == date(2026, 6, 1)
        assert store.read_all(Collection.TERMINATIONS) == []

        lifecycle.request_termination(tenant, "r_future", date(2026, 6, 1))
        assert get_record(Collection.RENTALS, "r_future").status == RentalStatus.TERMINATING


class TestRenewal:

    @pytest.mark.parametrize("duration", [0, 25, -3])
    def test_out_of_range_duration(self, lifecycle, tenant, active_rental, duration):
        with pytest.raises(ValidationError, match="between 1 and 24"):
            lifecycle.request_renewal(tenant, active_rental.id, duration)

    @pytest.mark.parametrize("duration", [1, 24])
    def test_boundary_durations_accepted(self, lifecycle, store, tenant, active_rental, duration, get_record):
        renewal = lifecycle.request_renewal(tenant, active_rental.id, duration)

        assert renewal.renewal_duration == duration
        assert renewal.requested_start_date == date(2025, 5, 2)
        assert get_record(Collection.RENTALS, active_rental.id).status == RentalStatus.RENEWAL_PENDING
        assert_request_status_consistent(store)

    def test_approval_extends_the_rental(self, lifecycle, store, tenant, landlord, active_rental, get_record):
        renewal = lifecycle.request_renewal(tenant, active_rental.id, 6)
        lifecycle.decide_renewal(landlord, renewal.id, approve=True)

        rental = get_record(Collection.RENTALS, active_rental.id)
        assert rental.status == RentalStatus.ACTIVE
        assert rental.start_date == date(2025, 5, 2)
        assert rental.end_date == date(2025, 11, 2)
        assert get_record(Collection.RENEWALS, renewal.id).status == RequestStatus.APPROVED
        assert_request_status_consistent(store)

    def test_rejection_leaves_dates_alone(self, lifecycle, tenant, landlord, active_rental, get_record):
        renewal = lifecycle.request_renewal(tenant, active_rental.id, 6)
        lifecycle.decide_renewal(landlord, renewal.id, approve=False)

        rental = get_record(Collection.RENTALS, active_rental.id)
        assert rental.status == RentalStatus.ACTIVE
        assert rental.start_date == date(2025, 3, 1)
        assert rental.end_date == date(2025, 5, 1)

    def test_no_termination_while_renewal_pending(self, lifecycle, tenant, active_rental):
        lifecycle.request_renewal(tenant, active_rental.id, 6)

        with pytest.raises(StateConflictError):
            lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=90))
        with pytest.raises(StateConflictError):
            lifecycle.request_renewal(tenant, active_rental.id, 3)

    def test_open_ended_rental_renews_from_start(self, lifecycle, tenant, add_rental):
        add_rental("r_open", property_id="p_2", start_date=date(2024, 9, 1), end_date=None)

        renewal = lifecycle.request_renewal(tenant, "r_open", 12)

        assert renewal.requested_start_date == date(2024, 9, 2)


class TestListAgain:

    def test_blocked_while_rental_is_live(self, lifecycle, landlord, active_rental):
        with pytest.raises(StateConflictError, match="active rental until 2025-05-01"):
            lifecycle.list_property_again(landlord, "p_1")

    def test_relist_after_lapse_starts_at_last_end_date(self, store, landlord, add_rental):
        add_rental("r_done", property_id="p_2", start_date=date(2024, 1, 1), end_date=date(2025, 1, 1))
        lifecycle = RentalLifecycleService(store, clock=lambda: date(2025, 1, 2))

        prop = lifecycle.list_property_again(landlord, "p_2")

        assert prop.available is True
        assert prop.start_date == date(2025, 1, 1)
        assert prop.end_date == date(2025, 3, 1)
        assert prop.most_recent_rental_end_date == date(2025, 1, 1)

    def test_previous_end_date_overrides(self, store, landlord, add_rental):
        add_rental("r_done", property_id="p_2", start_date=date(2024, 1, 1), end_date=date(2025, 1, 1))
        lifecycle = RentalLifecycleService(store, clock=lambda: date(2025, 1, 2))

        prop = lifecycle.list_property_again(landlord, "p_2", previous_end_date=date(2025, 2, 1))

        assert prop.start_date == date(2025, 2, 1)
        assert prop.end_date == date(2025, 4, 1)

    def test_completed_rental_without_end_date(self, lifecycle, landlord, add_rental):
        add_rental("r_old", property_id="p_2", start_date=date(2024, 1, 10), end_date=None,
                   status=RentalStatus.COMPLETED)

        prop = lifecycle.list_property_again(landlord, "p_2")

        assert prop.start_date == date(2025, 1, 10)
        assert prop.end_date == date(2025, 3, 10)

    def test_never_rented_starts_today(self, lifecycle, landlord):
        prop = lifecycle.list_property_again(landlord, "p_2")
        assert prop.start_date == TODAY
        assert prop.end_date == date(2025, 3, 15)

    def test_not_owner(self, lifecycle, other_landlord):
        with pytest.raises(AuthorizationError):
            lifecycle.list_property_again(other_landlord, "p_2")


class TestReadSide:

    def test_terminations_visible_to_both_parties(self, lifecycle, tenant, tenant2, landlord, active_rental):
        lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=90))

        assert len(lifecycle.list_terminations(tenant, active_rental.id)) == 1
        assert len(lifecycle.list_terminations(landlord, active_rental.id)) == 1
        with pytest.raises(AuthorizationError):
            lifecycle.list_terminations(tenant2, active_rental.id)

    def test_landlord_renewals_are_enriched(self, lifecycle, tenant, landlord, other_landlord, active_rental):
        lifecycle.request_renewal(tenant, active_rental.id, 6)

        entries = lifecycle.list_landlord_renewals(landlord)

        assert len(entries) == 1
        assert entries[0]["rental"].id == active_rental.id
        assert entries[0]["property"].id == "p_1"
        assert entries[0]["tenant"] == {"id": "u_tenant", "name": "Rahim Uddin", "email": "rahim@example.com"}
        assert lifecycle.list_landlord_renewals(other_landlord) == []

    def test_landlord_terminations(self, lifecycle, tenant, landlord, active_rental):
        lifecycle.request_termination(tenant, active_rental.id, TODAY + timedelta(days=90))

        entries = lifecycle.list_landlord_terminations(landlord)

        assert [e["rental_id"] for e in entries] == [active_rental.id]


def test_single_live_rental_per_property_across_a_full_lifecycle(lifecycle, store, tenant, tenant2, landlord):
    first = lifecycle.request_rental(tenant, "p_2")
    second = lifecycle.request_rental(tenant2, "p_2")
    lifecycle.decide_rental(landlord, first.id, "approve")
    with pytest.raises(StateConflictError):
        lifecycle.decide_rental(landlord, second.id, "approve")
    lifecycle.decide_rental(landlord, second.id, "decline")

    termination = lifecycle.request_termination(tenant, first.id, TODAY + timedelta(days=70))
    assert all(count <= 1 for count in live_rentals_per_property(store).values())
    lifecycle.decide_termination(landlord, termination.id, approve=True)

    assert all(count <= 1 for count in live_rentals_per_property(store).values())
    assert_request_status_consistent(store)


class TestLapsedRentalAfterReletting:
    """An old rental whose end date has passed must not reclaim a re-let property."""

    @pytest.fixture
    def lapsed(self, add_rental):
        return add_rental("r_old", property_id="p_2", start_date=date(2024, 1, 1), end_date=date(2025, 1, 1))

    def relet(self, lifecycle, tenant2, landlord):
        lifecycle.list_property_again(landlord, "p_2")
        new = lifecycle.request_rental(tenant2, "p_2")
        return lifecycle.decide_rental(landlord, new.id, "approve")

    def test_renewal_request_is_refused(self, lifecycle, store, tenant, tenant2, landlord, lapsed, get_record):
        new = self.relet(lifecycle, tenant2, landlord)

        with pytest.raises(StateConflictError, match=f"rental {new.id} already occupies"):
            lifecycle.request_renewal(tenant, lapsed.id, 12)

        assert get_record(Collection.RENTALS, lapsed.id).status == RentalStatus.ACTIVE
        assert store.read_all(Collection.RENEWALS) == []
        assert live_rentals_per_property(store)["p_2"] == 1

    def test_renewal_pending_before_reletting_cannot_be_approved(
        self, lifecycle, store, tenant, tenant2, landlord, lapsed, get_record
    ):
        renewal = lifecycle.request_renewal(tenant, lapsed.id, 12)
        new = self.relet(lifecycle, tenant2, landlord)

        with pytest.raises(StateConflictError, match=f"rental {new.id} already occupies"):
            lifecycle.decide_renewal(landlord, renewal.id, approve=True)
        assert live_rentals_per_property(store)["p_2"] == 1

        lifecycle.decide_renewal(landlord, renewal.id, approve=False)

        old = get_record(Collection.RENTALS, lapsed.id)
        assert old.status == RentalStatus.ACTIVE
        assert old.end_date == date(2025, 1, 1)
        assert live_rentals_per_property(store)["p_2"] == 1
        assert_request_status_consistent(store)

    def test_termination_cannot_push_the_end_date_forward(
        self, lifecycle, store, tenant, tenant2, landlord, lapsed, get_record
    ):
        self.relet(lifecycle, tenant2, landlord)

        with pytest.raises(ValidationError, match="after the current end date"):
            lifecycle.request_termination(tenant, lapsed.id, TODAY + timedelta(days=90))

        old = get_record(Collection.RENTALS, lapsed.id)
        assert old.status == RentalStatus.ACTIVE
        assert old.end_date == date(2025, 1, 1)
        assert live_rentals_per_property(store)["p_2"] == 1

    def test_open_ended_rental_cannot_terminate_into_an_occupied_property(
        self, lifecycle, store, tenant, tenant2, add_rental
    ):
        add_rental("r_open", property_id="p_2", start_date=date(2024, 1, 1), end_date=None)
        add_rental("r_other", property_id="p_2", tenant_id="u_tenant2", start_date=TODAY, end_date=date(2026, 1, 15))

        with pytest.raises(StateConflictError, match="rental r_other already occupies"):
            lifecycle.request_termination(tenant, "r_open", TODAY + timedelta(days=90))
        assert store.read_all(Collection.TERMINATIONS) == []
