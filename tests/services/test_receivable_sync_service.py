"""
Tests for ReceivableSyncService.

Covers:
- One debt per reservation across repeated edits
- Placeholder company recreation for orphaned references
- Sync failures surface as warnings; the reservation save still succeeds
- Payments, debt deletion and the reservation-delete policy
- Resync repair pass and company balances
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from tour_config import DebtDeletePolicy, LedgerSettings
from tour_kernel.domain.dtos import Company, Debt, DebtStatus, Reservation
from tour_kernel.exceptions import DebtNotFoundError, MalformedAmountError, StoreError
from tour_services.receivable_sync_service import ReceivableSyncService, total_outstanding
from tour_services.results import SyncStatus


def make_reservation(**overrides) -> Reservation:
    fields = dict(
        id="res-1",
        tour_date=date(2024, 7, 10),
        total_amount="400",
        currency="EUR",
        company_id="co-1",
        company_name="Blue Agency",
        serial_number="R-0001",
    )
    fields.update(overrides)
    return Reservation(**fields)


def make_service(store, clock, settings=None, **kwargs):
    counter = iter(range(1, 10_000))
    return ReceivableSyncService(
        store,
        clock=clock,
        settings=settings or LedgerSettings(),
        reservations=store,
        sources=store,
        id_factory=lambda: f"id-{next(counter)}",
        **kwargs,
    )


@pytest.fixture
def store(memory_store):
    memory_store.add(Company(id="co-1", name="Blue Agency", category="Agency"))
    return memory_store


@pytest.fixture
def service(store, clock, settings):
    return make_service(store, clock, settings)


class TestSyncReservation:
    def test_creates_debt(self, service, store):
        result = service.sync_reservation(make_reservation(amount_paid="100"))

        assert result.status is SyncStatus.CREATED
        debt = store.debts[result.debt_id]
        assert debt.reservation_id == "res-1"
        assert debt.amount == Decimal("400")
        assert debt.paid_amount == Decimal("100")
        assert debt.status is DebtStatus.PARTIALLY_PAID
        assert debt.company_name == "Blue Agency"

    def test_repeated_edits_keep_one_debt(self, service, store):
        """N edits of the same reservation leave exactly one debt."""
        for total in ["400", "450", "500", "520", "480"]:
            service.sync_reservation(make_reservation(total_amount=total))

        debts = [d for d in store.debts.values() if d.reservation_id == "res-1"]
        assert len(debts) == 1
        assert debts[0].amount == Decimal("480")

    def test_update_keeps_id(self, service):
        first = service.sync_reservation(make_reservation())
        second = service.sync_reservation(make_reservation(total_amount="999"))
        assert second.status is SyncStatus.UPDATED
        assert second.debt_id == first.debt_id

    def test_status_rederived_from_amounts(self, service, store):
        service.sync_reservation(make_reservation(amount_paid="400"))
        [debt] = store.debts.values()
        assert debt.status is DebtStatus.PAID

    def test_ineligible_without_debt_skipped(self, service, store):
        result = service.sync_reservation(make_reservation(company_id=None))
        assert result.status is SyncStatus.SKIPPED
        assert store.debts == {}

    def test_blank_currency_uses_reservation_default(self, service, store):
        service.sync_reservation(make_reservation(currency=""))
        [debt] = store.debts.values()
        assert debt.currency == "EUR"


class TestOrphanRepair:
    def test_placeholder_named_from_surviving_debt(self, service, store, captured_logs):
        store.add(Debt(id="old", company_id="co-9", amount=Decimal("1"), currency="EUR",
                       company_name="Sunset Travel"))

        result = service.sync_reservation(make_reservation(company_id="co-9", company_name="Other"))

        company = store.companies["co-9"]
        assert result.placeholder_company_id == "co-9"
        assert company.name == "Sunset Travel"
        assert company.category == "Agency"
        assert company.is_placeholder
        assert any(r["message"] == "placeholder_company_created" for r in captured_logs())

    def test_placeholder_named_from_reservation(self, service, store):
        service.sync_reservation(make_reservation(company_id="co-9", company_name="Moon Tours"))
        assert store.companies["co-9"].name == "Moon Tours"

    def test_placeholder_default_name(self, service, store):
        service.sync_reservation(make_reservation(company_id="co-9", company_name=None))
        assert store.companies["co-9"].name == "Reconstructed Company"

    def test_existing_company_untouched(self, service, store):
        result = service.sync_reservation(make_reservation())
        assert result.placeholder_company_id is None
        assert not store.companies["co-1"].is_placeholder

    def test_created_once(self, service, store):
        service.sync_reservation(make_reservation(company_id="co-9"))
        service.sync_reservation(make_reservation(company_id="co-9", total_amount="10"))
        assert [w for w in store.writes if w[0] == "upsert_company"] == [("upsert_company", "co-9")]


class TestSyncFailure:
    def test_store_failure_returned_as_warning(self, service, store, captured_logs):
        store.fail("upsert_debt")

        result = service.sync_reservation(make_reservation())

        assert result.status is SyncStatus.FAILED
        assert not result.ok
        assert "res-1" in result.warning
        warnings = [r for r in captured_logs() if r["message"] == "debt_sync_failed"]
        assert warnings and warnings[0]["level"] == "WARNING"
        assert warnings[0]["reservation_id"] == "res-1"

    def test_save_reservation_succeeds_when_sync_fails(self, service, store):
        store.fail("get_debt_by_reservation")

        saved = service.save_reservation(make_reservation())

        assert saved.saved
        assert "res-1" in store.reservations
        assert saved.sync.status is SyncStatus.FAILED
        assert len(saved.warnings) == 1

    def test_save_reservation_propagates_primary_failure(self, service, store):
        store.fail("upsert_reservation")
        with pytest.raises(StoreError):
            service.save_reservation(make_reservation())
        assert store.debts == {}

    def test_save_reservation_fills_currency(self, service, store):
        service.save_reservation(make_reservation(currency=None))
        assert store.reservations["res-1"].currency == "EUR"

    def test_save_reservation_clean(self, service):
        saved = service.save_reservation(make_reservation())
        assert saved.warnings == ()
        assert saved.sync.status is SyncStatus.CREATED


class TestRecordPayment:
    def test_payment_updates_debt_and_reservation(self, service, store, clock):
        service.save_reservation(make_reservation())
        [debt] = store.debts.values()

        updated = service.record_payment(debt.id, "150", method="cash", payer="Guide")

        assert updated.paid_amount == Decimal("150")
        assert updated.status is DebtStatus.PARTIALLY_PAID
        assert store.debts[debt.id] == updated
        [payment] = store.list_payments(debt.id)
        assert payment.amount == Decimal("150")
        assert payment.currency == "EUR"
        assert payment.paid_on == clock.today()
        assert payment.method == "cash"
        assert store.reservations["res-1"].amount_paid == Decimal("150")

    def test_payments_accumulate_to_paid(self, service, store):
        service.sync_reservation(make_reservation())
        [debt] = store.debts.values()
        service.record_payment(debt.id, "300")
        updated = service.record_payment(debt.id, Decimal("100"), paid_on=date(2024, 7, 1))
        assert updated.status is DebtStatus.PAID
        assert len(store.list_payments(debt.id)) == 2

    @pytest.mark.parametrize("amount", ["0", "-10"])
    def test_non_positive_rejected(self, service, store, amount):
        service.sync_reservation(make_reservation())
        [debt] = store.debts.values()
        with pytest.raises(ValueError):
            service.record_payment(debt.id, amount)
        assert store.payments == []

    def test_malformed_rejected(self, service, store):
        service.sync_reservation(make_reservation())
        [debt] = store.debts.values()
        with pytest.raises(MalformedAmountError):
            service.record_payment(debt.id, "lots")

    def test_unknown_debt(self, service):
        with pytest.raises(DebtNotFoundError):
            service.record_payment("missing", "10")

    def test_failed_payment_insert_leaves_debt_unchanged(self, service, store):
        """A payment row that cannot be written leaves no collected amount behind."""
        service.save_reservation(make_reservation())
        [debt] = store.debts.values()
        store.fail("add_payment")

        with pytest.raises(StoreError):
            service.record_payment(debt.id, "100")

        assert store.debts[debt.id].paid_amount == Decimal("0")
        assert store.debts[debt.id].status is DebtStatus.UNPAID
        assert store.list_payments(debt.id) == []
        assert store.reservations["res-1"].amount_paid is None

    def test_failed_reservation_mirror_restores_debt(self, service, store):
        service.save_reservation(make_reservation())
        [debt] = store.debts.values()
        store.fail("upsert_reservation", "res-1")

        with pytest.raises(StoreError):
            service.record_payment(debt.id, "100")

        assert store.debts[debt.id] == debt
        assert store.payments == []

        store.heal()
        updated = service.record_payment(debt.id, "100")
        assert updated.paid_amount == Decimal("100")
        assert len(store.list_payments(debt.id)) == 1

    def test_repairs_missing_company(self, service, store):
        service.sync_reservation(make_reservation())
        del store.companies["co-1"]
        [debt] = store.debts.values()
        service.record_payment(debt.id, "10")
        assert store.companies["co-1"].is_placeholder
        assert store.companies["co-1"].name == "Blue Agency"


class TestDeleteDebt:
    def test_delete(self, service, store):
        service.sync_reservation(make_reservation())
        [debt] = store.debts.values()
        service.delete_debt(debt.id)
        assert store.debts == {}

    def test_delete_repairs_company_first(self, service, store):
        service.sync_reservation(make_reservation())
        del store.companies["co-1"]
        [debt] = store.debts.values()

        service.delete_debt(debt.id)

        ops = [w[0] for w in store.writes]
        assert ops.index("upsert_company") < ops.index("delete_debt")

    def test_delete_missing(self, service):
        with pytest.raises(DebtNotFoundError):
            service.delete_debt("nope")


class TestReservationDeletePolicy:
    def _service(self, store, clock, policy):
        return make_service(store, clock, LedgerSettings(debt_on_reservation_delete=policy))

    def test_unpaid_only_removes_unpaid_debt(self, store, clock):
        service = self._service(store, clock, DebtDeletePolicy.UNPAID_ONLY)
        service.save_reservation(make_reservation())

        result = service.remove_reservation("res-1")

        assert result.status is SyncStatus.DELETED
        assert store.debts == {}
        assert "res-1" not in store.reservations

    def test_unpaid_only_keeps_paid_debt(self, store, clock):
        service = self._service(store, clock, DebtDeletePolicy.UNPAID_ONLY)
        service.save_reservation(make_reservation(amount_paid="50"))
        result = service.on_reservation_deleted("res-1")
        assert result.status is SyncStatus.KEPT
        assert len(store.debts) == 1

    def test_keep(self, store, clock):
        service = self._service(store, clock, DebtDeletePolicy.KEEP)
        service.save_reservation(make_reservation())
        assert service.on_reservation_deleted("res-1").status is SyncStatus.KEPT

    def test_always(self, store, clock):
        service = self._service(store, clock, DebtDeletePolicy.ALWAYS)
        service.save_reservation(make_reservation(amount_paid="400"))
        assert service.on_reservation_deleted("res-1").status is SyncStatus.DELETED
        assert store.debts == {}

    def test_no_debt_skipped(self, service):
        assert service.on_reservation_deleted("ghost").status is SyncStatus.SKIPPED

    def test_delete_failure_is_warning(self, service, store):
        service.sync_reservation(make_reservation())
        store.fail("delete_debt")
        result = service.on_reservation_deleted("res-1")
        assert result.status is SyncStatus.FAILED
        assert result.warning

    def test_reservation_losing_company_follows_policy(self, service, store):
        service.sync_reservation(make_reservation())
        result = service.sync_reservation(make_reservation(company_id=None))
        assert result.status is SyncStatus.DELETED
        assert store.debts == {}


class TestResync:
    def test_creates_missing_and_refreshes_existing(self, service, store):
        store.add(
            make_reservation(id="r1"),
            make_reservation(id="r2", total_amount="90"),
            make_reservation(id="r3", company_id=None),
        )
        service.sync_reservation(make_reservation(id="r2", total_amount="80"))

        report = service.resync_all()

        assert report.checked == 3
        assert report.missing == ("r1",)
        assert report.created == ("r1",)
        assert report.updated == ("r2",)
        assert report.skipped == ("r3",)
        assert report.ok
        assert store.get_debt_by_reservation("r2").amount == Decimal("90")

    def test_failures_reported_per_reservation(self, service, store):
        store.add(make_reservation(id="r1"), make_reservation(id="r2"))
        store.fail("upsert_debt", "r2")

        report = service.resync_all()

        assert report.created == ("r1",)
        assert [f.unit for f in report.failures] == ["r2"]
        assert report.failures[0].code == "LEDGER_SYNC_FAILED"

    def test_year_filter(self, service, store):
        store.add(make_reservation(id="r1", tour_date=date(2023, 5, 1)), make_reservation(id="r2"))
        report = service.resync_all(2024)
        assert report.checked == 1
        assert report.created == ("r2",)


class TestBalances:
    def test_company_balance(self, service, store):
        service.sync_reservation(make_reservation(id="r1", total_amount="100", amount_paid="100"))
        service.sync_reservation(make_reservation(id="r2", total_amount="50", currency="USD", amount_paid="20"))

        balance = service.company_balance("co-1")

        assert balance.debt_count == 2
        assert balance.outstanding == {"USD": Decimal("30")}

    def test_outstanding_by_company_drops_settled(self, service, store):
        store.add(Company(id="co-2", name="Green"))
        service.sync_reservation(make_reservation(id="r1", amount_paid="400"))
        service.sync_reservation(make_reservation(id="r2", company_id="co-2", total_amount="70"))
        service.sync_reservation(make_reservation(id="r3", company_id="co-2", total_amount="30", currency="TRY"))

        balances = service.outstanding_by_company()

        assert list(balances) == ["co-2"]
        assert balances["co-2"].outstanding == {"EUR": Decimal("70"), "TRY": Decimal("30")}
        assert total_outstanding(balances) == {"EUR": Decimal("70"), "TRY": Decimal("30")}

    def test_mutating_copy_does_not_touch_store(self, service, store):
        service.sync_reservation(make_reservation())
        [debt] = store.debts.values()
        replace(debt, amount=Decimal("1"))
        assert store.debts[debt.id].amount == Decimal("400")
