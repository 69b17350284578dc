"""
Unit tests for the monthly bill workflow.

Covers creation rules, item replacement and the
pending -> requested -> paid transitions.
"""

from decimal import Decimal

import pytest

from household_budget.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from household_budget.extensions import db
from household_budget.models import STATUS_PAID, STATUS_PENDING, STATUS_REQUESTED, BillItem, MonthlyBill, User
from household_budget.services import BillService
from household_budget.services.bill_service import parse_amount


def _user(account_id):
    user = User(name=account_id.title(), account_id=account_id, password_hash="x")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def service(app_ctx):
    return BillService()


@pytest.fixture
def users(app_ctx):
    return _user("alice"), _user("bob"), _user("carol")


@pytest.fixture
def bill(service, users):
    alice, bob, _ = users
    return service.create_bill(alice.id, 2024, 5, bob.id)


class TestCreateBill:
    """Bill creation and period uniqueness."""

    def test_new_bill_starts_pending_and_empty(self, bill, users):
        alice, bob, _ = users

        assert bill.status == STATUS_PENDING
        assert bill.requester_id == alice.id
        assert bill.payer_id == bob.id
        assert bill.items == []
        assert bill.total_amount == Decimal("0")
        assert bill.request_date is None and bill.payment_date is None

    def test_same_period_twice_conflicts(self, service, bill, users):
        alice, bob, carol = users

        with pytest.raises(ConflictError) as exc:
            service.create_bill(alice.id, 2024, 5, bob.id)
        assert exc.value.code == "BILL_EXISTS"

        # the period is unique regardless of who asks
        with pytest.raises(ConflictError):
            service.create_bill(carol.id, 2024, 5, alice.id)

    def test_other_periods_allowed(self, service, bill, users):
        alice, bob, _ = users
        assert service.create_bill(alice.id, 2024, 6, bob.id).month == 6
        assert service.create_bill(alice.id, 2025, 5, bob.id).year == 2025

    @pytest.mark.parametrize("year,month", [
        (2024, 0), (2024, 13), (1999, 1), (2101, 1), ("x", 1), (2024, None), ("2024", "²"), (2024, 5.5),
    ])
    def test_invalid_period_rejected(self, service, users, year, month):
        alice, bob, _ = users
        with pytest.raises(ValidationError) as exc:
            service.create_bill(alice.id, year, month, bob.id)
        assert exc.value.code == "INVALID_PERIOD"

    def test_numeric_strings_accepted(self, service, users):
        alice, bob, _ = users
        bill = service.create_bill(alice.id, "2024", "7", str(bob.id))
        assert (bill.year, bill.month, bill.payer_id) == (2024, 7, bob.id)

    def test_payer_must_differ_from_requester(self, service, users):
        alice, _, _ = users
        with pytest.raises(ValidationError) as exc:
            service.create_bill(alice.id, 2024, 5, alice.id)
        assert exc.value.code == "PAYER_IS_REQUESTER"

    def test_payer_must_exist(self, service, users):
        alice, _, _ = users
        with pytest.raises(ValidationError) as exc:
            service.create_bill(alice.id, 2024, 5, 9999)
        assert exc.value.code == "PAYER_NOT_FOUND"


class TestQueries:
    def test_list_only_includes_bills_of_the_user(self, service, users):
        alice, bob, carol = users
        service.create_bill(alice.id, 2024, 1, bob.id)
        service.create_bill(bob.id, 2024, 3, alice.id)
        service.create_bill(carol.id, 2024, 2, bob.id)

        assert [(b.year, b.month) for b in service.list_bills(alice.id)] == [(2024, 3), (2024, 1)]
        assert len(service.list_bills(bob.id)) == 3

    def test_list_orders_newest_period_first(self, service, users):
        alice, bob, _ = users
        for year, month in [(2023, 12), (2024, 2), (2024, 1)]:
            service.create_bill(alice.id, year, month, bob.id)

        assert [(b.year, b.month) for b in service.list_bills(alice.id)] == [(2024, 2), (2024, 1), (2023, 12)]

    def test_get_bill_by_period(self, service, bill, users):
        alice, bob, carol = users

        assert service.get_bill(alice.id, 2024, 5).id == bill.id
        assert service.get_bill(bob.id, 2024, 5).id == bill.id
        assert service.get_bill(carol.id, 2024, 5) is None
        assert service.get_bill(alice.id, 2024, 6) is None


class TestItems:
    """Item replacement rules."""

    def test_requester_replaces_items_and_total_follows(self, service, bill, users):
        alice, _, _ = users
        service.update_items(alice.id, bill.id, [
            {"item_name": "Rent", "amount": 1200},
            {"item_name": "Power", "amount": "80.50"},
        ])
        service.update_items(alice.id, bill.id, [
            {"id": 1, "item_name": "Rent", "amount": 1250},
        ])

        items = BillItem.query.filter_by(bill_id=bill.id).all()
        assert [(i.item_name, i.amount) for i in items] == [("Rent", Decimal("1250.00"))]
        assert db.session.get(MonthlyBill, bill.id).total_amount == Decimal("1250.00")

    def test_total_is_sum_of_items(self, service, bill, users):
        alice, _, _ = users
        service.update_items(alice.id, bill.id, [
            {"item_name": "Water", "amount": 30.1},
            {"item_name": "Gas", "amount": "45.25"},
        ])
        assert bill.total_amount == Decimal("75.35")
        assert bill.serialize()["total_amount"] == 75.35

    def test_blank_rows_are_dropped(self, service, bill, users):
        alice, _, _ = users
        service.update_items(alice.id, bill.id, [
            {"item_name": "", "amount": 10},
            {"item_name": "Internet", "amount": 0},
            {"item_name": "Internet", "amount": 60},
        ])
        assert [i.item_name for i in bill.items] == ["Internet"]

    @pytest.mark.parametrize("items", [
        [{"item_name": "Rent", "amount": "abc"}],
        [{"item_name": "x" * 256, "amount": 10}],
        ["Rent"],
        "Rent",
    ])
    def test_malformed_items_rejected(self, service, bill, users, items):
        alice, _, _ = users
        with pytest.raises(ValidationError) as exc:
            service.update_items(alice.id, bill.id, items)
        assert exc.value.code == "INVALID_ITEMS"

    def test_payer_cannot_edit_items(self, service, bill, users):
        _, bob, _ = users
        with pytest.raises(AuthorizationError) as exc:
            service.update_items(bob.id, bill.id, [{"item_name": "Rent", "amount": 1}])
        assert exc.value.code == "NOT_BILL_REQUESTER"

    def test_items_frozen_once_requested(self, service, bill, users):
        alice, _, _ = users
        service.request_bill(alice.id, bill.id)

        with pytest.raises(AuthorizationError) as exc:
            service.update_items(alice.id, bill.id, [{"item_name": "Rent", "amount": 1}])
        assert exc.value.code == "INVALID_BILL_STATUS"

    def test_outsider_sees_not_found(self, service, bill, users):
        _, _, carol = users
        with pytest.raises(NotFoundError) as exc:
            service.update_items(carol.id, bill.id, [])
        assert exc.value.code == "BILL_NOT_FOUND"


class TestTransitions:
    """pending -> requested -> paid, nothing else."""

    def test_full_workflow(self, service, bill, users):
        alice, bob, _ = users

        service.request_bill(alice.id, bill.id)
        assert bill.status == STATUS_REQUESTED
        assert bill.request_date is not None

        service.pay_bill(bob.id, bill.id)
        assert bill.status == STATUS_PAID
        assert bill.payment_date is not None

    def test_cannot_pay_pending_bill(self, service, bill, users):
        _, bob, _ = users
        with pytest.raises(AuthorizationError) as exc:
            service.pay_bill(bob.id, bill.id)
        assert exc.value.code == "INVALID_BILL_STATUS"
        assert exc.value.details == {"status": STATUS_PENDING, "required_status": STATUS_REQUESTED}

    def test_cannot_request_twice(self, service, bill, users):
        alice, _, _ = users
        service.request_bill(alice.id, bill.id)
        with pytest.raises(AuthorizationError):
            service.request_bill(alice.id, bill.id)

    def test_payer_cannot_request(self, service, bill, users):
        _, bob, _ = users
        with pytest.raises(AuthorizationError) as exc:
            service.request_bill(bob.id, bill.id)
        assert exc.value.code == "NOT_BILL_REQUESTER"

    def test_requester_cannot_pay(self, service, bill, users):
        alice, _, _ = users
        service.request_bill(alice.id, bill.id)
        with pytest.raises(AuthorizationError) as exc:
            service.pay_bill(alice.id, bill.id)
        assert exc.value.code == "NOT_BILL_PAYER"

    def test_paid_bill_is_final(self, service, bill, users):
        alice, bob, _ = users
        service.request_bill(alice.id, bill.id)
        service.pay_bill(bob.id, bill.id)

        with pytest.raises(AuthorizationError):
            service.pay_bill(bob.id, bill.id)
        with pytest.raises(AuthorizationError):
            service.delete_bill(alice.id, bill.id)

    def test_outsider_cannot_transition(self, service, bill, users):
        _, _, carol = users
        with pytest.raises(NotFoundError):
            service.request_bill(carol.id, bill.id)

    def test_unknown_bill_not_found(self, service, users):
        alice, _, _ = users
        with pytest.raises(NotFoundError):
            service.request_bill(alice.id, 12345)


class TestDeleteBill:
    def test_delete_removes_items(self, service, bill, users):
        alice, _, _ = users
        service.update_items(alice.id, bill.id, [
            {"item_name": "Rent", "amount": 1000},
            {"item_name": "Power", "amount": 50},
        ])
        bill_id = bill.id

        service.delete_bill(alice.id, bill_id)

        assert db.session.get(MonthlyBill, bill_id) is None
        assert BillItem.query.filter_by(bill_id=bill_id).count() == 0

    def test_payer_cannot_delete(self, service, bill, users):
        _, bob, _ = users
        with pytest.raises(AuthorizationError):
            service.delete_bill(bob.id, bill.id)

    def test_period_reusable_after_delete(self, service, bill, users):
        alice, bob, _ = users
        service.delete_bill(alice.id, bill.id)
        assert service.create_bill(alice.id, 2024, 5, bob.id).status == STATUS_PENDING


class TestParseAmount:
    @pytest.mark.parametrize("value,expected", [
        (10, Decimal("10.00")),
        ("12.346", Decimal("12.35")),
        (" 7.5 ", Decimal("7.50")),
        (-3, Decimal("-3.00")),
    ])
    def test_parses_numbers(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [None, True, "abc", "NaN", "Infinity", [], {}, "1e30", 1e30])
    def test_rejects_non_numbers(self, value):
        assert parse_amount(value) is None
