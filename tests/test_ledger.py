"""Tests for checkout settlement and the transaction log."""

import threading

import pytest
from pydantic import ValidationError

from common.connectivity import connectivity
from common.demo_data import seed_demo_data
from common.exceptions import EmptyCartError, UnassignedLoanError, UnknownEntityError
from modules.auth.permissions import Actor, ROLE_CASHIER
from modules.cart.service import cart_service
from modules.catalog.models import Product
from modules.customer.service import customer_service
from modules.sales.models import Transaction
from modules.sales.service import ledger_lock, ledger_service, split_payment


def build_milk_cart(db, catalog, cashier, customer_id=None):
    """Subtotal 7500, discount 500 → total 7000."""
    milk = catalog["Milk 1L"]
    cart_service.add_product(db, cashier.id, milk.id)
    cart_service.set_quantity(db, cashier.id, milk.id, 3)
    cart_service.set_discount(db, cashier.id, milk.id, 500)
    if customer_id is not None:
        cart_service.bind_customer(db, cashier.id, customer_id)
    db.commit()
    return cart_service.get_or_create_cart(db, cashier.id)


@pytest.fixture
def customer_x(db, catalog):
    customer = customer_service.create(db, "Customer X", "0750 000 0000", balance=0)
    db.commit()
    return customer


class TestSplitPayment:

    @pytest.mark.parametrize("total,paid,expected", [
        (7000, 5000, (0, 2000)),
        (5000, 8000, (3000, 0)),
        (5000, 5000, (0, 0)),
        (5000, 0, (0, 5000)),
        (0, 0, (0, 0)),
    ])
    def test_change_and_loan(self, total, paid, expected):
        assert split_payment(total, paid) == expected

    @pytest.mark.parametrize("total,paid", [(7000, 5000), (5000, 8000), (0, 250), (1200, 1200)])
    def test_conservation(self, total, paid):
        change, loan = split_payment(total, paid)
        assert paid + change == total + loan
        assert not (change > 0 and loan > 0)


class TestSettle:

    def test_empty_cart_is_rejected(self, db, catalog, cashier):
        """Scenario A."""
        cart = cart_service.get_or_create_cart(db, cashier.id)
        with pytest.raises(EmptyCartError):
            ledger_service.settle(db, cart, 1000, cashier)
        assert ledger_service.count(db) == 0

    def test_loan_without_customer_signals_before_mutation(self, db, catalog, cashier):
        """Scenario B."""
        cart = build_milk_cart(db, catalog, cashier)
        balances_before = {c.id: c.balance for c in customer_service.list_customers(db)}

        with pytest.raises(UnassignedLoanError) as exc:
            ledger_service.settle(db, cart, 5000, cashier)

        assert exc.value.total == 7000
        assert exc.value.loan == 2000
        assert ledger_service.count(db) == 0
        assert {c.id: c.balance for c in customer_service.list_customers(db)} == balances_before
        # cart untouched, caller may bind a customer and retry
        assert cart_service.total(db, cashier.id).total == 7000

    def test_loan_charged_to_bound_customer(self, db, catalog, cashier, customer_x):
        """Scenario C."""
        cart = build_milk_cart(db, catalog, cashier, customer_id=customer_x.id)

        txn = ledger_service.settle(db, cart, 5000, cashier)

        assert txn.loan == 2000
        assert txn.change == 0
        assert (txn.subtotal, txn.discount, txn.total, txn.paid) == (7500, 500, 7000, 5000)
        assert txn.customer_id == customer_x.id
        assert txn.customer_name == "Customer X"

        refreshed = customer_service.get(db, customer_x.id)
        assert refreshed.balance == -2000
        assert refreshed.total_purchases == 7000

    def test_retry_after_binding_customer(self, db, catalog, cashier, customer_x):
        cart = build_milk_cart(db, catalog, cashier)
        with pytest.raises(UnassignedLoanError):
            ledger_service.settle(db, cart, 5000, cashier)

        cart_service.bind_customer(db, cashier.id, customer_x.id)
        txn = ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 5000, cashier)

        assert txn.loan == 2000
        assert ledger_service.count(db) == 1

    def test_walk_away_override_records_loan_without_customer(self, db, catalog, cashier):
        cart = build_milk_cart(db, catalog, cashier)
        balances_before = {c.id: c.balance for c in customer_service.list_customers(db)}

        txn = ledger_service.settle(db, cart, 5000, cashier, allow_unassigned_loan=True)

        assert txn.loan == 2000
        assert txn.customer_id is None
        assert {c.id: c.balance for c in customer_service.list_customers(db)} == balances_before

    def test_change_leaves_customer_untouched(self, db, catalog, cashier, customer_x):
        """Scenario D."""
        eggs = catalog["Eggs 12pc"]
        cart_service.add_product(db, cashier.id, eggs.id)
        cart_service.bind_customer(db, cashier.id, customer_x.id)
        cart = cart_service.get_or_create_cart(db, cashier.id)

        txn = ledger_service.settle(db, cart, 8000, cashier)

        assert txn.total == 5000
        assert txn.change == 3000
        assert txn.loan == 0
        refreshed = customer_service.get(db, customer_x.id)
        assert refreshed.balance == 0
        assert refreshed.total_purchases == 0

    def test_existing_debt_accumulates(self, db, catalog, cashier):
        karwan = customer_service.list_customers(db, search="Karwan")[0]
        assert karwan.balance == -10000
        cart = build_milk_cart(db, catalog, cashier, customer_id=karwan.id)

        ledger_service.settle(db, cart, 0, cashier)

        refreshed = customer_service.get(db, karwan.id)
        assert refreshed.balance == -17000
        assert refreshed.total_purchases == 7000

    def test_discount_beyond_subtotal_settles_at_zero(self, db, catalog, cashier):
        bread = catalog["Bread"]
        cart_service.add_product(db, cashier.id, bread.id)
        cart_service.set_discount(db, cashier.id, bread.id, 10_000)
        cart = cart_service.get_or_create_cart(db, cashier.id)

        txn = ledger_service.settle(db, cart, 0, cashier)

        assert txn.total == 0
        assert txn.discount == 1000
        assert txn.loan == 0 and txn.change == 0

    def test_unknown_bound_customer_is_rejected(self, db, catalog, cashier, customer_x):
        cart = build_milk_cart(db, catalog, cashier, customer_id=customer_x.id)
        cart.customer_id = 987654

        with pytest.raises(UnknownEntityError):
            ledger_service.settle(db, cart, 5000, cashier)
        assert db.query(Transaction).count() == 0

    def test_note_and_cashier_recorded(self, db, catalog, cashier):
        cart_service.add_product(db, cashier.id, catalog["Bread"].id)
        cart = cart_service.get_or_create_cart(db, cashier.id)

        txn = ledger_service.settle(db, cart, 1000, cashier, note="  paid exact  ")

        assert txn.note == "paid exact"
        assert txn.cashier_id == cashier.id
        assert txn.cashier_name == "Omar Khalid"

    def test_synced_flag_follows_connectivity(self, db, catalog, cashier):
        connectivity.set_online(False)
        cart_service.add_product(db, cashier.id, catalog["Bread"].id)
        txn = ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 1000, cashier)
        assert txn.synced is False

    def test_clear_cart_in_same_commit(self, db, catalog, cashier, customer_x):
        cart = build_milk_cart(db, catalog, cashier, customer_id=customer_x.id)

        ledger_service.settle(db, cart, 5000, cashier, clear_cart=True)
        db.rollback()

        cart = cart_service.get_or_create_cart(db, cashier.id)
        assert cart.is_empty
        assert cart.customer_id is None
        assert ledger_service.count(db) == 1
        with pytest.raises(EmptyCartError):
            ledger_service.settle(db, cart, 5000, cashier, clear_cart=True)


class TestAtomicity:

    def test_failed_balance_update_leaves_no_transaction(self, db, catalog, cashier, customer_x, monkeypatch):
        cart = build_milk_cart(db, catalog, cashier, customer_id=customer_x.id)

        def boom(*args, **kwargs):
            raise RuntimeError("balance store unavailable")

        monkeypatch.setattr(customer_service, "apply_loan", boom)

        with pytest.raises(RuntimeError):
            ledger_service.settle(db, cart, 5000, cashier)

        assert db.query(Transaction).count() == 0
        assert customer_service.get(db, customer_x.id).balance == 0

    def test_failed_settlement_keeps_cart(self, db, catalog, cashier, customer_x, monkeypatch):
        cart = build_milk_cart(db, catalog, cashier, customer_id=customer_x.id)

        def boom(*args, **kwargs):
            raise RuntimeError("balance store unavailable")

        monkeypatch.setattr(customer_service, "apply_loan", boom)

        with pytest.raises(RuntimeError):
            ledger_service.settle(db, cart, 5000, cashier, clear_cart=True)

        cart = cart_service.get_or_create_cart(db, cashier.id)
        assert cart_service.cart_totals(cart).total == 7000
        assert cart.customer_id == customer_x.id


class TestTransactionLog:

    def test_log_grows_by_one_per_settlement(self, db, catalog, cashier):
        for n in range(1, 4):
            cart_service.add_product(db, cashier.id, catalog["Water 500ml"].id)
            ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 500, cashier)
            cart_service.clear(db, cashier.id)
            db.commit()
            assert ledger_service.count(db) == n

    def test_ids_are_monotonic(self, db, catalog, cashier):
        ids = []
        for _ in range(3):
            cart_service.add_product(db, cashier.id, catalog["Bread"].id)
            ids.append(ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 1000, cashier).id)
            cart_service.clear(db, cashier.id)
            db.commit()
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_returned_transaction_is_frozen(self, db, catalog, cashier):
        cart_service.add_product(db, cashier.id, catalog["Bread"].id)
        txn = ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 1000, cashier)

        with pytest.raises(ValidationError):
            txn.total = 1

        altered = txn.model_copy(update={"total": 1})
        assert altered.total == 1
        assert ledger_service.get_transaction(db, txn.id).total == 1000

    def test_cart_changes_after_settlement_do_not_alter_snapshot(self, db, catalog, cashier):
        cola = catalog["Coca Cola 330ml"]
        cart_service.add_product(db, cashier.id, cola.id)
        txn = ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 1500, cashier)

        cart_service.set_quantity(db, cashier.id, cola.id, 9)
        cart_service.set_discount(db, cashier.id, cola.id, 100)
        db.commit()

        stored = ledger_service.get_transaction(db, txn.id)
        assert len(stored.lines) == 1
        assert stored.lines[0].quantity == 1
        assert stored.lines[0].discount == 0
        assert stored.lines[0].product_name == "Coca Cola 330ml"

    def test_line_discounts_sum_to_transaction_discount(self, db, catalog, cashier):
        for name in ("Bread", "Tea Box"):
            cart_service.add_product(db, cashier.id, catalog[name].id)
        cart_service.set_discount(db, cashier.id, catalog["Bread"].id, 2000)   # clamped to 1000
        cart_service.set_discount(db, cashier.id, catalog["Tea Box"].id, 500)

        txn = ledger_service.settle(db, cart_service.get_or_create_cart(db, cashier.id), 3000, cashier)

        assert sum(line.discount for line in txn.lines) == txn.discount == 1500
        assert sum(line.unit_price * line.quantity for line in txn.lines) == txn.subtotal

    def test_list_filters_and_order(self, db, catalog, cashier, manager):
        for actor in (cashier, manager, cashier):
            cart_service.add_product(db, actor.id, catalog["Bread"].id)
            ledger_service.settle(db, cart_service.get_or_create_cart(db, actor.id), 1000, actor)
            cart_service.clear(db, actor.id)
            db.commit()

        everything = ledger_service.list_transactions(db)
        assert [t.id for t in everything] == sorted((t.id for t in everything), reverse=True)
        assert len(ledger_service.list_transactions(db, cashier_id=cashier.id)) == 2
        assert len(ledger_service.list_transactions(db, limit=1)) == 1

    def test_get_unknown_transaction(self, db):
        with pytest.raises(UnknownEntityError):
            ledger_service.get_transaction(db, 1)


class TestConcurrentSettlement:
    """Settlements from separate sessions against one customer balance."""

    @pytest.fixture
    def shared_tab(self, file_session_factory):
        setup = file_session_factory()
        seed_demo_data(setup)
        customer = customer_service.create(setup, "Shared Tab", "0750 111 0000")
        milk = setup.query(Product).filter(Product.name == "Milk 1L").one()
        setup.commit()
        ids = (customer.id, milk.id)
        setup.close()
        return ids

    @staticmethod
    def fill_cart(session, cashier, milk_id, customer_id):
        """7000 total; paying 5000 leaves a 2000 loan."""
        cart_service.add_product(session, cashier.id, milk_id)
        cart_service.set_quantity(session, cashier.id, milk_id, 3)
        cart_service.set_discount(session, cashier.id, milk_id, 500)
        cart_service.bind_customer(session, cashier.id, customer_id)
        session.commit()
        return cart_service.get_or_create_cart(session, cashier.id)

    def test_charge_committed_elsewhere_is_not_lost(self, file_session_factory, shared_tab, cashier, manager):
        customer_id, milk_id = shared_tab
        first = file_session_factory()
        second = file_session_factory()
        try:
            cart_a = self.fill_cart(first, cashier, milk_id, customer_id)
            assert cart_a.customer.balance == 0

            cart_b = self.fill_cart(second, manager, milk_id, customer_id)
            ledger_service.settle(second, cart_b, 5000, manager)

            # first session still holds the balance it read before that commit
            ledger_service.settle(first, cart_a, 5000, cashier)
        finally:
            first.close()
            second.close()

        check = file_session_factory()
        try:
            customer = customer_service.get(check, customer_id)
            assert customer.balance == -4000
            assert customer.total_purchases == 14000
        finally:
            check.close()

    def test_parallel_settlements_all_land(self, file_session_factory, shared_tab):
        customer_id, milk_id = shared_tab
        tills = [Actor(id=100 + n, name=f"Till {n}", role=ROLE_CASHIER) for n in range(4)]

        setup = file_session_factory()
        for till in tills:
            self.fill_cart(setup, till, milk_id, customer_id)
        setup.close()

        ready = threading.Barrier(len(tills))
        errors = []

        def run(till):
            session = file_session_factory()
            try:
                cart = cart_service.get_or_create_cart(session, till.id)
                assert cart.customer.balance == 0
                ready.wait(timeout=5)
                ledger_service.settle(session, cart, 5000, till)
            except Exception as e:
                errors.append(e)
            finally:
                session.close()

        workers = [threading.Thread(target=run, args=(till,)) for till in tills]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(timeout=10)

        assert errors == []
        check = file_session_factory()
        try:
            customer = customer_service.get(check, customer_id)
            assert customer.balance == -2000 * len(tills)
            assert customer.total_purchases == 7000 * len(tills)
            assert ledger_service.count(check) == len(tills)
        finally:
            check.close()

    def test_settlement_waits_for_ledger_lock(self, file_session_factory, shared_tab, cashier):
        customer_id, milk_id = shared_tab
        setup = file_session_factory()
        self.fill_cart(setup, cashier, milk_id, customer_id)
        setup.close()

        done = threading.Event()

        def run():
            session = file_session_factory()
            try:
                cart = cart_service.get_or_create_cart(session, cashier.id)
                ledger_service.settle(session, cart, 5000, cashier)
            finally:
                session.close()
                done.set()

        with ledger_lock:
            worker = threading.Thread(target=run)
            worker.start()
            assert not done.wait(timeout=0.3)
            check = file_session_factory()
            try:
                assert ledger_service.count(check) == 0
            finally:
                check.close()

        worker.join(timeout=10)
        assert done.is_set()
        check = file_session_factory()
        try:
            assert ledger_service.count(check) == 1
            assert customer_service.get(check, customer_id).balance == -2000
        finally:
            check.close()
