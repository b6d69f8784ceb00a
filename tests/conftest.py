"""Shared pytest fixtures: a fresh in-memory database per test."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from config.database import Base, build_engine
from common.connectivity import connectivity
from common.demo_data import seed_demo_data
from modules.auth.permissions import Actor, ROLE_ACCOUNTANT, ROLE_CASHIER, ROLE_MANAGER
from modules.catalog.models import Product
from modules.customer.models import Customer  # noqa: F401
from modules.cart.models import Cart, CartItem  # noqa: F401
from modules.sales.models import Transaction, TransactionLine  # noqa: F401
from modules.cash.models import CashTransfer  # noqa: F401


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def online():
    connectivity.set_online(True)
    yield
    connectivity.set_online(True)


@pytest.fixture
def catalog(db):
    """Demo catalog + customers, keyed by product name."""
    seed_demo_data(db)
    return {p.name: p for p in db.query(Product).all()}


@pytest.fixture
def cashier():
    return Actor(id=3, name="Omar Khalid", role=ROLE_CASHIER)


@pytest.fixture
def accountant():
    return Actor(id=2, name="Sara Aziz", role=ROLE_ACCOUNTANT)


@pytest.fixture
def manager():
    return Actor(id=1, name="Admin Manager", role=ROLE_MANAGER)


@pytest.fixture
def make_product(db):
    def _make(name="Item", price=1000, category="Misc", stock=10):
        product = Product(name=name, price=price, category=category, stock=stock)
        db.add(product)
        db.flush()
        return product
    return _make


@pytest.fixture
def freeze_now(monkeypatch):
    """Pin the ledger clock: freeze_now(datetime(...)) sets the moment new records get."""
    import modules.sales.service as sales_service
    import modules.cash.service as cash_service

    def _apply(moment: datetime) -> datetime:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        monkeypatch.setattr(sales_service, "now_utc", lambda: moment)
        monkeypatch.setattr(cash_service, "now_utc", lambda: moment)
        return moment

    return _apply


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file database: each session gets its own connection."""
    eng = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=eng)
    yield sessionmaker(autocommit=False, autoflush=False, bind=eng)
    eng.dispose()
