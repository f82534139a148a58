# tests/conftest.py
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from caja.config.database import Base, build_engine, get_db
from caja.main import app
from caja.modules.cart import Cart, cart_registry
from caja.modules.catalog import CatalogRepository
from caja.modules.cash_register import CashRegisterService
from caja.shared.database.models import Client, Product, Register

OPERATOR_ID = 7


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'caja.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def seed(session_factory):
    """Cajas, productos y un cliente de prueba"""
    db = session_factory()
    register = Register(name="Caja 1")
    other_register = Register(name="Caja 2")
    inactive_register = Register(name="Caja de respaldo", is_active=False)
    coffee = Product(code="P1", name="Café grano 250g", unit_price=Decimal("1000"), stock=10)
    cake = Product(code="P2", name="Queque de zanahoria", unit_price=Decimal("2500"), stock=5)
    juice = Product(code="P3", name="Jugo natural", unit_price=Decimal("995"), stock=3)
    client = Client(rut="76.123.456-7", business_name="Comercial Sur SpA", email="compras@sur.cl")
    db.add_all([register, other_register, inactive_register, coffee, cake, juice, client])
    db.commit()

    ids = SimpleNamespace(
        register=register.id,
        other_register=other_register.id,
        inactive_register=inactive_register.id,
        coffee=coffee.id,
        cake=cake.id,
        juice=juice.id,
        client=client.id
    )
    db.close()
    return ids


@pytest.fixture
def db(session_factory, seed):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def open_session(db, seed):
    """Sesión abierta en la caja 1 con 50000 de monto inicial"""
    return CashRegisterService(db).open_session(seed.register, Decimal("50000"), operator_id=OPERATOR_ID)


@pytest.fixture
def make_cart(db):
    def _make_cart(*items):
        catalog = CatalogRepository(db)
        cart = Cart()
        for product_id, quantity in items:
            cart.add(catalog.get_product(product_id), quantity)
        return cart
    return _make_cart


@pytest.fixture
def client(session_factory, seed):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    cart_registry.reset()
    # sin lifespan: las tablas ya existen en la base de prueba
    test_client = TestClient(app, headers={"X-Operator-Id": str(OPERATOR_ID)})
    yield test_client
    app.dependency_overrides.clear()
    cart_registry.reset()
