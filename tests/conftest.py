import pytest
from fastapi.testclient import TestClient
from agromarket import crud
from agromarket.core.config import Settings
from agromarket.core.database import init_db, dispose_db
from agromarket.main import create_app
from agromarket.models.product import Category
from agromarket.models.user import Role
from agromarket.schemas.product import ProductCreate
from agromarket.schemas.user import UserCreate


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        ENVIRONMENT="test",
        SECRET_KEY="test-secret",
    )


@pytest.fixture
def session_factory(settings):
    engine, factory = init_db(settings.DATABASE_URL)
    yield factory
    dispose_db(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role: Role = Role.BUYER, email: str = None):
        counter["n"] += 1
        email = email or f"{role.value}{counter['n']}@example.com"
        return crud.user.create(
            db, obj_in=UserCreate(name=f"{role.value} {counter['n']}", email=email, password="secret", role=role)
        )

    return _make_user


@pytest.fixture
def make_product(db):
    def _make_product(seller, *, name="Tomatoes", price=10.0, quantity=5, category=Category.VEGETABLES):
        return crud.product.create_for_seller(
            db,
            obj_in=ProductCreate(name=name, price=price, quantity=quantity, category=category),
            seller_id=seller.id,
            default_image="default-product.jpg",
        )

    return _make_product


@pytest.fixture
def farmer(make_user):
    return make_user(Role.FARMER)


@pytest.fixture
def buyer(make_user):
    return make_user(Role.BUYER)
