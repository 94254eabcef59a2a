import os

# Must be set before bledor.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bledor.core.access import Actor
from bledor.database import Base, get_db, init_db
from bledor.main import create_app
from bledor.models.product import Product
from bledor.models.users import Role, User
from bledor.utils.hashing import get_password_hash
from bledor.utils.tokenJWT import issue_token_for

PASSWORD = "secret123"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    app = create_app(create_tables=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


def make_user(db, email, role, name=None, password=PASSWORD):
    user = User(email=email, password_hash=get_password_hash(password), role=role, name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth(user):
    return {"Authorization": f"Bearer {issue_token_for(user)}"}


def actor_of(user):
    return Actor(user_id=user.id, role=user.role)


@pytest.fixture()
def owner(db):
    return make_user(db, "owner@bledor.fr", Role.OWNER, name="Propriétaire")


@pytest.fixture()
def manager(db):
    return make_user(db, "manager@bledor.fr", Role.MANAGER, name="Gérant")


@pytest.fixture()
def customer(db):
    return make_user(db, "camille@bledor.fr", Role.CLIENT, name="Camille")


@pytest.fixture()
def bread(db):
    product = Product(id="bread-1", name="Baguette tradition", price=Decimal("1.20"), category="pain")
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture()
def croissant(db):
    product = Product(id="croissant-1", name="Croissant au beurre", price=Decimal("1.10"), category="viennoiserie")
    db.add(product)
    db.commit()
    db.refresh(product)
    return product
