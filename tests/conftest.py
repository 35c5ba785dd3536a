import os

# Must be set before taskmate.config is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["PASSWORD_RESET_ENABLED"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from taskmate.database import get_db
from taskmate.main import app
from taskmate.services.credentials import CredentialStore

from .helpers import PASSWORD


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(engine):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def alice(db):
    return CredentialStore(db).register("Alice", "alice@example.com", PASSWORD)


@pytest.fixture()
def bob(db):
    return CredentialStore(db).register("Bob", "bob@example.com", PASSWORD)
