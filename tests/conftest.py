"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created fresh for each test
and dropped afterwards, so no test data persists.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pharmacy_ledger.main import app
from pharmacy_ledger.models.base import Base, get_db


# SQLite keeps the tests free of database infrastructure.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses
    the test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def office_supplies():
    """A balanced two-entry transaction group."""
    return {
        "description": "Office supplies",
        "transaction_date": datetime(2024, 3, 15),
        "entries": [
            {"account_id": "ACC1", "debit_amount": 100, "credit_amount": 0},
            {"account_id": "ACC2", "debit_amount": 0, "credit_amount": 100},
        ],
    }

