"""
Shared pytest fixtures.

Provides an in-memory SQLite session, SQLite repositories and sample
billing tables.
"""
import os

# Keep the application engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import revenue.models  # noqa: F401  (registers models on Base.metadata)
from revenue.adapters.repositories_sqlite import (
    SQLiteActivityLogsRepo,
    SQLiteBatchesRepo,
    SQLiteFilesRepo,
    SQLiteProcessingLogsRepo,
    SQLiteValidationLogsRepo,
)
from revenue.core.database import Base
from revenue.core.table import FieldDescriptor
from revenue.validate.billing_codes import BillingCodes


TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh database session for each test.

    Creates all tables, yields session, then drops all tables.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def batches_repo(db_session):
    return SQLiteBatchesRepo(db_session)


@pytest.fixture
def files_repo(db_session):
    return SQLiteFilesRepo(db_session)


@pytest.fixture
def validation_logs_repo(db_session):
    return SQLiteValidationLogsRepo(db_session)


@pytest.fixture
def processing_logs_repo(db_session):
    return SQLiteProcessingLogsRepo(db_session)


@pytest.fixture
def activity_repo(db_session):
    return SQLiteActivityLogsRepo(db_session)


@pytest.fixture
def billing_codes():
    """Pinned code table so tests do not depend on the packaged YAML."""
    return BillingCodes(
        version="test",
        adp_type_codes=frozenset(str(c) for c in range(1, 21) if c != 15),
        cha_total_required_item="31",
        adp_type_remap={"15": "16"},
        cht_delete_code="DELETE",
    )


@pytest.fixture
def adp_fields():
    return [
        FieldDescriptor("HN", "C", 9),
        FieldDescriptor("DATEOPD", "D", 8),
        FieldDescriptor("CODE", "C", 11),
        FieldDescriptor("QTY", "N", 4),
        FieldDescriptor("RATE", "N", 12, 2),
        FieldDescriptor("ADP", "C", 2),
    ]


@pytest.fixture
def adp_records():
    return [
        {"HN": "000012345", "DATEOPD": "20240115", "CODE": "TMLT001", "QTY": "2", "RATE": "150.00", "ADP": "3"},
        {"HN": "000067890", "DATEOPD": "20240116", "CODE": "TMLT002", "QTY": "1", "RATE": "80.50", "ADP": "12"},
    ]
