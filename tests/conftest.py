"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from recordquery.database.record_repo import seed_records
from recordquery.database.schema import create_all
from recordquery.query.log_buffer import BoundedLogger
from recordquery.store.sqlite_store import SqliteRecordStore

SAMPLE_RECORDS = [
    {
        "recordType": "customer",
        "internalid": 42,
        "fields": {
            "entityid": "ACME",
            "externalid": "C-ACME",
            "companyname": "Acme Corp",
            "email": "ap@acme.test",
        },
        "sublists": {
            "addressbook": [
                {
                    "id": 11,
                    "internalid": 501,
                    "label": "HQ",
                    "city": "Springfield",
                    "defaultbilling": True,
                    "addressbookaddress": {"addr1": "1 Main St", "city": "Springfield", "zip": "11111"},
                },
                {
                    "id": 12,
                    "internalid": 502,
                    "label": "Warehouse",
                    "defaultbilling": False,
                    "addressbookaddress": {"addr1": "9 Dock Rd", "zip": "22222"},
                },
            ],
            "contactroles": [],
        },
    },
    {
        "recordType": "customer",
        "internalid": 2,
        "fields": {"entityid": "GLOBEX-1", "companyname": "Globex"},
    },
    {
        "recordType": "customer",
        "internalid": 3,
        "fields": {"entityid": "GLOBEX-2", "companyname": "Globex"},
    },
    {
        "recordType": "salesorder",
        "internalid": 100,
        "fields": {"tranid": "SO-100", "entity": 42, "total": 250.0},
        "sublists": {
            "item": [
                {"id": 1, "item": "WIDGET", "quantity": 2, "rate": 50.0},
                {"id": 2, "item": "GADGET", "quantity": 3, "rate": 50.0},
            ],
        },
    },
    {
        "recordType": "invoice",
        "internalid": 7,
        "fields": {"tranid": "INV-7", "createdfrom": 100, "entity": 42},
        "sublists": {
            "item": [
                {"id": 1, "item": "WIDGET", "quantity": 2},
                {"id": 2, "item": "GADGET", "quantity": 1},
            ],
        },
    },
    {
        "recordType": "invoice",
        "internalid": 9,
        "fields": {"tranid": "INV-9", "createdfrom": 100, "entity": 42},
        "sublists": {"item": [{"id": 1, "item": "GADGET", "quantity": 2}]},
    },
    {
        "recordType": "invoice",
        "internalid": 10,
        "fields": {"tranid": "INV-10", "createdfrom": 200, "entity": 2},
        "sublists": {"item": [{"id": 1, "item": "WIDGET", "quantity": 5}]},
    },
    {
        "recordType": "itemfulfillment",
        "internalid": 30,
        "fields": {"tranid": "IF-30", "createdfrom": 100},
        "sublists": {"item": [{"id": 1, "item": "WIDGET", "quantity": 2}]},
    },
]


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(session):
    """SqliteRecordStore over the sample records."""
    seed_records(session, SAMPLE_RECORDS)
    return SqliteRecordStore(session)


@pytest.fixture
def log():
    """A logger roomy enough that tests never hit the cap by accident."""
    return BoundedLogger(limit=100)
