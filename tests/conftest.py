import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from manufacturing_api import models  # noqa: F401
from manufacturing_api.db.session import get_db
from manufacturing_api.main import app
from manufacturing_api.models.base import Base
from manufacturing_api.schemas.item import ItemCreateIn
from manufacturing_api.services import item_service

BASE = "/api/v1"


@pytest.fixture()
def engine():
    # one shared in-memory connection per test
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        # sqlite leaves FK enforcement off per connection
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def company_id():
    return uuid.uuid4()


@pytest.fixture()
def user_id():
    return uuid.uuid4()


@pytest.fixture()
def make_item(db_session, company_id):
    def _make(code: str, name: str = None, rate: str = "0"):
        return item_service.create_item(
            db_session,
            ItemCreateIn(
                company_id=company_id,
                item_code=code,
                item_name=name or code.title(),
                stock_uom="Nos",
                valuation_rate=Decimal(rate),
            ),
        )

    return _make
