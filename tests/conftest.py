# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.config.database import create_tables, get_document_store
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.store.document_store import DocumentStore
from agenda.utils.time_utils import get_zone, minute_to_epoch_ms, parse_date

TZ_NAME = "America/Sao_Paulo"
MONDAY = "2026-03-02"


def at(day, hhmm, tz_name=TZ_NAME):
    """Epoch ms of a local wall-clock time"""
    hours, minutes = (int(p) for p in hhmm.split(":"))
    return minute_to_epoch_ms(parse_date(day), hours * 60 + minutes, get_zone(tz_name))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def store(session_factory):
    return DocumentStore(session_factory, max_batch_writes=500)


@pytest.fixture
def business(store):
    return CatalogService.create_business(store, {
        "name": "Studio Bela",
        "slug": "studio-bela",
        "phone": "+55 (11) 98888-7777",
        "timezone": TZ_NAME,
    }, business_id="biz1")


@pytest.fixture
def service(store, business):
    return CatalogService.create_service(store, business.id, {
        "name": "Corte",
        "price": 50.0,
        "duration_minutes": 60,
        "commission_type": "percentage",
        "commission_value": 10,
    })


@pytest.fixture
def early_now():
    """A moment well before every test date"""
    return at("2026-03-01", "00:00")


@pytest.fixture
def client(store):
    from agenda.main import app

    app.dependency_overrides[get_document_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
