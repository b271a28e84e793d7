# tests/test_document_store.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.config.database import create_tables
from agenda.core.exceptions import ConflictError, NotFoundError, StoreUnavailable, ValidationError
from agenda.services.store.document_store import BOOKINGS, SERVICES, DocumentStore


def test_upsert_get_list_delete(store):
    store.upsert(SERVICES, "s1", {"businessId": "b1", "name": "Corte", "isActive": True})
    store.upsert(SERVICES, "s2", {"businessId": "b1", "name": "Barba", "isActive": False})
    store.upsert(SERVICES, "s3", {"businessId": "b2", "name": "Corte", "isActive": True})

    assert store.get(SERVICES, "s1") == {"businessId": "b1", "name": "Corte", "isActive": True, "id": "s1"}
    assert store.get(SERVICES, "missing") is None
    assert [d["id"] for d in store.list(SERVICES, businessId="b1")] == ["s1", "s2"]
    assert [d["id"] for d in store.list(SERVICES, businessId="b1", isActive=True)] == ["s1"]
    assert [d["id"] for d in store.list(SERVICES, name="Corte")] == ["s1", "s3"]

    assert store.delete(SERVICES, "s1") is True
    assert store.delete(SERVICES, "s1") is False


def test_upsert_replaces_whole_document(store):
    store.upsert(SERVICES, "s1", {"businessId": "b1", "name": "Corte", "price": 10})
    store.upsert(SERVICES, "s1", {"businessId": "b1", "name": "Corte"})
    assert "price" not in store.get(SERVICES, "s1")


def test_batch_upsert_is_capped(session_factory):
    store = DocumentStore(session_factory, max_batch_writes=1)
    with pytest.raises(ValidationError):
        store.batch_upsert(SERVICES, [("a", {}), ("b", {})])
    assert store.list(SERVICES) == []


def test_guarded_insert_vetoed_by_check_writes_nothing(store):
    def veto(reader):
        raise ConflictError("taken")

    with pytest.raises(ConflictError):
        store.insert_guarded(BOOKINGS, "b1", {"businessId": "x"}, guard_key="k", check=veto)
    assert store.get(BOOKINGS, "b1") is None


def test_guarded_insert_check_sees_committed_documents(store):
    store.insert_guarded(BOOKINGS, "b1", {"businessId": "x"}, guard_key="k", check=lambda reader: None)

    seen = []
    store.insert_guarded(
        BOOKINGS, "b2", {"businessId": "x"}, guard_key="k",
        check=lambda reader: seen.extend(d["id"] for d in reader.list(BOOKINGS, businessId="x")),
    )
    assert seen == ["b1"]


def test_guarded_insert_refuses_existing_id(store):
    store.insert_guarded(BOOKINGS, "b1", {"businessId": "x"}, guard_key="k", check=lambda reader: None)
    with pytest.raises(ConflictError):
        store.insert_guarded(BOOKINGS, "b1", {"businessId": "x"}, guard_key="k", check=lambda reader: None)


@pytest.fixture
def file_store(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'agenda.db'}")
    create_tables(bind=engine)
    yield DocumentStore(sessionmaker(bind=engine))
    engine.dispose()


def _commit_competing_insert(store):
    def check(reader):
        store.insert_guarded(BOOKINGS, "inner", {"businessId": "x"}, guard_key="k", check=lambda r: None)
    return check


def test_guarded_insert_loses_to_writer_creating_the_guard_first(file_store):
    with pytest.raises(ConflictError):
        file_store.insert_guarded(
            BOOKINGS, "outer", {"businessId": "x"}, guard_key="k", check=_commit_competing_insert(file_store)
        )

    assert file_store.get(BOOKINGS, "outer") is None
    assert [d["id"] for d in file_store.list(BOOKINGS)] == ["inner"]


def test_guarded_insert_loses_to_writer_advancing_the_guard_first(file_store):
    file_store.insert_guarded(BOOKINGS, "first", {"businessId": "y"}, guard_key="k", check=lambda r: None)

    with pytest.raises(ConflictError):
        file_store.insert_guarded(
            BOOKINGS, "outer", {"businessId": "x"}, guard_key="k", check=_commit_competing_insert(file_store)
        )

    assert file_store.get(BOOKINGS, "outer") is None
    assert [d["id"] for d in file_store.list(BOOKINGS, businessId="x")] == ["inner"]


def test_guarded_update_requires_existing_document(store):
    with pytest.raises(NotFoundError):
        store.update_guarded(BOOKINGS, "missing", {"businessId": "x"}, guard_key="k", check=lambda r: None)
    assert store.get(BOOKINGS, "missing") is None


def test_database_errors_surface_as_store_unavailable():
    # no tables were created on this engine
    empty = create_engine("sqlite://", poolclass=StaticPool)
    broken = DocumentStore(sessionmaker(bind=empty), max_batch_writes=10)

    with pytest.raises(StoreUnavailable):
        broken.get(SERVICES, "s1")
    with pytest.raises(StoreUnavailable):
        broken.upsert(SERVICES, "s1", {})


def test_ping(store):
    assert store.ping() is True
