# ============================================================================
# agenda/services/store/document_store.py
# Document store adapter - generic CRUD over named collections
# ============================================================================
"""
Document store adapter.

Documents are plain JSON dicts grouped in collections (empresas, servicos,
agendamentos, bloqueios, profissionais, businessHours, availabilityOverrides).
Only equality filters are offered; range filtering is the caller's job after
an equality-filtered fetch.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.core.exceptions import AgendaError, ConflictError, NotFoundError, StoreUnavailable, ValidationError
from agenda.models.document import StoredDocument
from agenda.models.write_guard import WriteGuard

logger = logging.getLogger(__name__)

BUSINESSES = "empresas"
SERVICES = "servicos"
BOOKINGS = "agendamentos"
BLOCKS = "bloqueios"
PROFESSIONALS = "profissionais"
BUSINESS_HOURS = "businessHours"
OVERRIDES = "availabilityOverrides"

COLLECTIONS = (BUSINESSES, SERVICES, BOOKINGS, BLOCKS, PROFESSIONALS, BUSINESS_HOURS, OVERRIDES)


def _strip_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k != "id"}


def _matches(doc: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    return all(doc.get(field) == value for field, value in filters.items())


class DocumentReader:
    """Read view bound to an open session, handed to guarded-write checks"""

    def __init__(self, session: Session):
        self._session = session

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        row = self._session.get(StoredDocument, (collection, doc_id))
        return row.to_dict() if row else None

    def list(self, collection: str, **filters) -> List[Dict[str, Any]]:
        query = self._session.query(StoredDocument).filter(StoredDocument.collection == collection)
        business_id = filters.get("businessId")
        if business_id is not None:
            query = query.filter(StoredDocument.business_id == str(business_id))
        rows = query.order_by(StoredDocument.doc_id.asc()).all()
        docs = [row.to_dict() for row in rows]
        return [doc for doc in docs if _matches(doc, filters)]


class DocumentStore:
    """SQLAlchemy-backed document store"""

    def __init__(self, session_factory: Callable[[], Session], max_batch_writes: int = 500):
        self._session_factory = session_factory
        self.max_batch_writes = max_batch_writes

    @contextmanager
    def _session(self):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except AgendaError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Document store failure: {e}", exc_info=True)
            raise StoreUnavailable("Document store unavailable", {"reason": str(e)}) from e
        finally:
            session.close()

    @staticmethod
    def _write(session: Session, collection: str, doc_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        data = _strip_id(doc)
        business_id = data.get("businessId")
        row = session.get(StoredDocument, (collection, doc_id))
        if row is None:
            row = StoredDocument(collection=collection, doc_id=doc_id)
            session.add(row)
        row.data = data
        row.business_id = str(business_id) if business_id is not None else None
        return {**data, "id": doc_id}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._session() as session:
            return DocumentReader(session).get(collection, doc_id)

    def list(self, collection: str, **filters) -> List[Dict[str, Any]]:
        with self._session() as session:
            return DocumentReader(session).list(collection, **filters)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Create or fully replace a document"""
        with self._session() as session:
            return self._write(session, collection, doc_id, doc)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._session() as session:
            row = session.get(StoredDocument, (collection, doc_id))
            if row is None:
                return False
            session.delete(row)
            return True

    def batch_upsert(
            self,
            collection: str,
            items: Iterable[Tuple[str, Dict[str, Any]]]
    ) -> List[str]:
        """
        Upsert several documents in one transaction.

        All-or-nothing: batches above `max_batch_writes` are refused before any
        write, and a store error rolls every document back.
        """
        items = list(items)
        if len(items) > self.max_batch_writes:
            raise ValidationError(
                f"Batch of {len(items)} documents exceeds the limit of {self.max_batch_writes}",
                {"size": len(items), "limit": self.max_batch_writes}
            )

        with self._session() as session:
            for doc_id, doc in items:
                self._write(session, collection, doc_id, doc)
        return [doc_id for doc_id, _ in items]

    def _write_guarded(
            self,
            collection: str,
            doc_id: str,
            doc: Dict[str, Any],
            guard_key: str,
            check: Callable[[DocumentReader], None],
            create: bool
    ) -> Dict[str, Any]:
        with self._session() as session:
            try:
                guard = session.get(WriteGuard, guard_key)
                seen_version = guard.version if guard is not None else None

                check(DocumentReader(session))

                exists = session.get(StoredDocument, (collection, doc_id)) is not None
                if create and exists:
                    raise ConflictError("Document already exists", {"collection": collection, "id": doc_id})
                if not create and not exists:
                    raise NotFoundError("Document not found", {"collection": collection, "id": doc_id})
                stored = self._write(session, collection, doc_id, doc)

                if seen_version is None:
                    session.add(WriteGuard(guard_key=guard_key, version=1))
                else:
                    result = session.execute(
                        update(WriteGuard)
                        .where(WriteGuard.guard_key == guard_key, WriteGuard.version == seen_version)
                        .values(version=seen_version + 1)
                    )
                    if result.rowcount == 0:
                        raise ConflictError("Concurrent write detected", {"guard": guard_key})

                session.flush()
            except IntegrityError as e:
                logger.warning(f"Guarded write lost race on {guard_key}: {e}")
                raise ConflictError("Concurrent write detected", {"guard": guard_key}) from e
            return stored

    def insert_guarded(
            self,
            collection: str,
            doc_id: str,
            doc: Dict[str, Any],
            guard_key: str,
            check: Callable[[DocumentReader], None]
    ) -> Dict[str, Any]:
        """
        Conditional insert serialized on `guard_key`.

        `check` runs inside the transaction and raises ConflictError to veto the
        write. The guard's version token is then advanced with a compare-and-set;
        if another writer advanced it first the insert is rolled back.
        """
        return self._write_guarded(collection, doc_id, doc, guard_key, check, create=True)

    def update_guarded(
            self,
            collection: str,
            doc_id: str,
            doc: Dict[str, Any],
            guard_key: str,
            check: Callable[[DocumentReader], None]
    ) -> Dict[str, Any]:
        """Replace an existing document under the same guard as `insert_guarded`"""
        return self._write_guarded(collection, doc_id, doc, guard_key, check, create=False)

    def ping(self) -> bool:
        """Round-trip to the backing database"""
        with self._session() as session:
            session.execute(text("SELECT 1"))
        return True
