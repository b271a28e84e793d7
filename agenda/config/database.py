"""Database configuration and connection setup"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from agenda.config.settings import get_settings

settings = get_settings()


def build_engine(database_url: str):
    """Create an engine; sqlite URLs skip the connection pool options"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=False,
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_document_store():
    """Document store dependency for FastAPI"""
    from agenda.services.store.document_store import DocumentStore
    return DocumentStore(SessionLocal, max_batch_writes=settings.MAX_BATCH_WRITES)


def create_tables(bind=None):
    """Create the document store tables if they do not exist"""
    from agenda.models import Base

    Base.metadata.create_all(bind=bind or engine)


if __name__ == "__main__":
    create_tables()
    print("Document store tables created")
