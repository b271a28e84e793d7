# agenda/models/document.py
"""
StoredDocument Model - JSON documents grouped by collection.
Backs the document store adapter; one row per (collection, doc_id).
"""
from sqlalchemy import Column, String, DateTime, JSON, Index
from sqlalchemy.sql import func
from agenda.models.base import Base


class StoredDocument(Base):
    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    doc_id = Column(String(200), primary_key=True)

    # Denormalized from data["businessId"] so tenant filters run in SQL
    business_id = Column(String(200), nullable=True)

    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_documents_collection_business", "collection", "business_id"),
    )

    def __repr__(self):
        return f"<StoredDocument(collection={self.collection}, doc_id={self.doc_id})>"

    def to_dict(self):
        """Document payload with its id"""
        data = dict(self.data or {})
        data["id"] = self.doc_id
        return data
