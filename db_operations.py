"""Database operations for the SQL key-value backend."""

from sqlalchemy.orm import Session
from typing import Optional
from db_models import KVDocument


def get_document(db: Session, key: str) -> Optional[str]:
    """Get the raw document stored under key."""
    doc = db.get(KVDocument, key)
    return doc.value if doc else None


def set_document(db: Session, key: str, value: str) -> KVDocument:
    """Insert or replace the document stored under key."""
    doc = db.get(KVDocument, key)
    if doc:
        doc.value = value
    else:
        doc = KVDocument(key=key, value=value)
        db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc


def delete_document(db: Session, key: str) -> bool:
    """Delete the document stored under key."""
    count = db.query(KVDocument).filter(KVDocument.key == key).delete()
    db.commit()
    return count > 0
