"""Per-request SQLAlchemy session for the FastAPI routes."""

from typing import Generator

from sqlalchemy.orm import Session

from mireb.repositories.storefront.database import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Open a session for one request and close it once the response is sent.

    Uncommitted work is rolled back by ``close``.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
