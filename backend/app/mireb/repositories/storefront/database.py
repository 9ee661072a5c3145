"""
Storefront database wiring.

Builds the engine from ``DATABASE_URL`` (PostgreSQL in production, SQLite in
tests) and exports:
    - engine: the shared SQLAlchemy engine.
    - SessionLocal: session factory used by ``get_db`` and the seed script.
    - Base: declarative base of the users, products and leads tables.
"""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from mireb.configs import settings

DB_URL = settings.DATABASE_URL

# SQLAlchemy only accepts the postgresql:// scheme
if DB_URL.startswith("postgres://"):
    DB_URL = DB_URL.replace("postgres://", "postgresql://", 1)

engine_kwargs: Dict[str, Any] = {"pool_pre_ping": True}
if DB_URL.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}}
    if DB_URL in ("sqlite://", "sqlite:///:memory:"):
        # an in-memory database lives on a single connection
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DB_URL, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
