"""Shared fixtures: an in-memory SQLite database recreated for every test."""

import os

# settings are read when mireb is first imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

from typing import Any, Callable, Dict, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from mireb.api import create_app  # noqa: E402
from mireb.repositories.storefront.crud.products_crud import CRUDProduct  # noqa: E402
from mireb.repositories.storefront.crud.users_crud import CRUDUser  # noqa: E402
from mireb.repositories.storefront.database import Base, SessionLocal, engine  # noqa: E402
from mireb.repositories.storefront.models.enums import Category, Role  # noqa: E402
from mireb.repositories.storefront.models.products_model import Product  # noqa: E402
from mireb.repositories.storefront.models.users_model import User  # noqa: E402
from mireb.services.auth.credentials import hash_password, issue_token  # noqa: E402

ADMIN_PASSWORD = "Admin123"
USER_PASSWORD = "Secret123"


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db: Session) -> TestClient:
    return TestClient(create_app(init_db=False))


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    def _make_user(**overrides: Any) -> User:
        data: Dict[str, Any] = {
            "name": "Marie Kabila",
            "email": "marie@example.com",
            "password_hash": hash_password(USER_PASSWORD),
            "role": Role.USER.value,
        }
        data.update(overrides)
        return CRUDUser().create(db, data)

    return _make_user


@pytest.fixture()
def admin(make_user: Callable[..., User]) -> User:
    return make_user(
        name="Admin Mireb",
        email="admin@example.com",
        password_hash=hash_password(ADMIN_PASSWORD),
        role=Role.ADMIN.value,
    )


@pytest.fixture()
def admin_headers(admin: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(admin)}"}


@pytest.fixture()
def user(make_user: Callable[..., User]) -> User:
    return make_user()


@pytest.fixture()
def user_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture()
def make_product(db: Session) -> Callable[..., Product]:
    def _make_product(**overrides: Any) -> Product:
        data: Dict[str, Any] = {
            "name": "Robe Africaine Wax",
            "price": 45.0,
            "images": ["https://example.com/robe.jpg"],
            "category": Category.MODE.value,
            "stock": 10,
            "description": "Robe en tissu wax 100% coton.",
        }
        data.update(overrides)
        return CRUDProduct().create(db, data)

    return _make_product
