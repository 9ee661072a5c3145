"""CRUD helpers for user accounts."""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Query, Session

from mireb.repositories.storefront.models.users_model import User
from mireb.time_utils import utcnow


class CRUDUser:
    """Database access for users."""

    def get(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def query(self, db: Session) -> Query:
        return db.query(User)

    def create(self, db: Session, data: Dict[str, Any]) -> User:
        user = User(**data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def update(self, db: Session, user: User, data: Dict[str, Any]) -> User:
        for field, value in data.items():
            setattr(user, field, value)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def touch_last_login(self, db: Session, user: User) -> User:
        """Refresh ``last_login`` without rewriting the other columns."""
        db.query(User).filter(User.id == user.id).update(
            {User.last_login: utcnow()}, synchronize_session=False
        )
        db.commit()
        db.refresh(user)
        return user
