"""
Thin store classes over a SQLAlchemy session.

The rest of the service reads and writes users and health records only
through these classes. Database failures are translated here: UNIQUE
violations become `Conflict`, anything else from SQLAlchemy becomes
`StoreUnavailable`. The session is rolled back in both cases.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .exceptions import Conflict, NotFound, StoreUnavailable

logger = logging.getLogger(__name__)

UNIQUE_IDENTITY_FIELDS = ("username", "email", "phone")


@contextmanager
def store_call(db: Session):
    """Runs a block of store work, rolling back and translating any database error."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Uniqueness violation rejected at write time: {e.orig}")
        raise Conflict() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store call failed: {e}")
        raise StoreUnavailable() from e


class AccountStore:
    """Reads and writes `User` rows."""

    def __init__(self, db: Session):
        self.db = db

    def find_one(self, exclude_id: Optional[int] = None, **identity: Optional[str]) -> Optional[models.User]:
        """
        Finds a user matching ANY of the given identity fields.

        Only fields with a non-None value take part in the match. When
        `exclude_id` is set, that user is never returned.
        """
        clauses = [
            getattr(models.User, field) == value
            for field, value in identity.items()
            if field in UNIQUE_IDENTITY_FIELDS and value is not None
        ]
        if not clauses:
            return None
        with store_call(self.db):
            query = self.db.query(models.User).filter(or_(*clauses))
            if exclude_id is not None:
                query = query.filter(models.User.id != exclude_id)
            return query.first()

    def find_by_id(self, user_id: int) -> Optional[models.User]:
        with store_call(self.db):
            return self.db.query(models.User).filter(models.User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[models.User]:
        with store_call(self.db):
            return self.db.query(models.User).filter(models.User.email == email).first()

    def find_by_role(self, role: models.Role) -> List[models.User]:
        with store_call(self.db):
            return (
                self.db.query(models.User)
                .filter(models.User.role == role.value)
                .order_by(models.User.id)
                .all()
            )

    def insert(self, user: models.User) -> models.User:
        with store_call(self.db):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user

    def update_by_id(self, user_id: int, fields: Dict[str, Any]) -> models.User:
        """Applies `fields` to the user and returns the refreshed row."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        with store_call(self.db):
            for field, value in fields.items():
                setattr(user, field, value)
            self.db.commit()
            self.db.refresh(user)
        return user


class HealthStore:
    """Reads and writes `HealthInfo` rows."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_owner(self, user_id: int) -> Optional[models.HealthInfo]:
        with store_call(self.db):
            return self.db.query(models.HealthInfo).filter(models.HealthInfo.user_id == user_id).first()

    def insert(self, record: models.HealthInfo) -> models.HealthInfo:
        with store_call(self.db):
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        return record

    def update(self, record: models.HealthInfo) -> models.HealthInfo:
        with store_call(self.db):
            self.db.commit()
            self.db.refresh(record)
        return record
