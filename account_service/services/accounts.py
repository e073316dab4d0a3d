"""
Account operations: registration, credential checks, trainer lookups and
avatar updates.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from .. import auth, models, schemas
from ..exceptions import Forbidden, NotFound, Unauthenticated
from ..stores import AccountStore
from .identity import ensure_unique

logger = logging.getLogger(__name__)

SELF_REGISTRATION_ROLES = frozenset({models.Role.USER, models.Role.PT})

# Same message for unknown email and wrong password
BAD_CREDENTIALS = "Incorrect email or password"


def register_user(db: Session, data: schemas.UserCreate) -> models.User:
    """
    Registers a new user.

    Raises:
        Forbidden: If the requested role cannot be self-assigned.
        Conflict: If the username, email or phone is already registered.
    """
    if data.role not in SELF_REGISTRATION_ROLES:
        raise Forbidden(f"Cannot self-register with role '{data.role.value}'")

    phone = schemas.blank_to_none(data.phone)
    store = AccountStore(db)
    ensure_unique(store, username=data.username, email=data.email, phone=phone)

    user = models.User(
        username=data.username,
        email=data.email,
        phone=phone,
        date_of_birth=data.date_of_birth,
        role=data.role.value,
        hashed_password=auth.get_password_hash(data.password),
    )
    user = store.insert(user)
    logger.info(f"Registered user {user.id} with role '{user.role}'")
    return user


def authenticate_credentials(db: Session, email: str, password: str) -> models.User:
    """Returns the user for a valid email/password pair, else raises `Unauthenticated`."""
    user = AccountStore(db).find_by_email(email)
    if not user or not auth.verify_password(password, user.hashed_password):
        logger.warning("Rejected login attempt")
        raise Unauthenticated(BAD_CREDENTIALS)
    return user


def list_trainers(db: Session) -> List[models.User]:
    return AccountStore(db).find_by_role(models.Role.PT)


def get_trainer(db: Session, trainer_id: int) -> models.User:
    trainer = AccountStore(db).find_by_id(trainer_id)
    if trainer is None or trainer.role != models.Role.PT.value:
        raise NotFound("Trainer not found")
    return trainer


def set_avatar(db: Session, user_id: int, image_path: str) -> models.User:
    """Records the stored avatar's path on the user."""
    user = AccountStore(db).update_by_id(user_id, {"image": image_path})
    logger.info(f"Updated avatar for user {user_id}")
    return user
