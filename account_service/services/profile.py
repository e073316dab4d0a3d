"""
The profile merge engine.

One engine serves both the general and the trainer profile updates: the
fields a caller may change are looked up by role, and every identity write
goes through the same uniqueness check. Health fields live in a separate
record whose BMI is recomputed on every write.
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from .. import models, schemas
from ..exceptions import Forbidden, NotFound, ValidationError
from ..stores import AccountStore, HealthStore, UNIQUE_IDENTITY_FIELDS
from .identity import ensure_unique
from .metrics import derive_metrics

logger = logging.getLogger(__name__)

EDITABLE_FIELDS_BY_ROLE = {
    models.Role.USER: frozenset(schemas.IDENTITY_FIELDS),
    models.Role.PT: frozenset(schemas.IDENTITY_FIELDS + schemas.TRAINER_FIELDS),
    models.Role.ADMIN: frozenset(schemas.IDENTITY_FIELDS + schemas.TRAINER_FIELDS),
}

# Identity fields that may never be cleared
REQUIRED_IDENTITY_FIELDS = frozenset({"username", "email"})

HEALTH_DEFAULTS = {
    "gender": models.Gender.MALE.value,
    "height": 170.0,
    "weight": 70.0,
}


def update_identity(db: Session, principal: models.User, fields: Dict[str, Any]) -> models.User:
    """
    Applies a partial identity update to a user.

    Args:
        db (Session): The database session.
        principal (models.User): The user being updated.
        fields (Dict[str, Any]): Only the fields the client sent. Absent
            fields are left untouched.

    Raises:
        Forbidden: If a field is not editable for the user's role.
        ValidationError: If username or email is explicitly cleared.
        Conflict: If username, email or phone is taken by another account.

    Returns:
        models.User: The updated user.
    """
    if "phone" in fields:
        fields = {**fields, "phone": schemas.blank_to_none(fields["phone"])}

    allowed = EDITABLE_FIELDS_BY_ROLE[models.Role(principal.role)]
    not_allowed = sorted(set(fields) - allowed)
    if not_allowed:
        raise Forbidden(f"Role '{principal.role}' cannot update: {', '.join(not_allowed)}")

    cleared = sorted(field for field in REQUIRED_IDENTITY_FIELDS if field in fields and fields[field] is None)
    if cleared:
        raise ValidationError(f"{', '.join(cleared).capitalize()} cannot be empty")

    store = AccountStore(db)
    candidate = {field: fields[field] for field in UNIQUE_IDENTITY_FIELDS if fields.get(field) is not None}
    if candidate:
        ensure_unique(store, exclude_id=principal.id, **candidate)

    if not fields:
        return principal
    user = store.update_by_id(principal.id, fields)
    logger.info(f"Updated identity fields {sorted(fields)} for user {user.id}")
    return user


def update_health(db: Session, owner_id: int, fields: Dict[str, Any]) -> models.HealthInfo:
    """
    Creates or partially updates a user's health record and recomputes BMI.

    A new record takes the defaults (male, 170 cm, 70 kg) for any field the
    client did not send.
    """
    unknown = sorted(set(fields) - set(schemas.HEALTH_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown health fields: {', '.join(unknown)}")
    cleared = sorted(field for field, value in fields.items() if value is None)
    if cleared:
        raise ValidationError(f"{', '.join(cleared).capitalize()} cannot be empty")

    values = {field: _normalize(field, value) for field, value in fields.items()}
    store = HealthStore(db)
    record = store.find_by_owner(owner_id)

    if record is None:
        merged = {**HEALTH_DEFAULTS, **values}
        bmi, category = derive_metrics(merged["height"], merged["weight"])
        record = models.HealthInfo(user_id=owner_id, bmi=bmi, bmi_category=category.value, **merged)
        record = store.insert(record)
        logger.info(f"Created health record for user {owner_id}")
        return record

    height = values.get("height", record.height)
    weight = values.get("weight", record.weight)
    bmi, category = derive_metrics(height, weight)
    for field, value in values.items():
        setattr(record, field, value)
    record.bmi = bmi
    record.bmi_category = category.value
    return store.update(record)


def compose_profile_view(db: Session, principal_id: int) -> schemas.ProfileView:
    """
    Builds the merged profile view from the current user and health record.

    Both are read through the given session, so writes made earlier with the
    same session are always reflected.
    """
    user = AccountStore(db).find_by_id(principal_id)
    if user is None:
        raise NotFound("User not found")
    health = HealthStore(db).find_by_owner(principal_id)
    return schemas.ProfileView(
        user=schemas.UserResponse.model_validate(user),
        health_info=schemas.HealthInfoResponse.model_validate(health) if health else None,
    )


def _normalize(field: str, value: Any) -> Any:
    if field != "gender":
        return value
    try:
        return models.Gender(value).value
    except ValueError as e:
        raise ValidationError(f"Unknown gender: {value}") from e
