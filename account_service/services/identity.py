"""
Identity uniqueness checks for username, email and phone.

Matching is exact; no case folding or phone formatting is applied. The
check is a fast path only, the UNIQUE constraints in the database remain
the authoritative guard (see `stores.store_call`).
"""

import logging
from typing import Optional

from .. import models
from ..exceptions import Conflict
from ..stores import AccountStore, UNIQUE_IDENTITY_FIELDS

logger = logging.getLogger(__name__)


def find_conflict(
    store: AccountStore,
    username: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> Optional[models.User]:
    """
    Finds another account that already claims one of the provided values.

    Args:
        store (AccountStore): The account store to search.
        username, email, phone: Candidate values. None means "not provided"
            and that field is not checked.
        exclude_id (Optional[int]): The acting user's own ID, so that their
            current values never count as a conflict.

    Returns:
        Optional[models.User]: The conflicting account, or None.
    """
    return store.find_one(exclude_id=exclude_id, username=username, email=email, phone=phone)


def ensure_unique(store: AccountStore, exclude_id: Optional[int] = None, **candidate: Optional[str]) -> None:
    """Raises `Conflict` naming the clashing fields if any candidate value is taken."""
    existing = find_conflict(store, exclude_id=exclude_id, **candidate)
    if existing is None:
        return
    clashing = [
        field for field in UNIQUE_IDENTITY_FIELDS
        if candidate.get(field) is not None and getattr(existing, field) == candidate[field]
    ]
    logger.info(f"Identity conflict on {', '.join(clashing)} against user {existing.id}")
    raise Conflict(f"{', '.join(clashing).capitalize()} already in use")
