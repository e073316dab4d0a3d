"""
Authentication and role-based authorization for API requests.

This module provides `authenticate` and `authorize` as plain functions, plus
FastAPI dependencies (`get_current_user`, `require_roles`) that combine them
so path operations can be protected declaratively.
"""

import logging
from typing import Iterable

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from .. import database, models
from ..auth import get_token_issuer
from ..exceptions import Forbidden, InvalidCredential, Unauthenticated
from ..stores import AccountStore

logger = logging.getLogger(__name__)

# HTTPBearer is a security scheme that expects an "Authorization: Bearer <token>" header.
# auto_error is off so a missing header surfaces as `Unauthenticated` like any other failure.
bearer_scheme = HTTPBearer(auto_error=False)


def authenticate(db: Session, token: str) -> models.User:
    """
    Resolves a bearer token to the user it identifies.

    Raises:
        Unauthenticated: If the token does not verify or its subject no
            longer exists.
    """
    try:
        claims = get_token_issuer().verify(token)
    except InvalidCredential as e:
        logger.info(f"Rejected bearer token: {e.detail}")
        raise Unauthenticated() from e

    user = AccountStore(db).find_by_id(claims.subject_id)
    if user is None:
        logger.info(f"Token subject {claims.subject_id} no longer exists")
        raise Unauthenticated()
    return user


def authorize(principal: models.User, allowed_roles: Iterable[models.Role]) -> None:
    """Raises `Forbidden` unless the principal's role is one of `allowed_roles`."""
    allowed = {models.Role(role) for role in allowed_roles}
    if models.Role(principal.role) not in allowed:
        raise Forbidden()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(database.get_db),
) -> models.User:
    """
    FastAPI dependency to secure endpoints and retrieve the current user.

    Raises:
        Unauthenticated: If no bearer token was sent or it is not valid.

    Returns:
        models.User: The authenticated user.
    """
    if credentials is None:
        raise Unauthenticated("Missing bearer token")
    return authenticate(db, credentials.credentials)


def require_roles(*roles: models.Role):
    """Builds a dependency that authenticates the caller and checks their role."""

    def dependency(current_user: models.User = Depends(get_current_user)) -> models.User:
        authorize(current_user, roles)
        return current_user

    return dependency
