"""
Defines all API endpoints related to user authentication and profile management.
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from .. import schemas, models, database
from ..auth import get_token_issuer
from ..services import accounts, profile
from ..utils.access import get_current_user, require_roles
from ..utils.avatar_storage import AvatarStorage, get_avatar_storage

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(message: str, user: models.User) -> schemas.AuthResponse:
    token = get_token_issuer().issue(user.id, user.role)
    return schemas.AuthResponse(
        message=message,
        access_token=token,
        user=schemas.UserResponse.model_validate(user),
    )


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(user: schemas.UserCreate, db: Session = Depends(database.get_db)):
    """
    Registers a new user and returns an access token for them.

    Raises:
        Conflict (409): If the username, email or phone is already registered.
        Forbidden (403): If the requested role cannot be self-assigned.
    """
    new_user = accounts.register_user(db, user)
    return _auth_response("Registration successful", new_user)


@router.post("/login", response_model=schemas.AuthResponse)
def login_for_access_token(form_data: schemas.UserLogin, db: Session = Depends(database.get_db)):
    """
    Authenticates a user and returns a JWT access token.

    Raises:
        Unauthenticated (401): If the email or password is incorrect.
    """
    user = accounts.authenticate_credentials(db, form_data.email, form_data.password)
    return _auth_response("Login successful", user)


@router.post("/logout", response_model=schemas.MessageResponse)
def logout():
    """
    Provides a formal endpoint for logging out.

    In a stateless JWT system, the client is responsible for discarding the token.
    This endpoint serves as an acknowledgment.
    """
    return {"message": "Logout successful. Please discard the token on the client side."}


@router.get("/me", response_model=schemas.UserEnvelope)
def read_users_me(current_user: models.User = Depends(get_current_user)):
    """Retrieves the currently authenticated user."""
    return {"message": "Current user", "user": current_user}


@router.get("/admin", response_model=schemas.MessageResponse)
def admin_only(current_user: models.User = Depends(require_roles(models.Role.ADMIN))):
    return {"message": "This route is for admins"}


@router.get("/pt", response_model=schemas.MessageResponse)
def trainers_and_admins(
    current_user: models.User = Depends(require_roles(models.Role.PT, models.Role.ADMIN))
):
    return {"message": "This route is for trainers and admins"}


@router.get("/trainers", response_model=List[schemas.UserResponse])
def list_trainers(db: Session = Depends(database.get_db)):
    """Lists every personal trainer."""
    return accounts.list_trainers(db)


@router.get("/trainers/{trainer_id}", response_model=schemas.UserResponse)
def get_trainer(trainer_id: int, db: Session = Depends(database.get_db)):
    """
    Retrieves a single trainer by ID.

    Raises:
        NotFound (404): If no user has this ID or the user is not a trainer.
    """
    return accounts.get_trainer(db, trainer_id)


@router.put("/profile", response_model=schemas.ProfileUpdateResponse)
def update_profile(
    profile_data: schemas.ProfileUpdate,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(get_current_user)
):
    """
    Updates the authenticated user's identity fields and health record.

    Only the fields present in the request body are changed. The response
    always carries the latest health record, whether or not it was updated.
    """
    sent = profile_data.model_dump(exclude_unset=True)
    identity_fields = {k: v for k, v in sent.items() if k in schemas.IDENTITY_FIELDS}
    health_fields = {k: v for k, v in sent.items() if k in schemas.HEALTH_FIELDS}

    profile.update_identity(db, current_user, identity_fields)
    if health_fields:
        profile.update_health(db, current_user.id, health_fields)

    view = profile.compose_profile_view(db, current_user.id)
    return {"message": "Profile updated successfully", "data": view}


@router.put("/trainer/profile", response_model=schemas.TrainerUpdateResponse)
def update_trainer_profile(
    trainer_data: schemas.TrainerProfileUpdate,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(require_roles(models.Role.PT, models.Role.ADMIN))
):
    """Updates the authenticated trainer's public profile."""
    updated = profile.update_identity(db, current_user, trainer_data.model_dump(exclude_unset=True))
    return {"message": "Trainer profile updated successfully", "updated": updated}


@router.post("/upload-avatar", response_model=schemas.UserEnvelope)
def upload_avatar(
    avatar: UploadFile = File(...),
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(get_current_user),
    storage: AvatarStorage = Depends(get_avatar_storage)
):
    """
    Stores a new avatar image for the authenticated user.

    Raises:
        ValidationError (422): If the file is not a JPG, PNG or WEBP image, or exceeds 5 MB.
    """
    # Read one byte past the limit so oversize uploads are detected without loading them whole
    content = avatar.file.read(storage.max_bytes + 1)
    image_path = storage.save(content, avatar.content_type, avatar.filename)
    updated = accounts.set_avatar(db, current_user.id, image_path)
    return {"message": "Avatar updated successfully", "user": updated}


@router.get("/profile/me", response_model=schemas.ProfileUpdateResponse)
def read_full_profile(
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Retrieves the authenticated user's merged profile and health record."""
    view = profile.compose_profile_view(db, current_user.id)
    return {"message": "Profile retrieved successfully", "data": view}
