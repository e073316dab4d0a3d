"""
Local-disk storage for avatar images.
"""

import os
import random
import time

from ..config import settings
from ..exceptions import ValidationError

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

PUBLIC_PREFIX = "/uploads/avatars"


class AvatarStorage:
    """
    Saves avatar uploads and returns the public path they are served from.

    Only JPEG, PNG and WEBP images up to `max_bytes` are accepted.
    """

    def __init__(self, base_dir: str | None = None, max_bytes: int | None = None):
        self.directory = os.path.join(base_dir or settings.UPLOAD_DIR, "avatars")
        self.max_bytes = max_bytes or settings.MAX_AVATAR_BYTES

    def save(self, content: bytes, content_type: str | None, filename: str | None = None) -> str:
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Only JPG, PNG or WEBP images are accepted")
        if not content:
            raise ValidationError("No file was uploaded")
        if len(content) > self.max_bytes:
            raise ValidationError(f"Avatar exceeds the {self.max_bytes // (1024 * 1024)} MB limit")

        # Keep the client's extension when it is one we recognise
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in ALLOWED_CONTENT_TYPES.values() and extension != ".jpeg":
            extension = ALLOWED_CONTENT_TYPES[content_type]

        unique_name = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"
        os.makedirs(self.directory, exist_ok=True)
        with open(os.path.join(self.directory, unique_name), "wb") as f:
            f.write(content)
        return f"{PUBLIC_PREFIX}/{unique_name}"


def get_avatar_storage() -> AvatarStorage:
    """FastAPI dependency returning the configured avatar storage."""
    return AvatarStorage()
