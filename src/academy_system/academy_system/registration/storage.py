"""Disk storage for onboarding images.

Images are written below UPLOAD_FOLDER under the same key layout the public
URLs use, so `/uploads/<key>` can serve them back.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
import uuid
from pathlib import Path
from typing import Dict, Optional

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.constants import ALLOWED_IMAGE_TYPES, MAX_UPLOAD_BYTES, UPLOAD_KEY_PREFIX
from ..core.exceptions import NotFoundError, ValidationError
from .model import ImagePayload

logger = logging.getLogger(__name__)

# form field -> key label
IMAGE_FIELDS = {
    "businessLogo": "logo",
    "businessNameUpload": "name",
    "profilePicture": "profile",
}
URL_FIELDS = {
    "businessLogo": "businessLogoUrl",
    "businessNameUpload": "businessNameUploadUrl",
    "profilePicture": "profilePictureUrl",
}
FIELD_LABELS = {
    "businessLogo": "Business Logo",
    "businessNameUpload": "Business Name Upload",
    "profilePicture": "Profile Picture",
}

_EXT_BY_TYPE = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/svg+xml": "svg",
}
_DATA_URL_RE = re.compile(r"^data:([\w/+.-]+)(;base64)?,(.*)$", re.DOTALL)
_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9-]")


def decode_data_url(value: str) -> ImagePayload:
    m = _DATA_URL_RE.match(value.strip())
    if not m or not m.group(2):
        raise ValidationError("Invalid image data. Expected a base64 data URL.")
    try:
        content = base64.b64decode(m.group(3), validate=False)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid image data. Could not decode base64 content.")
    return ImagePayload(content=content, content_type=m.group(1).lower())


def read_file_storage(file: FileStorage) -> Optional[ImagePayload]:
    content = file.read()
    if not content and not file.filename:
        return None
    return ImagePayload(content=content, content_type=(file.mimetype or "").lower(), filename=file.filename)


def safe_segment(value: str, *, limit: Optional[int] = None) -> str:
    out = _UNSAFE_RE.sub("_", value)
    return out[:limit] if limit else out


class UploadStorage:
    def __init__(self, root: str, *, public_base_url: str = "", max_bytes: int = MAX_UPLOAD_BYTES):
        self._root = Path(root)
        self._public_base_url = public_base_url.rstrip("/")
        self._max_bytes = int(max_bytes)

    def validate(self, image: ImagePayload) -> None:
        if image.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Invalid file type. Only PNG, JPG, JPEG, and SVG are allowed.")
        if image.size > self._max_bytes:
            size_mb = image.size / (1024 * 1024)
            limit_mb = self._max_bytes / (1024 * 1024)
            raise ValidationError(
                f"File too large ({size_mb:.2f}MB). Maximum size is {limit_mb:g}MB. "
                "Please compress or resize your image."
            )
        if image.content_type == "image/svg+xml":
            if b"<svg" not in image.content[:4096].lower():
                raise ValidationError("Invalid SVG image.")
            return
        try:
            with Image.open(io.BytesIO(image.content)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError):
            raise ValidationError("Uploaded file is not a readable image.")

    def _extension(self, image: ImagePayload) -> str:
        if image.filename and "." in image.filename:
            ext = secure_filename(image.filename.rsplit(".", 1)[-1]).lower()
            if ext:
                return ext
        return _EXT_BY_TYPE.get(image.content_type, "jpg")

    def save(self, image: ImagePayload, *, prefix: str, label: str) -> str:
        """Validate and store one image; return its public URL."""
        self.validate(image)
        key = f"{prefix}/{label}-{uuid.uuid4()}.{self._extension(image)}"
        target = self._root / key
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(image.content)
        logger.info("Stored %s (%d bytes) at %s", label, image.size, key)
        return f"{self._public_base_url}/uploads/{key}"

    def save_business_images(
        self, *, user_email: str, business_name: str, images: Dict[str, ImagePayload]
    ) -> Dict[str, str]:
        if not images:
            raise ValidationError("At least one image must be provided")

        safe_business = safe_segment(business_name or "business", limit=50)
        safe_email = safe_segment(user_email.split("@")[0])
        prefix = f"{UPLOAD_KEY_PREFIX}/{safe_email}_{safe_business}"

        urls: Dict[str, str] = {}
        for field_name, label in IMAGE_FIELDS.items():
            image = images.get(field_name)
            if image is None:
                continue
            try:
                urls[URL_FIELDS[field_name]] = self.save(image, prefix=prefix, label=label)
            except ValidationError as e:
                raise ValidationError(f"{FIELD_LABELS[field_name]}: {e}")
        return urls

    def resolve(self, key: str) -> Path:
        """Map a public key back to a file below the storage root."""
        root = self._root.resolve()
        path = (root / key).resolve()
        if root not in path.parents or not path.is_file():
            raise NotFoundError("File not found")
        return path
