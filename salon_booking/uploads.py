"""
Appointment reference images

Stored in Cloudflare R2 when credentials are configured, otherwise on local
disk under UPLOAD_DIR and served from /uploads.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config
from fastapi import UploadFile

from . import config
from .errors import ValidationError

logger = logging.getLogger(__name__)

# Allowed image types for uploads
ALLOWED_IMAGE_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/avif": ".avif",
}

APPOINTMENT_IMAGE_PREFIX = "appointments"


def r2_configured() -> bool:
    return bool(config.R2_ACCOUNT_ID and config.R2_ACCESS_KEY_ID and config.R2_SECRET_ACCESS_KEY)


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{config.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=config.R2_ACCESS_KEY_ID,
        aws_secret_access_key=config.R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def _read_image(file: UploadFile) -> tuple[bytes, str]:
    content_type = (file.content_type or "").lower()
    extension = ALLOWED_IMAGE_TYPES.get(content_type)
    if not extension:
        raise ValidationError("Solo se permiten imágenes (png, jpg, webp, gif, heic, avif)")

    # Read one byte past the limit so oversized files are detected without loading them whole
    data = file.file.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        max_mb = config.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationError(f"El archivo es demasiado grande. Máximo {max_mb}MB")
    if not data:
        raise ValidationError("El archivo está vacío")
    return data, extension


def _store_in_r2(data: bytes, extension: str, content_type: str) -> str:
    key = f"{APPOINTMENT_IMAGE_PREFIX}/{uuid.uuid4()}{extension}"
    try:
        get_r2_client().put_object(
            Bucket=config.R2_BUCKET_NAME,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
    except Exception as e:
        logger.error(f"❌ Failed to upload appointment image to R2: {e}")
        raise
    logger.info(f"✅ Uploaded appointment image to R2: {key}")
    return f"{config.R2_PUBLIC_URL}/{key}" if config.R2_PUBLIC_URL else key


def _store_locally(data: bytes, extension: str) -> str:
    upload_dir = Path(config.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4()}{extension}"
    (upload_dir / filename).write_bytes(data)
    logger.info(f"✅ Saved appointment image {filename}")
    return f"/uploads/{filename}"


def save_appointment_image(file: Optional[UploadFile]) -> Optional[str]:
    """Persist an optional uploaded image and return the URL to store with the appointment."""
    if file is None or not file.filename:
        return None

    data, extension = _read_image(file)
    if r2_configured():
        return _store_in_r2(data, extension, file.content_type)
    return _store_locally(data, extension)


def delete_appointment_image(image_url: Optional[str]) -> None:
    """Remove an image stored by ``save_appointment_image`` for a booking that was not saved."""
    if not image_url:
        return

    if image_url.startswith("/uploads/"):
        path = Path(config.UPLOAD_DIR) / Path(image_url).name
        path.unlink(missing_ok=True)
        logger.info(f"🗑️ Removed orphaned appointment image {path.name}")
        return

    key = image_url
    if config.R2_PUBLIC_URL and image_url.startswith(f"{config.R2_PUBLIC_URL}/"):
        key = image_url[len(config.R2_PUBLIC_URL) + 1:]
    try:
        get_r2_client().delete_object(Bucket=config.R2_BUCKET_NAME, Key=key)
    except Exception as e:
        # The booking error is what the caller reports
        logger.error(f"❌ Failed to delete orphaned appointment image {key} from R2: {e}")
        return
    logger.info(f"🗑️ Removed orphaned appointment image {key} from R2")
