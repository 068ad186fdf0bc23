"""封面图片存储：保存到 UPLOAD_DIR，对外暴露 UPLOAD_URL_PREFIX 下的相对路径"""

import logging
import uuid
from pathlib import Path

from fastapi import UploadFile

from bookswap.server.config import settings
from bookswap.server.utils.errors import ServiceError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


async def save_image(upload: UploadFile) -> str:
    """保存上传图片，返回可访问的相对 URL"""
    if upload.content_type and not upload.content_type.startswith("image/"):
        raise ServiceError(f"Unsupported image type: {upload.content_type}")

    suffix = Path(upload.filename or "").suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        suffix = ".jpg"

    data = await upload.read()
    if not data:
        raise ServiceError("Uploaded image is empty")
    if len(data) > settings.MAX_IMAGE_BYTES:
        raise ServiceError(f"Image exceeds {settings.MAX_IMAGE_BYTES} bytes")

    settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{suffix}"
    (settings.UPLOAD_DIR / filename).write_bytes(data)
    return f"{settings.UPLOAD_URL_PREFIX}/{filename}"


def remove_image(image: str | None) -> None:
    """删除本地存储的图片；外部 URL 不处理"""
    prefix = f"{settings.UPLOAD_URL_PREFIX}/"
    if not image or not image.startswith(prefix):
        return
    path = settings.UPLOAD_DIR / image[len(prefix):]
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"[封面] 删除图片失败 {path}: {e}")
