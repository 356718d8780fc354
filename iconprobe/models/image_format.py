from __future__ import annotations

from enum import Enum


class ImageFormat(Enum):
    """Формат изображения, определённый по сигнатуре (magic bytes)."""

    UNKNOWN = "Unknown"
    PNG = "PNG"
    JPEG = "JPEG"
    WEBP = "WebP"
    BMP = "BMP"
    ICO = "ICO"

    def __str__(self) -> str:
        return self.value
