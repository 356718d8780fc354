"""Определение формата изображения по содержимому, без учёта имени файла."""
from __future__ import annotations

from iconprobe.models.image_format import ImageFormat

MAGIC_PNG = b"\x89PNG\r\n\x1a\n"
MAGIC_JPEG = b"\xff\xd8\xff"  # SOI + начало следующего маркера
MAGIC_RIFF = b"RIFF"
MAGIC_WEBP = b"WEBP"  # по смещению 8, после размера RIFF-блока
MAGIC_ICO = b"\x00\x00\x01\x00"
MAGIC_BMP = b"BM"


def detect_format(data: bytes) -> ImageFormat:
    """Классифицирует буфер по сигнатуре в начале.

    Функция тотальна: короткие или нераспознанные данные дают `ImageFormat.UNKNOWN`.
    Порядок проверок фиксирован, ICO проверяется раньше BMP.
    """
    data = bytes(data[:12])
    if len(data) < 2:
        return ImageFormat.UNKNOWN

    if data.startswith(MAGIC_PNG):
        return ImageFormat.PNG
    if data.startswith(MAGIC_JPEG):
        return ImageFormat.JPEG
    if len(data) >= 12 and data.startswith(MAGIC_RIFF) and data[8:12] == MAGIC_WEBP:
        return ImageFormat.WEBP
    if data.startswith(MAGIC_ICO):
        return ImageFormat.ICO
    if data.startswith(MAGIC_BMP):
        return ImageFormat.BMP
    return ImageFormat.UNKNOWN


def is_png(data: bytes) -> bool:
    return bytes(data[:len(MAGIC_PNG)]) == MAGIC_PNG
