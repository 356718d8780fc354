"""Декодирование иконки из байтов любого поддерживаемого формата.

Принципы:
- SRP: класс только выбирает декодер по сигнатуре и упаковывает результат.
- OCP: новый формат добавляется проверкой в `format_service` и веткой в `decode`.
- LSP/ISP: всегда возвращает `DecodedImage` в RGBA; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from iconprobe.config import DecoderSettings
from iconprobe.errors import EmbeddedDecodeFailed, UnsupportedFormat
from iconprobe.models.image_format import ImageFormat
from iconprobe.models.image_model import DecodedImage
from iconprobe.services.format_service import detect_format
from iconprobe.services.ico_service import decode_ico

logger = logging.getLogger(__name__)

# форматы, которые читает Pillow напрямую
PIL_FORMATS = (ImageFormat.PNG, ImageFormat.JPEG, ImageFormat.WEBP, ImageFormat.BMP)


class ImageService:
    def __init__(self, settings: Optional[DecoderSettings] = None) -> None:
        self._settings = settings

    def decode(self, data: bytes) -> DecodedImage:
        """Определяет формат по содержимому и декодирует изображение.

        Args:
            data: Байты файла, уже прочитанные с диска или из сети.

        Returns:
            `DecodedImage` в режиме RGBA с форматом источника.

        Raises:
            UnsupportedFormat: сигнатура не распознана.
            EmbeddedDecodeFailed: Pillow не смог декодировать распознанный формат.
            IconDecodeError: ошибки разбора ICO.
        """
        image_format = detect_format(data)
        logger.debug("Detected %s (%d bytes)", image_format, len(data))

        if image_format is ImageFormat.ICO:
            return decode_ico(data, settings=self._settings)
        if image_format in PIL_FORMATS:
            return self._decode_with_pil(data, image_format)
        raise UnsupportedFormat("данные не совпадают ни с одной известной сигнатурой")

    def _decode_with_pil(self, data: bytes, image_format: ImageFormat) -> DecodedImage:
        try:
            with Image.open(io.BytesIO(data)) as pil_image:
                pil_image.load()
                rgba = pil_image.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise EmbeddedDecodeFailed(f"сигнатура {image_format} найдена, но Pillow не может прочитать данные") from exc
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise EmbeddedDecodeFailed(f"не удалось декодировать {image_format}: {exc}") from exc
        return DecodedImage.from_pil(rgba, image_format)
