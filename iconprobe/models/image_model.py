"""Модель декодированного изображения.

Принципы:
- SRP: только структура данных, без логики декодирования.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from iconprobe.models.image_format import ImageFormat


@dataclass(frozen=True)
class DecodedImage:
    """Результат декодирования: RGBA-изображение и его метаданные.

    Fields:
        pil_image: Изображение PIL в режиме "RGBA", принадлежит вызывающему коду.
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL, всегда "RGBA".
        source_format: Формат входных байтов.
    """
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    source_format: ImageFormat

    @classmethod
    def from_pil(cls, pil_image: Image.Image, source_format: ImageFormat) -> "DecodedImage":
        """Приводит изображение к RGBA и упаковывает в модель."""
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        width, height = pil_image.size
        return cls(
            pil_image=pil_image,
            width=width,
            height=height,
            mode=pil_image.mode,
            source_format=source_format,
        )

    @classmethod
    def from_array(cls, rgba: np.ndarray, source_format: ImageFormat) -> "DecodedImage":
        """Создаёт модель из массива uint8 формы (h, w, 4)."""
        pil_image = Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
        return cls.from_pil(pil_image, source_format)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def pixels(self) -> np.ndarray:
        """Возвращает копию пикселей как массив uint8 формы (h, w, 4)."""
        return np.array(self.pil_image, dtype=np.uint8)
