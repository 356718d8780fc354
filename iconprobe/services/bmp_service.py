"""Декодирование DIB (BMP без файлового заголовка) из записей ICO.

Поддерживаются несжатые изображения 1/4/8/24/32 бит на пиксель.
Каждая глубина цвета обрабатывается отдельной чистой функцией над
numpy-массивом строк, результат всегда RGBA сверху вниз.

Строки в DIB хранятся снизу вверх и выровнены до 4 байт. Если данные
обрезаны, недостающие строки остаются прозрачно-чёрными, ошибка не
поднимается: частично отрисованная иконка лучше, чем никакая.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from iconprobe.config import DecoderSettings
from iconprobe.errors import (
    TruncatedEntry,
    TruncatedPalette,
    UnsupportedBitDepth,
    UnsupportedCompression,
    UnsupportedDibHeader,
)
from iconprobe.models.image_format import ImageFormat
from iconprobe.models.image_model import DecodedImage

logger = logging.getLogger(__name__)

DIB_HEADER_SIZE = 40
PALETTE_ENTRY_SIZE = 4  # B, G, R, reserved

# biSize, biWidth, biHeight, biPlanes, biBitCount, biCompression
_DIB_STRUCT = struct.Struct("<IiiHHI")


@dataclass(frozen=True)
class DibHeader:
    """Поля BITMAPINFOHEADER, нужные для декодирования.

    Fields:
        header_size: Размер заголовка, с него начинается палитра.
        width: Ширина, px.
        height: Высота в ICO удвоена (цвет + маска AND).
        planes: Плоскости цвета.
        bit_count: Бит на пиксель.
        compression: 0 для несжатых данных.
    """
    header_size: int
    width: int
    height: int
    planes: int
    bit_count: int
    compression: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "DibHeader":
        return cls(*_DIB_STRUCT.unpack_from(data, 0))


def row_stride(bit_count: int, width: int) -> int:
    """Длина строки в байтах с выравниванием до 4 байт."""
    if bit_count == 1:
        return ((width + 31) // 32) * 4
    if bit_count == 4:
        return ((width * 4 + 31) // 32) * 4
    if bit_count == 8:
        return ((width + 3) // 4) * 4
    if bit_count == 24:
        return ((width * 3 + 3) // 4) * 4
    # 32 бита всегда выровнены
    return width * 4


def _row_span(bit_count: int, width: int) -> int:
    """Сколько байт строки должно присутствовать в буфере, чтобы её декодировать."""
    if bit_count in (1, 4):
        return row_stride(bit_count, width)
    return width * (bit_count // 8)


def _read_rows(pixel_data: bytes, height: int, stride: int, span: int) -> np.ndarray:
    """Возвращает строки в порядке хранения (снизу вверх), форма (n, stride).

    n меньше `height`, если буфер обрезан; хвост последней строки за
    пределами `span` дополняется нулями.
    """
    length = len(pixel_data)
    if length < span:
        available = 0
    else:
        available = min(height, (length - span) // stride + 1)

    rows = np.zeros(available * stride, dtype=np.uint8)
    chunk = np.frombuffer(pixel_data[:available * stride], dtype=np.uint8)
    rows[:chunk.size] = chunk
    return rows.reshape(available, stride)


def build_palette(palette_bytes: bytes) -> np.ndarray:
    """Собирает таблицу (256, 4) RGBA из записей палитры B-G-R-x.

    Альфа всегда 255; индексы за пределами палитры дают (0, 0, 0, 0).
    """
    entries = np.frombuffer(palette_bytes, dtype=np.uint8).reshape(-1, PALETTE_ENTRY_SIZE)[:256]
    lut = np.zeros((256, 4), dtype=np.uint8)
    count = entries.shape[0]
    lut[:count, 0] = entries[:, 2]
    lut[:count, 1] = entries[:, 1]
    lut[:count, 2] = entries[:, 0]
    lut[:count, 3] = 255
    return lut


# ---------- Декодеры по глубине цвета ----------
def _decode_1bit(rows: np.ndarray, width: int, lut: Optional[np.ndarray]) -> np.ndarray:
    # старший бит байта соответствует левому пикселю
    indices = np.unpackbits(rows, axis=1)[:, :width]
    return lut[indices]


def _decode_4bit(rows: np.ndarray, width: int, lut: Optional[np.ndarray]) -> np.ndarray:
    # старший полубайт соответствует левому пикселю
    nibbles = np.stack((rows >> 4, rows & 0x0F), axis=2).reshape(rows.shape[0], rows.shape[1] * 2)
    return lut[nibbles[:, :width]]


def _decode_8bit(rows: np.ndarray, width: int, lut: Optional[np.ndarray]) -> np.ndarray:
    return lut[rows[:, :width]]


def _decode_24bit(rows: np.ndarray, width: int, lut: Optional[np.ndarray]) -> np.ndarray:
    bgr = rows[:, :width * 3].reshape(rows.shape[0], width, 3)
    out = np.empty((rows.shape[0], width, 4), dtype=np.uint8)
    out[..., 0] = bgr[..., 2]
    out[..., 1] = bgr[..., 1]
    out[..., 2] = bgr[..., 0]
    out[..., 3] = 255
    return out


def _decode_32bit(rows: np.ndarray, width: int, lut: Optional[np.ndarray]) -> np.ndarray:
    bgra = rows[:, :width * 4].reshape(rows.shape[0], width, 4)
    return bgra[..., [2, 1, 0, 3]]


_DECODERS: Dict[int, Callable[[np.ndarray, int, Optional[np.ndarray]], np.ndarray]] = {
    1: _decode_1bit,
    4: _decode_4bit,
    8: _decode_8bit,
    24: _decode_24bit,
    32: _decode_32bit,
}

SUPPORTED_BIT_DEPTHS = tuple(sorted(_DECODERS))


def decode_dib(
    data: bytes,
    fallback_width: int,
    fallback_height: int,
    color_count: int = 0,
    settings: Optional[DecoderSettings] = None,
) -> DecodedImage:
    """Декодирует DIB из записи ICO в RGBA-изображение.

    Args:
        data: Байты записи, начиная с BITMAPINFOHEADER.
        fallback_width: Ширина из каталога ICO, если в заголовке 0.
        fallback_height: Высота из каталога ICO, если в заголовке 0.
        color_count: Размер палитры из каталога ICO (0 = полная палитра).
        settings: Ограничения декодера.

    Returns:
        `DecodedImage` размером width x height.

    Raises:
        TruncatedEntry: данных меньше, чем 40 байт заголовка.
        UnsupportedDibHeader: размер заголовка < 40 или недопустимые размеры.
        UnsupportedBitDepth: глубина цвета не из 1/4/8/24/32.
        UnsupportedCompression: сжатый DIB.
        TruncatedPalette: палитра не помещается в буфер.
    """
    settings = settings or DecoderSettings.from_env()
    if len(data) < DIB_HEADER_SIZE:
        raise TruncatedEntry(f"{len(data)} байт недостаточно для заголовка DIB ({DIB_HEADER_SIZE} байт)")

    header = DibHeader.from_bytes(data)
    if header.header_size < DIB_HEADER_SIZE:
        raise UnsupportedDibHeader(f"размер заголовка {header.header_size} меньше {DIB_HEADER_SIZE}")
    if header.bit_count not in _DECODERS:
        raise UnsupportedBitDepth(f"глубина цвета {header.bit_count} не из {SUPPORTED_BIT_DEPTHS}")
    if header.compression != 0:
        raise UnsupportedCompression(f"сжатие {header.compression} не поддерживается")
    # высота в ICO включает маску AND; деление с округлением к нулю
    half_height = int(header.height / 2)
    if header.width < 0 or half_height < 0:
        raise UnsupportedDibHeader(f"отрицательные размеры {header.width}x{header.height} не поддерживаются")

    width = header.width or fallback_width
    height = half_height or fallback_height
    if width <= 0 or height <= 0:
        raise UnsupportedDibHeader(f"недопустимые размеры {width}x{height}")
    if width > settings.max_dimension or height > settings.max_dimension:
        raise UnsupportedDibHeader(
            f"размеры {width}x{height} превышают предел {settings.max_dimension}"
        )

    offset = header.header_size
    lut = None
    if header.bit_count <= 8:
        palette_size = 1 << header.bit_count
        if 0 < color_count < palette_size:
            palette_size = color_count
        palette_end = offset + palette_size * PALETTE_ENTRY_SIZE
        if len(data) < palette_end:
            raise TruncatedPalette(
                f"палитре из {palette_size} цветов нужно {palette_end} байт, получено {len(data)}"
            )
        lut = build_palette(data[offset:palette_end])
        offset = palette_end

    stride = row_stride(header.bit_count, width)
    rows = _read_rows(data[offset:], height, stride, _row_span(header.bit_count, width))
    decoded = _DECODERS[header.bit_count](rows, width, lut)

    available = decoded.shape[0]
    if available < height:
        logger.warning(
            "DIB pixel data truncated: %d of %d rows present, the rest left blank", available, height
        )

    out = np.zeros((height, width, 4), dtype=np.uint8)
    if available:
        # первая сохранённая строка нижняя
        out[height - available:] = decoded[::-1]
    logger.debug("Decoded %d-bit DIB %dx%d", header.bit_count, width, height)
    return DecodedImage.from_array(out, ImageFormat.ICO)
