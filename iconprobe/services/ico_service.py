"""Разбор контейнера ICO и выбор изображения с наибольшим разрешением.

Принципы:
- SRP: сервис отвечает за каталог ICO и диспетчеризацию записи (PNG или DIB).
- Декодирование DIB вынесено в `bmp_service`, PNG декодирует Pillow.
"""
from __future__ import annotations

import io
import logging
from functools import reduce
from typing import List, Optional

from PIL import Image

from iconprobe.config import DecoderSettings
from iconprobe.errors import (
    EmbeddedDecodeFailed,
    MalformedHeader,
    NoValidEntries,
    TruncatedDirectory,
    TruncatedEntry,
)
from iconprobe.models.ico_model import ENTRY_SIZE, HEADER_SIZE, IcoDirectoryEntry, IcoHeader
from iconprobe.models.image_format import ImageFormat
from iconprobe.models.image_model import DecodedImage
from iconprobe.services.bmp_service import decode_dib
from iconprobe.services.format_service import is_png

logger = logging.getLogger(__name__)

ICO_TYPE = 1
CUR_TYPE = 2


def parse_header(data: bytes) -> IcoHeader:
    """Разбирает и проверяет 6-байтовый заголовок ICO.

    Raises:
        MalformedHeader: буфер короче 6 байт, reserved != 0, тип не ICO или count == 0.
    """
    if len(data) < HEADER_SIZE:
        raise MalformedHeader(f"{len(data)} байт недостаточно для заголовка ({HEADER_SIZE} байт)")

    header = IcoHeader.from_bytes(data)
    if header.reserved != 0:
        raise MalformedHeader(f"поле reserved должно быть 0, получено {header.reserved}")
    if header.kind != ICO_TYPE:
        kind = "курсоры (CUR) не поддерживаются" if header.kind == CUR_TYPE else f"получено {header.kind}"
        raise MalformedHeader(f"тип должен быть {ICO_TYPE} для ICO, {kind}")
    if header.count == 0:
        raise MalformedHeader("в файле нет изображений")
    return header


def parse_directory(data: bytes, header: IcoHeader) -> List[IcoDirectoryEntry]:
    """Читает все записи каталога в файловом порядке, без фильтрации.

    Raises:
        TruncatedDirectory: буфер короче заголовка и `header.count` записей.
    """
    if len(data) < header.directory_size:
        raise TruncatedDirectory(
            f"{header.count} записям нужно {header.directory_size} байт, получено {len(data)}"
        )
    return [
        IcoDirectoryEntry.from_bytes(data, HEADER_SIZE + index * ENTRY_SIZE)
        for index in range(header.count)
    ]


def select_best_entry(entries: List[IcoDirectoryEntry], length: int) -> IcoDirectoryEntry:
    """Выбирает запись с максимальной площадью среди валидных.

    Записи с нулевым смещением/размером или выходящие за границы буфера
    пропускаются. При равной площади выигрывает более ранняя запись.

    Raises:
        NoValidEntries: ни одна запись не прошла проверку.
    """
    valid = []
    for index, entry in enumerate(entries):
        if entry.is_within(length):
            valid.append(entry)
        else:
            logger.debug(
                "Skipping ICO entry %d: offset=%d size=%d buffer=%d",
                index, entry.offset_bytes, entry.size_bytes, length,
            )
    if not valid:
        raise NoValidEntries(f"ни одна из {len(entries)} записей каталога не указывает внутрь файла")

    # строгое сравнение сохраняет первую из равных
    return reduce(lambda best, entry: entry if entry.resolution > best.resolution else best, valid)


def decode_png(data: bytes) -> DecodedImage:
    """Декодирует PNG-поток из записи ICO через Pillow.

    Raises:
        EmbeddedDecodeFailed: Pillow не смог прочитать данные.
    """
    try:
        with Image.open(io.BytesIO(data)) as pil_image:
            pil_image.load()
            rgba = pil_image.convert("RGBA")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise EmbeddedDecodeFailed(f"не удалось декодировать PNG в ICO: {exc}") from exc
    return DecodedImage.from_pil(rgba, ImageFormat.ICO)


def decode_entry(
    data: bytes,
    fallback_width: int,
    fallback_height: int,
    color_count: int = 0,
    settings: Optional[DecoderSettings] = None,
) -> DecodedImage:
    """Декодирует данные одной записи: PNG или DIB без файлового заголовка.

    Raises:
        TruncatedEntry: данных меньше 4 байт.
        EmbeddedDecodeFailed: ошибка декодирования PNG.
        IconDecodeError: ошибки DIB из `decode_dib`.
    """
    if len(data) < 4:
        raise TruncatedEntry(f"данные записи {len(data)} байт, нужно минимум 4")
    if is_png(data):
        return decode_png(data)
    return decode_dib(data, fallback_width, fallback_height, color_count=color_count, settings=settings)


def decode_ico(data: bytes, settings: Optional[DecoderSettings] = None) -> DecodedImage:
    """Декодирует ICO-файл и возвращает вложенное изображение с наибольшим разрешением.

    Args:
        data: Байты ICO-файла целиком.
        settings: Ограничения декодера DIB.

    Returns:
        `DecodedImage` в режиме RGBA.

    Raises:
        IconDecodeError: любая ошибка разбора контейнера или записи.
    """
    header = parse_header(data)
    entries = parse_directory(data, header)
    best = select_best_entry(entries, len(data))
    logger.debug(
        "Selected ICO entry %dx%d (%d bytes at %d) out of %d",
        best.actual_width, best.actual_height, best.size_bytes, best.offset_bytes, len(entries),
    )
    return decode_entry(
        best.slice(data),
        best.actual_width,
        best.actual_height,
        color_count=best.color_count,
        settings=settings,
    )
