"""Структуры контейнера ICO: заголовок файла и записи каталога.

Принципы:
- SRP: только разбор фиксированных little-endian структур, без выбора и декодирования.
- Неизменяемость (`frozen=True`): записи живут в пределах одного вызова декодера.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

HEADER_SIZE = 6
ENTRY_SIZE = 16

_HEADER_STRUCT = struct.Struct("<HHH")
_ENTRY_STRUCT = struct.Struct("<BBBBHHII")


@dataclass(frozen=True)
class IcoHeader:
    """ICONDIR: первые 6 байт файла.

    Fields:
        reserved: Должно быть 0.
        kind: 1 для ICO, 2 для CUR.
        count: Число записей каталога.
    """
    reserved: int
    kind: int
    count: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "IcoHeader":
        reserved, kind, count = _HEADER_STRUCT.unpack_from(data, 0)
        return cls(reserved=reserved, kind=kind, count=count)

    @property
    def directory_size(self) -> int:
        """Сколько байт занимают заголовок и все записи каталога."""
        return HEADER_SIZE + ENTRY_SIZE * self.count


@dataclass(frozen=True)
class IcoDirectoryEntry:
    """ICONDIRENTRY: описание одного вложенного изображения.

    Fields:
        width, height: Размер в px, 0 означает 256.
        color_count: Размер палитры, 0 если палитры нет или >= 256 цветов.
        reserved: Зарезервировано.
        planes: Плоскости цвета.
        bit_count: Бит на пиксель (заявленное значение, реальное берётся из DIB).
        size_bytes: Длина данных изображения.
        offset_bytes: Смещение данных от начала файла.
    """
    width: int
    height: int
    color_count: int
    reserved: int
    planes: int
    bit_count: int
    size_bytes: int
    offset_bytes: int

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "IcoDirectoryEntry":
        return cls(*_ENTRY_STRUCT.unpack_from(data, offset))

    @property
    def actual_width(self) -> int:
        return self.width or 256

    @property
    def actual_height(self) -> int:
        return self.height or 256

    @property
    def resolution(self) -> int:
        return self.actual_width * self.actual_height

    def is_within(self, length: int) -> bool:
        """Проверяет, что запись непустая и её данные лежат внутри буфера длины `length`."""
        if self.offset_bytes == 0 or self.size_bytes == 0:
            return False
        return self.offset_bytes + self.size_bytes <= length

    def slice(self, data: bytes) -> bytes:
        return bytes(data[self.offset_bytes:self.offset_bytes + self.size_bytes])
