"""Ошибки разбора и декодирования иконок.

Каждый вид ошибки отдельный класс, чтобы вызывающий код мог различать их
через `except`, а в логах был виден этап (`stage`), на котором разбор упал.
"""
from __future__ import annotations


class IconDecodeError(ValueError):
    """Базовая ошибка: байты не удалось разобрать как изображение."""

    stage = "decode"

    def __init__(self, message: str) -> None:
        super().__init__(f"{self.stage}: {message}")
        self.detail = message


class MalformedHeader(IconDecodeError):
    stage = "header"


class TruncatedDirectory(IconDecodeError):
    stage = "directory"


class NoValidEntries(IconDecodeError):
    stage = "directory"


class TruncatedEntry(IconDecodeError):
    stage = "entry"


class UnsupportedDibHeader(IconDecodeError):
    stage = "dib"


class UnsupportedBitDepth(IconDecodeError):
    stage = "dib"


class UnsupportedCompression(IconDecodeError):
    stage = "dib"


class TruncatedPalette(IconDecodeError):
    stage = "palette"


class EmbeddedDecodeFailed(IconDecodeError):
    """Встроенный PNG не декодировался; исходная ошибка в `__cause__`."""

    stage = "png"


class UnsupportedFormat(IconDecodeError):
    stage = "format"


class AssetPathError(ValueError):
    """Ссылку на ресурс не удалось превратить в путь."""

    stage = "path"


class BasePathRequired(AssetPathError):
    pass


class InvalidReference(AssetPathError):
    pass
