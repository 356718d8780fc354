"""Разрешение ссылок `file://` на ресурсы (иконки) в пути файловой системы."""
from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from iconprobe.config import COMPOSE_WORKING_DIR_LABEL, FILE_SCHEME
from iconprobe.errors import BasePathRequired, InvalidReference

logger = logging.getLogger(__name__)


def base_path_from_labels(labels: Optional[Mapping[str, str]]) -> str:
    """Возвращает рабочую директорию compose-проекта из label контейнера или ""."""
    if not labels:
        return ""
    return labels.get(COMPOSE_WORKING_DIR_LABEL, "")


def resolve_file_reference(reference: str, base_path: str = "") -> str:
    """Превращает ссылку `file://<path>` в путь.

    Абсолютный путь (начинается с "/") возвращается как есть, `base_path`
    игнорируется. Относительный присоединяется к `base_path` через
    `os.path.join`; сегменты "./" и "../" не нормализуются.

    Raises:
        InvalidReference: ссылка не начинается с "file://".
        BasePathRequired: путь относительный, а `base_path` пуст.
    """
    if not reference.startswith(FILE_SCHEME):
        raise InvalidReference(f"ссылка {reference!r} не использует схему {FILE_SCHEME}")

    path = reference[len(FILE_SCHEME):]
    if path.startswith("/"):
        return path
    if not base_path:
        raise BasePathRequired(f"relative path requires base path: относительный путь {path!r} без базовой директории")

    resolved = os.path.join(base_path, path)
    logger.debug("Resolved %s against %s -> %s", reference, base_path, resolved)
    return resolved
