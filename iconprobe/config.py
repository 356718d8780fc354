"""Настройки декодера и общие константы."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# label, который docker compose ставит на каждый контейнер проекта
COMPOSE_WORKING_DIR_LABEL = "com.docker.compose.project.working_dir"
FILE_SCHEME = "file://"

MAX_DIMENSION_ENV = "ICONPROBE_MAX_DIMENSION"
DEFAULT_MAX_DIMENSION = 4096


@dataclass(frozen=True)
class DecoderSettings:
    """Ограничения, которые декодер применяет к недоверенным данным.

    Если настройки не переданы явно, декодер DIB берёт их из `from_env()`.

    Fields:
        max_dimension: Максимальная ширина/высота DIB-изображения, px.
    """
    max_dimension: int = DEFAULT_MAX_DIMENSION

    @classmethod
    def from_env(cls) -> "DecoderSettings":
        """Читает переопределения из окружения; некорректные значения игнорируются."""
        raw = os.environ.get(MAX_DIMENSION_ENV, "").strip()
        if not raw:
            return cls()
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", MAX_DIMENSION_ENV, raw)
            return cls()
        if value <= 0:
            logger.warning("Ignoring %s=%r: must be positive", MAX_DIMENSION_ENV, raw)
            return cls()
        return cls(max_dimension=value)

