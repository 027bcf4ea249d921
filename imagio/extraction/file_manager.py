"""
Хранилище обработанных изображений во временной директории.

Имена файлов: <prefix><секунды>_<наносекунды>.png (уникальны в пределах
процесса). Очистка удаляет только файлы Imagio старше max_age.
"""

import time
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from loguru import logger

from config.settings import (
    PROCESSED_FILE_PREFIX,
    SCREENSHOT_FILE_PREFIX,
    TEMP_DIR,
    TEMP_FILE_MAX_AGE_HOURS,
)
from imagio.pre_ocr.image_encoder import ImageEncoder
from imagio.pre_ocr.pixel_buffer import PixelBuffer


class ProcessedImageStore:
    """Менеджер временных файлов препроцессинга."""

    def __init__(self, temp_dir: Optional[Path] = None) -> None:
        self.temp_dir = Path(temp_dir) if temp_dir is not None else TEMP_DIR

    def new_path(self, prefix: str = PROCESSED_FILE_PREFIX) -> Path:
        now_ns = time.time_ns()
        secs, nanos = divmod(now_ns, 1_000_000_000)
        return self.temp_dir / f"{prefix}{secs}_{nanos}.png"

    def save(self, buffer: PixelBuffer) -> Path:
        """
        Сохраняет обработанный буфер как PNG.

        Raises:
            ImageEncodingError: Если не удалось закодировать или записать файл
        """
        path = self.new_path()
        while path.exists():
            path = self.new_path()
        ImageEncoder.save(buffer, path)
        logger.debug(f"[ProcessedImageStore] Сохранено: {path}")
        return path

    def cleanup_old_files(self, max_age: Optional[timedelta] = None) -> List[Path]:
        """
        Удаляет файлы Imagio (processed / screenshot) старше max_age.

        Args:
            max_age: Максимальный возраст (по умолчанию TEMP_FILE_MAX_AGE_HOURS)

        Returns:
            Список удалённых файлов
        """
        if max_age is None:
            max_age = timedelta(hours=TEMP_FILE_MAX_AGE_HOURS)

        if not self.temp_dir.exists():
            return []

        cutoff = time.time() - max_age.total_seconds()
        removed: List[Path] = []

        for path in self.temp_dir.iterdir():
            if not path.name.startswith((PROCESSED_FILE_PREFIX, SCREENSHOT_FILE_PREFIX)):
                continue
            if not path.is_file():
                continue
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed.append(path)
                    logger.debug(f"[Cleanup] Удалён старый временный файл: {path}")
            except FileNotFoundError:
                # Удалён параллельно
                continue

        if removed:
            logger.info(f"[Cleanup] Удалено временных файлов: {len(removed)}")
        return removed
