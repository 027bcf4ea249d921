"""
Image Encoder для pre-OCR пайплайна.

Кодирование PixelBuffer в PNG (без потерь: бинаризованный результат
не должен получить артефакты сжатия перед OCR).
"""

from pathlib import Path

import cv2
import numpy as np
from loguru import logger

from imagio.domain.exceptions import ImageEncodingError
from imagio.pre_ocr.pixel_buffer import PixelBuffer


class ImageEncoder:
    """
    Кодирует PixelBuffer в PNG bytes.

    ЦКП: PNG байты изображения.
    """

    @staticmethod
    def encode(buffer: PixelBuffer, compression: int = 3) -> bytes:
        """
        Кодирует буфер в PNG bytes.

        Args:
            buffer: RGBA буфер
            compression: Уровень сжатия PNG (0-9), по умолчанию 3

        Raises:
            ImageEncodingError: Если не удалось закодировать изображение
        """
        bgra = cv2.cvtColor(buffer.pixels, cv2.COLOR_RGBA2BGRA)
        success, encoded = cv2.imencode(".png", bgra, [cv2.IMWRITE_PNG_COMPRESSION, compression])

        if not success:
            raise ImageEncodingError(
                "Не удалось закодировать изображение в PNG",
                component="ImageEncoder"
            )

        encoded_bytes = encoded.tobytes()
        logger.debug(
            f"[ImageEncoder] Изображение закодировано: {buffer.width}x{buffer.height}, "
            f"размер {len(encoded_bytes)} байт"
        )
        return encoded_bytes

    @classmethod
    def save(cls, buffer: PixelBuffer, path: Path) -> Path:
        """
        Сохраняет буфер как PNG.

        Raises:
            ImageEncodingError: Если не удалось закодировать или записать файл
        """
        path = Path(path)
        data = cls.encode(buffer)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            np.frombuffer(data, dtype=np.uint8).tofile(str(path))
        except OSError as e:
            raise ImageEncodingError(
                f"Не удалось записать файл: {path}",
                component="ImageEncoder",
                original_error=e
            )
        return path
