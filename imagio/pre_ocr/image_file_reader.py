"""
Image File Reader для pre-OCR пайплайна.

Чтение и декодирование изображений из файлов в PixelBuffer (RGBA).
Операция отвечает только за чтение файла и декодирование.
"""

from pathlib import Path

import cv2
import numpy as np
from loguru import logger

from imagio.domain.exceptions import ImageDecodingError
from imagio.pre_ocr.pixel_buffer import PixelBuffer

_TO_RGBA = {
    3: cv2.COLOR_BGR2RGBA,
    4: cv2.COLOR_BGRA2RGBA,
}


class ImageFileReader:
    """
    Читает изображение из файла и декодирует в PixelBuffer.

    ЦКП: RGBA буфер с альфой 255.
    """

    @staticmethod
    def decode(raw_bytes: bytes, source: str = "<bytes>") -> PixelBuffer:
        """
        Декодирует байты изображения (PNG, JPEG, BMP, TIFF...).

        Raises:
            ImageDecodingError: Если не удалось декодировать изображение
        """
        nparr = np.frombuffer(raw_bytes, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED) if nparr.size else None

        if image is None:
            raise ImageDecodingError(
                f"Не удалось декодировать изображение: {source}",
                component="ImageFileReader"
            )

        if image.dtype != np.uint8:
            # 16-битные PNG/TIFF -> 8 бит
            image = (image / 257).astype(np.uint8)

        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        else:
            rgba = cv2.cvtColor(image, _TO_RGBA[image.shape[2]])

        return PixelBuffer.from_rgba(rgba)

    @classmethod
    def read(cls, image_path: Path) -> PixelBuffer:
        """
        Читает файл изображения и декодирует в PixelBuffer.

        Raises:
            FileNotFoundError: Если файл не найден
            ImageDecodingError: Если не удалось декодировать изображение
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        # np.fromfile вместо cv2.imread: не-ASCII пути на Windows
        raw_bytes = np.fromfile(str(image_path), dtype=np.uint8).tobytes()
        buffer = cls.decode(raw_bytes, str(image_path))

        logger.debug(
            f"[ImageFileReader] Изображение прочитано: {image_path.name}, "
            f"размер: {buffer.width}x{buffer.height}"
        )
        return buffer
