"""
Stage 3: Tone (Тон).

Яркость, контраст и резкость (unsharp mask по 4 соседям).
Все операции по R, G, B; результат зажимается в [0, 255] и усекается.
"""

import numpy as np
import numpy.typing as npt
from loguru import logger

from config.settings import MIN_WINDOWED_SIZE
from imagio.domain.exceptions import InvalidInputError
from imagio.pre_ocr.pixel_buffer import PixelBuffer


def _to_uint8(values: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    return np.clip(values, 0, 255).astype(np.uint8)


class ToneAdjuster:
    """Stage 3: Tone."""

    def adjust_brightness(self, buffer: PixelBuffer, brightness: float) -> PixelBuffer:
        """v + brightness * 255."""
        shifted = buffer.rgb.astype(np.float64) + brightness * 255.0
        return PixelBuffer.from_rgb(_to_uint8(shifted))

    def adjust_contrast(self, buffer: PixelBuffer, contrast: float) -> PixelBuffer:
        """(v - 128) * contrast + 128."""
        scaled = (buffer.rgb.astype(np.float64) - 128.0) * contrast + 128.0
        return PixelBuffer.from_rgb(_to_uint8(scaled))

    def sharpen(self, buffer: PixelBuffer, sharpness: float) -> PixelBuffer:
        """
        Unsharp mask: center + amount * (center - avg4), amount = (s - 1) * 2.

        Только внутренние пиксели; внешняя рамка в 1 пиксель копируется.
        sharpness <= 1.0 -> без изменений.
        """
        if sharpness <= 1.0:
            return buffer
        if buffer.width < MIN_WINDOWED_SIZE or buffer.height < MIN_WINDOWED_SIZE:
            raise InvalidInputError(
                f"Изображение {buffer.width}x{buffer.height} слишком мало для резкости",
                component="ToneAdjuster"
            )

        amount = (sharpness - 1.0) * 2.0
        src = buffer.rgb.astype(np.float64)
        center = src[1:-1, 1:-1]
        avg4 = (src[:-2, 1:-1] + src[2:, 1:-1] + src[1:-1, :-2] + src[1:-1, 2:]) / 4.0

        out = buffer.rgb.copy()
        out[1:-1, 1:-1] = _to_uint8(center + amount * (center - avg4))

        logger.debug(f"[Stage 3: Tone] Резкость amount={amount:.2f}")
        return PixelBuffer.from_rgb(out)
