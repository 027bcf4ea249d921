"""
Stage 4: Contrast Enhancement (Выравнивание гистограммы).

Исторически называется CLAHE, но это ГЛОБАЛЬНОЕ выравнивание гистограммы
яркости, без тайлов и ограничения контраста.
"""

import numpy as np
from loguru import logger

from imagio.pre_ocr.infrastructure.histogram import histogram
from imagio.pre_ocr.pixel_buffer import PixelBuffer


class ContrastEnhancer:
    """Stage 4: Contrast Enhancement."""

    def equalize(self, buffer: PixelBuffer) -> PixelBuffer:
        """lut[v] = floor(255 * cdf[v] / total); результат серый."""
        gray = buffer.grayscale
        cdf = np.cumsum(histogram(gray))
        lut = np.floor(255.0 * cdf / cdf[-1]).astype(np.uint8)

        logger.debug(f"[Stage 4: Contrast] Выравнивание гистограммы, lut[0]={lut[0]}, lut[255]={lut[255]}")
        return PixelBuffer.from_gray(lut[gray])
