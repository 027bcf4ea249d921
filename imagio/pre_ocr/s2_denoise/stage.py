"""
Stage 2: Denoise (Шумоподавление).

Гауссово размытие или билатеральный фильтр (билатеральный приоритетнее,
выбор делает пайплайн). Работают по R, G, B; альфа остаётся 255.
"""

import cv2
import numpy as np
from loguru import logger

from config.settings import BILATERAL_RADIUS, BILATERAL_SIGMA_COLOR, BILATERAL_SIGMA_SPACE
from imagio.pre_ocr.infrastructure.windows import ClampedWindow
from imagio.pre_ocr.pixel_buffer import PixelBuffer


class Denoiser:
    """Stage 2: Denoise."""

    def __init__(
        self,
        radius: int = BILATERAL_RADIUS,
        sigma_color: float = BILATERAL_SIGMA_COLOR,
        sigma_space: float = BILATERAL_SIGMA_SPACE,
    ) -> None:
        self.radius = radius
        self.sigma_color = sigma_color
        self.sigma_space = sigma_space
        logger.debug(
            f"[Stage 2: Denoise] Инициализирован "
            f"(bilateral radius={radius}, sigma_color={sigma_color}, sigma_space={sigma_space})"
        )

    def gaussian_blur(self, buffer: PixelBuffer, sigma: float) -> PixelBuffer:
        """Сепарабельное гауссово размытие; sigma <= 0 -> без изменений."""
        if sigma <= 0:
            return buffer

        blurred = cv2.GaussianBlur(
            np.ascontiguousarray(buffer.rgb),
            (0, 0),
            sigmaX=sigma,
            sigmaY=sigma,
            borderType=cv2.BORDER_REPLICATE,
        )
        logger.debug(f"[Stage 2: Denoise] Gaussian blur sigma={sigma}")
        return PixelBuffer.from_rgb(blurred)

    def bilateral_filter(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Билатеральный фильтр с окном (2r+1)^2 и зажатыми краями.

        w = exp(-d^2 / 2 sigma_space^2) * exp(-c^2 / 2 sigma_color^2),
        d - расстояние в пикселях, c - евклидово расстояние в RGB.
        Результат - нормированная взвешенная сумма, усечённая до uint8.
        """
        rgb = buffer.rgb
        windows = [ClampedWindow(rgb[..., c], self.radius) for c in range(3)]
        center = rgb.astype(np.float64)

        numerator = np.zeros(center.shape, dtype=np.float64)
        denominator = np.zeros(center.shape[:2], dtype=np.float64)

        space_denom = 2.0 * self.sigma_space ** 2
        color_denom = 2.0 * self.sigma_color ** 2

        for (dy, dx, r), (_, _, g), (_, _, b) in zip(*(w.offsets() for w in windows)):
            neighbour = np.dstack([r, g, b]).astype(np.float64)
            color_dist2 = np.sum((neighbour - center) ** 2, axis=2)
            weight = np.exp(-(dy * dy + dx * dx) / space_denom) * np.exp(-color_dist2 / color_denom)
            numerator += neighbour * weight[..., None]
            denominator += weight

        filtered = np.clip(numerator / denominator[..., None], 0, 255).astype(np.uint8)
        logger.debug(f"[Stage 2: Denoise] Bilateral filter radius={self.radius}")
        return PixelBuffer.from_rgb(filtered)
