"""
Stage 6: Binarization (Бинаризация).

Всегда последняя стадия. Каждый пиксель результата - ровно
(0, 0, 0, 255) или (255, 255, 255, 255).

Методы:
  - adaptive: локальное среднее в окне 15x15; пиксель >= среднего -> белый.
    Окно без вариации сравнивается с серединой шкалы (128).
  - otsu: глобальный порог Оцу; пиксель > порога -> белый.
  - mean: порог = floor(средняя яркость); пиксель > порога -> белый.
  - sauvola: T = m * (1 + k * (s / R - 1)) в окне 15x15; пиксель > T -> белый.

Все методы идемпотентны: повторное применение к 0/255 ничего не меняет.
"""

from typing import Callable, Dict

import numpy as np
import numpy.typing as npt
from loguru import logger

from config.settings import (
    ADAPTIVE_BLOCK_SIZE,
    ADAPTIVE_FLAT_MIDPOINT,
    SAUVOLA_K,
    SAUVOLA_R,
    SAUVOLA_WINDOW_SIZE,
)
from imagio.domain.contracts import BinarizationMethod
from imagio.pre_ocr.infrastructure.histogram import histogram, otsu_threshold
from imagio.pre_ocr.infrastructure.windows import ClampedWindow
from imagio.pre_ocr.pixel_buffer import PixelBuffer

Mask = npt.NDArray[np.bool_]


def adaptive_mask(gray: npt.NDArray[np.uint8], block_size: int = ADAPTIVE_BLOCK_SIZE) -> Mask:
    window = ClampedWindow(gray, block_size // 2)
    # pixel >= sum / n, без деления (точно в целых)
    white = gray.astype(np.float64) * window.area >= window.sum()
    flat = window.flat()
    return np.where(flat, gray >= ADAPTIVE_FLAT_MIDPOINT, white)


def otsu_mask(gray: npt.NDArray[np.uint8]) -> Mask:
    threshold = otsu_threshold(histogram(gray))
    logger.debug(f"[Stage 6: Binarization] Otsu threshold={threshold}")
    return gray > threshold


def mean_mask(gray: npt.NDArray[np.uint8]) -> Mask:
    threshold = int(gray.sum(dtype=np.int64) // gray.size)
    logger.debug(f"[Stage 6: Binarization] Mean threshold={threshold}")
    return gray > threshold


def sauvola_mask(
    gray: npt.NDArray[np.uint8],
    window_size: int = SAUVOLA_WINDOW_SIZE,
    k: float = SAUVOLA_K,
    r: float = SAUVOLA_R,
) -> Mask:
    window = ClampedWindow(gray, window_size // 2)
    threshold = window.mean() * (1.0 + k * (window.std() / r - 1.0))
    return gray.astype(np.float64) > threshold


_METHODS: Dict[BinarizationMethod, Callable[[npt.NDArray[np.uint8]], Mask]] = {
    BinarizationMethod.ADAPTIVE: adaptive_mask,
    BinarizationMethod.OTSU: otsu_mask,
    BinarizationMethod.MEAN: mean_mask,
    BinarizationMethod.SAUVOLA: sauvola_mask,
}


class Binarizer:
    """Stage 6: Binarization."""

    def binarize(self, buffer: PixelBuffer, method: BinarizationMethod) -> PixelBuffer:
        if method == BinarizationMethod.NONE:
            return buffer

        mask = _METHODS[method](buffer.grayscale)
        binary = np.where(mask, 255, 0).astype(np.uint8)

        logger.debug(
            f"[Stage 6: Binarization] {method.value}: "
            f"белых {int(mask.sum())}/{mask.size}"
        )
        return PixelBuffer.from_gray(binary)
