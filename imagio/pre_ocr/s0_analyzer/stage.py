"""
Stage 0: Analyzer (Анализатор качества).

Вычисляет метрики качества ИСХОДНОГО изображения.
На основе этих метрик адаптивный режим подбирает параметры пайплайна.

КОНТРАКТЫ:
  Выходные: QualityMetrics (все метрики в диапазонах, не NaN/Inf)

Метрики:
  - blur_score: дисперсия лапласиана (внутренние пиксели) / 1000, [0-100]
  - contrast_score: стандартное отклонение серого / 2.55, [0-100]
  - noise_level: средний локальный std в окнах 7x7 (каждый 5-й пиксель), [0-100]
  - brightness_level: средняя яркость, [0-255]
"""

import cv2
import numpy as np
from pydantic import ValidationError
from loguru import logger

from config.settings import (
    BLUR_SCORE_SCALE,
    CONTRAST_SCORE_SCALE,
    MIN_WINDOWED_SIZE,
    NOISE_SAMPLE_STEP,
    NOISE_WINDOW_RADIUS,
)
from imagio.domain.contracts import ContractValidationError, QualityMetrics
from imagio.domain.exceptions import InvalidInputError
from imagio.pre_ocr.infrastructure.windows import ClampedWindow
from imagio.pre_ocr.pixel_buffer import PixelBuffer

# Центр 8, восемь соседей -1
LAPLACIAN_KERNEL = np.array(
    [[-1, -1, -1],
     [-1, 8, -1],
     [-1, -1, -1]],
    dtype=np.float64
)


def _clamp(value: float, low: float, high: float) -> float:
    return float(min(max(value, low), high))


class QualityAssessor:
    """
    Stage 0: Analyzer.

    Чистая функция: буфер -> QualityMetrics, без состояния.
    """

    def __init__(self) -> None:
        logger.debug("[Stage 0: Analyzer] Инициализирован")

    def assess(self, buffer: PixelBuffer) -> QualityMetrics:
        """
        Вычисляет метрики качества.

        Raises:
            InvalidInputError: ширина или высота < 3 (лапласиан 3x3)
            ContractValidationError: если расчёты дали невалидные значения
        """
        if buffer.width < MIN_WINDOWED_SIZE or buffer.height < MIN_WINDOWED_SIZE:
            raise InvalidInputError(
                f"Изображение {buffer.width}x{buffer.height} меньше "
                f"{MIN_WINDOWED_SIZE}x{MIN_WINDOWED_SIZE}",
                component="QualityAssessor"
            )

        gray = buffer.grayscale

        blur_score = self.blur_score(gray)
        contrast_score = _clamp(float(gray.std()) / CONTRAST_SCORE_SCALE, 0.0, 100.0)
        noise_level = self.noise_level(gray)
        brightness_level = float(gray.mean())

        logger.debug(
            f"[Stage 0] Метрики: "
            f"blur={blur_score:.1f}, "
            f"contrast={contrast_score:.1f}, "
            f"noise={noise_level:.1f}, "
            f"brightness={brightness_level:.0f}"
        )

        try:
            return QualityMetrics(
                blur_score=blur_score,
                contrast_score=contrast_score,
                noise_level=noise_level,
                brightness_level=brightness_level,
            )
        except ValidationError as e:
            raise ContractValidationError("S0", "QualityMetrics", e.errors())

    @staticmethod
    def blur_score(gray: np.ndarray) -> float:
        """Средний квадрат отклика лапласиана по внутренним пикселям / 1000."""
        response = cv2.filter2D(gray.astype(np.float64), cv2.CV_64F, LAPLACIAN_KERNEL)
        interior = response[1:-1, 1:-1]
        variance = float(np.mean(interior * interior))
        return _clamp(variance / BLUR_SCORE_SCALE, 0.0, 100.0)

    @staticmethod
    def noise_level(gray: np.ndarray) -> float:
        """
        Средний локальный std в окнах 7x7.

        Центры окон: каждый 5-й пиксель от 3 до (dim - 3) не включительно.
        Нет ни одного центра (сторона < 7) -> 0.
        """
        r = NOISE_WINDOW_RADIUS
        h, w = gray.shape
        window = ClampedWindow(gray, r)
        samples = window.std()[r:h - r:NOISE_SAMPLE_STEP, r:w - r:NOISE_SAMPLE_STEP]
        if samples.size == 0:
            return 0.0
        return _clamp(float(samples.mean()), 0.0, 100.0)
