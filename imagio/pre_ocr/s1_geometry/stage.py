"""
Stage 1: Geometry (Геометрия).

Удаление тёмных рамок и коррекция наклона.

Входные данные:
- buffer: PixelBuffer (исходное изображение)

Выходные данные:
- buffer: PixelBuffer (обрезанное и/или выровненное изображение)

Если надёжной коррекции нет (нет контента, нет прямых, угол мал),
возвращается ВХОДНОЙ буфер без изменений.

Соглашение об углах: положительный угол = по часовой стрелке (ось y вниз).
Наклон s - поворот, который был применён к содержимому; коррекция = поворот на -s.
"""

import time
from typing import Optional

import cv2
import numpy as np
import numpy.typing as npt
from loguru import logger

from config.settings import (
    BORDER_CONTENT_RATIO,
    BORDER_MARGIN_DIVISOR,
    BORDER_MIN_MARGIN,
    BORDER_SKIP_AREA_RATIO,
    CANNY_HIGH_THRESHOLD,
    CANNY_LOW_THRESHOLD,
    HOUGH_SUPPRESSION_RADIUS,
    HOUGH_VOTE_THRESHOLD,
    LINE_SKEW_MAX_ANGLE,
    LINE_SKEW_MIN_ANGLE,
    PROJECTION_ANGLE_LIMIT,
    PROJECTION_ANGLE_STEP,
    PROJECTION_SKEW_MIN_ANGLE,
)
from imagio.domain.contracts import SkewMethod
from imagio.pre_ocr.infrastructure.histogram import histogram, otsu_threshold
from imagio.pre_ocr.infrastructure.hough import detect_line_angles
from imagio.pre_ocr.infrastructure.rotation import rotate
from imagio.pre_ocr.pixel_buffer import PixelBuffer


def _content_span(sums: npt.NDArray[np.float64], limit: float):
    content = np.nonzero(sums > limit)[0]
    if content.size == 0:
        return 0, sums.size - 1
    return int(content[0]), int(content[-1])


def normalize_line_angle(theta: float) -> Optional[float]:
    """
    theta нормали прямой -> отклонение от горизонтали/вертикали.

    (45, 135) -> theta - 90; >= 135 -> theta - 180; иначе как есть.
    |угол| >= 45 отбрасывается (None).
    """
    if 45.0 < theta < 135.0:
        angle = theta - 90.0
    elif theta >= 135.0:
        angle = theta - 180.0
    else:
        angle = theta
    if abs(angle) >= LINE_SKEW_MAX_ANGLE:
        return None
    return angle


class GeometricCorrector:
    """
    Stage 1: Geometry.

    Не хранит состояния, безопасен для вызова из нескольких потоков.
    """

    def __init__(self) -> None:
        logger.debug("[Stage 1: Geometry] Инициализирован")

    # ------------------------------------------------------------------
    # Рамки
    # ------------------------------------------------------------------

    def remove_borders(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Обрезает тёмные поля вокруг контента.

        Строка/столбец - контент, если сумма яркостей > 10% от 255 * длина.
        Рамка контента расширяется на max(dim // 50, 2) и зажимается.
        Если обрезка оставляет > 95% площади - буфер возвращается как есть.
        """
        gray = buffer.grayscale.astype(np.float64)
        h, w = gray.shape

        top, bottom = _content_span(gray.sum(axis=1), BORDER_CONTENT_RATIO * 255.0 * w)
        left, right = _content_span(gray.sum(axis=0), BORDER_CONTENT_RATIO * 255.0 * h)

        margin_y = max(h // BORDER_MARGIN_DIVISOR, BORDER_MIN_MARGIN)
        margin_x = max(w // BORDER_MARGIN_DIVISOR, BORDER_MIN_MARGIN)
        top = max(top - margin_y, 0)
        bottom = min(bottom + margin_y, h - 1)
        left = max(left - margin_x, 0)
        right = min(right + margin_x, w - 1)

        crop_w = right - left + 1
        crop_h = bottom - top + 1

        if crop_w * crop_h > BORDER_SKIP_AREA_RATIO * w * h:
            logger.debug("[Stage 1: Geometry] Рамки не найдены, обрезка пропущена")
            return buffer

        logger.debug(
            f"[Stage 1: Geometry] Обрезка рамок: {w}x{h} → {crop_w}x{crop_h} "
            f"(left={left}, top={top})"
        )
        return buffer.crop(left, top, crop_w, crop_h)

    # ------------------------------------------------------------------
    # Наклон
    # ------------------------------------------------------------------

    def correct_skew(self, buffer: PixelBuffer, method: SkewMethod) -> PixelBuffer:
        """Диспетчер по методу коррекции наклона."""
        start = time.perf_counter()
        if method == SkewMethod.PROJECTION:
            angle = self.detect_skew_projection(buffer.grayscale)
            min_angle = PROJECTION_SKEW_MIN_ANGLE
        else:
            angle = self.detect_skew_line_based(buffer.grayscale)
            min_angle = LINE_SKEW_MIN_ANGLE

        elapsed_ms = (time.perf_counter() - start) * 1000

        if angle is None or abs(angle) < min_angle:
            logger.debug(
                f"[Stage 1: Geometry] Наклон не требует коррекции "
                f"(method={method.value}, angle={angle}, {elapsed_ms:.0f}ms)"
            )
            return buffer

        logger.info(
            f"[Stage 1: Geometry] Коррекция наклона: {angle:.2f}° "
            f"(method={method.value}, {elapsed_ms:.0f}ms)"
        )
        return PixelBuffer(rotate(buffer.pixels, -angle, cv2.INTER_LINEAR))

    def detect_skew_line_based(self, gray: npt.NDArray[np.uint8]) -> Optional[float]:
        """
        Наклон по прямым Хафа (среднее по нормализованным углам).

        Returns:
            Угол в градусах или None (нет прямых / нет подходящих углов)
        """
        edges = cv2.Canny(gray, CANNY_LOW_THRESHOLD, CANNY_HIGH_THRESHOLD)
        thetas = detect_line_angles(edges, HOUGH_VOTE_THRESHOLD, HOUGH_SUPPRESSION_RADIUS)
        if not thetas:
            return None

        angles = [a for a in (normalize_line_angle(t) for t in thetas) if a is not None]
        if not angles:
            return None

        avg = float(np.mean(angles))
        logger.debug(f"[Stage 1: Geometry] Хаф: {len(thetas)} прямых, {len(angles)} углов, среднее {avg:.2f}°")
        return avg

    def detect_skew_projection(self, gray: npt.NDArray[np.uint8]) -> float:
        """
        Наклон по проекционному профилю.

        Бинаризация Оцу; для каждого кандидата s в [-10, 10] с шагом 0.1
        бинарное изображение поворачивается на -s, считается дисперсия
        числа "чернильных" (0) пикселей по строкам. Побеждает первый
        строгий максимум выше нуля. Нет чернил или
        все дисперсии нулевые -> 0.
        """
        t = otsu_threshold(histogram(gray))
        binary = np.where(gray > t, 255, 0).astype(np.uint8)

        if not np.any(binary == 0):
            return 0.0

        steps = int(round(2 * PROJECTION_ANGLE_LIMIT / PROJECTION_ANGLE_STEP))
        candidates = [
            round(-PROJECTION_ANGLE_LIMIT + i * PROJECTION_ANGLE_STEP, 1)
            for i in range(steps + 1)
        ]

        best_angle = 0.0
        best_variance = 0.0
        for skew in candidates:
            rotated = rotate(binary, -skew, cv2.INTER_NEAREST)
            profile = np.count_nonzero(rotated == 0, axis=1).astype(np.float64)
            variance = float(profile.var())
            if variance > best_variance:
                best_variance = variance
                best_angle = skew

        return best_angle
