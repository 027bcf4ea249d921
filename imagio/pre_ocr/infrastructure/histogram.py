"""
Pre-OCR Infrastructure: гистограмма и порог Оцу.
"""

import numpy as np
import numpy.typing as npt


def histogram(gray: npt.NDArray[np.uint8]) -> npt.NDArray[np.int64]:
    """256-бинная гистограмма серого изображения."""
    return np.bincount(gray.ravel(), minlength=256).astype(np.int64)


def _kahan_sum(values: npt.NDArray[np.float64]) -> float:
    total = 0.0
    compensation = 0.0
    for value in values:
        y = float(value) - compensation
        t = total + y
        compensation = (t - total) - y
        total = t
    return total


def otsu_threshold(hist: npt.NDArray[np.int64]) -> int:
    """
    Порог Оцу по гистограмме.

    Максимизирует межклассовую дисперсию w_b * w_f * (m_b - m_f)^2
    (веса - доли пикселей). Пустые классы пропускаются, при равенстве
    побеждает первый (меньший) порог. Вырожденная гистограмма
    (один уровень или пустая) -> 0.
    """
    hist = np.asarray(hist, dtype=np.float64)
    total = hist.sum()
    if total <= 0:
        return 0

    weighted_total = _kahan_sum(np.arange(256, dtype=np.float64) * hist)

    sum_background = 0.0
    weight_background = 0.0
    best_variance = 0.0
    threshold = 0

    for t in range(256):
        weight_background += hist[t]
        if weight_background == 0:
            continue
        weight_foreground = total - weight_background
        if weight_foreground == 0:
            break

        sum_background += t * hist[t]
        mean_background = sum_background / weight_background
        mean_foreground = (weighted_total - sum_background) / weight_foreground

        wb = weight_background / total
        wf = weight_foreground / total
        variance = wb * wf * (mean_background - mean_foreground) ** 2

        if variance > best_variance:
            best_variance = variance
            threshold = t

    return threshold
