"""
Pre-OCR Infrastructure: детекция прямых (преобразование Хафа).

Аккумулятор в пространстве (r, theta): theta с шагом 1 градус в [0, 180),
r = x * cos(theta) + y * sin(theta), округление до целого пикселя.
Пики - локальные максимумы в окрестности radius, набравшие >= threshold голосов.
"""

from typing import List

import cv2
import numpy as np
import numpy.typing as npt

THETA_BINS = 180
_CHUNK = 4096


def hough_accumulator(edges: npt.NDArray[np.uint8]) -> npt.NDArray[np.int64]:
    """Аккумулятор голосов формы (2 * max_r + 1, 180) для ненулевых пикселей."""
    h, w = edges.shape
    max_r = int(np.ceil(np.hypot(w, h)))
    n_r = 2 * max_r + 1

    thetas = np.deg2rad(np.arange(THETA_BINS, dtype=np.float64))
    cos_t = np.cos(thetas)
    sin_t = np.sin(thetas)
    theta_index = np.arange(THETA_BINS, dtype=np.int64)

    accumulator = np.zeros(n_r * THETA_BINS, dtype=np.int64)
    ys, xs = np.nonzero(edges)

    for start in range(0, xs.size, _CHUNK):
        x = xs[start:start + _CHUNK, None].astype(np.float64)
        y = ys[start:start + _CHUNK, None].astype(np.float64)
        r = np.rint(x * cos_t + y * sin_t).astype(np.int64) + max_r
        flat = (r * THETA_BINS + theta_index).ravel()
        accumulator += np.bincount(flat, minlength=accumulator.size)

    return accumulator.reshape(n_r, THETA_BINS)


def detect_line_angles(
    edges: npt.NDArray[np.uint8],
    vote_threshold: int,
    suppression_radius: int,
) -> List[float]:
    """
    Углы theta (градусы, [0, 180)) найденных прямых.

    Args:
        edges: Карта границ (ненулевое = граница)
        vote_threshold: Минимум голосов для прямой
        suppression_radius: Радиус подавления немаксимумов (по r и theta)

    Returns:
        Список theta, по одному на каждый пик (пустой, если прямых нет)
    """
    if not np.any(edges):
        return []

    accumulator = hough_accumulator(edges)
    if accumulator.max() < vote_threshold:
        return []

    size = 2 * suppression_radius + 1
    votes = accumulator.astype(np.float32)
    local_max = cv2.dilate(votes, np.ones((size, size), dtype=np.uint8))

    peaks = (accumulator >= vote_threshold) & (votes >= local_max)
    _, theta_idx = np.nonzero(peaks)
    return [float(t) for t in theta_idx]
