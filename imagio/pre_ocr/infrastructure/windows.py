"""
Pre-OCR Infrastructure: окно с зажатыми краями (clamped window).

Один аксессор для всех оконных операций (bilateral, Sauvola, adaptive,
шум в Stage 0): координаты за пределами изображения зажимаются к краю,
что эквивалентно паддингу BORDER_REPLICATE.

Суммы по окнам считаются через интегральные изображения (cv2.integral2),
поэтому стоимость не зависит от размера окна.
"""

from typing import Iterator, Tuple

import cv2
import numpy as np
import numpy.typing as npt


class ClampedWindow:
    """
    Квадратное окно (2 * radius + 1)^2 вокруг каждого пикселя канала.

    Все методы возвращают массивы формы исходного канала (H, W).
    """

    def __init__(self, channel: npt.NDArray[np.uint8], radius: int) -> None:
        if channel.ndim != 2:
            raise ValueError(f"Ожидается одноканальный массив, получено {channel.shape}")
        if radius < 0:
            raise ValueError(f"radius должен быть >= 0, получено {radius}")

        self.radius = radius
        self.size = 2 * radius + 1
        self.area = self.size * self.size
        self.height, self.width = channel.shape

        self.padded = cv2.copyMakeBorder(
            np.ascontiguousarray(channel),
            radius, radius, radius, radius,
            cv2.BORDER_REPLICATE
        )
        self._sum, self._sqsum = cv2.integral2(
            self.padded, sdepth=cv2.CV_64F, sqdepth=cv2.CV_64F
        )

    def _box(self, integral: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        k = self.size
        return integral[k:, k:] - integral[:-k, k:] - integral[k:, :-k] + integral[:-k, :-k]

    def sum(self) -> npt.NDArray[np.float64]:
        """Сумма значений в окне (целые числа, точно представимы в float64)."""
        return self._box(self._sum)

    def sqsum(self) -> npt.NDArray[np.float64]:
        return self._box(self._sqsum)

    def mean(self) -> npt.NDArray[np.float64]:
        return self.sum() / self.area

    def variance(self) -> npt.NDArray[np.float64]:
        """Популяционная дисперсия в окне (отрицательные ошибки округления -> 0)."""
        mean = self.mean()
        return np.maximum(self.sqsum() / self.area - mean * mean, 0.0)

    def std(self) -> npt.NDArray[np.float64]:
        return np.sqrt(self.variance())

    def flat(self) -> npt.NDArray[np.bool_]:
        """
        Маска окон без вариации.

        Считается в целых: n * sum(x^2) - (sum x)^2 == 0 точно.
        """
        s = self.sum()
        return self.area * self.sqsum() - s * s <= 0.0

    def offsets(self) -> Iterator[Tuple[int, int, npt.NDArray[np.uint8]]]:
        """
        Сдвинутые представления канала: (dy, dx, view).

        view[y, x] == channel[clamp(y + dy), clamp(x + dx)].
        """
        r = self.radius
        for dy in range(-r, r + 1):
            for dx in range(-r, r + 1):
                yield dy, dx, self.padded[
                    r + dy:r + dy + self.height,
                    r + dx:r + dx + self.width
                ]
