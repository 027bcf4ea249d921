"""
PixelBuffer - единица данных, которая течёт через пайплайн.

Плотный массив H x W x 4 (R, G, B, A), uint8, альфа всегда 255.
Оттенки серого вычисляются по запросу и не кэшируются.

Каждая стадия получает буфер и возвращает НОВЫЙ буфер: массив копируется
при создании и помечается read-only, поэтому изменения in-place
невозможны через границы стадий.
"""

from dataclasses import dataclass

import cv2
import numpy as np
import numpy.typing as npt
from PIL import Image

from imagio.domain.exceptions import InvalidInputError

OPAQUE = 255


def _require_uint8(array: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    array = np.asarray(array)
    if array.dtype != np.uint8:
        raise InvalidInputError(
            f"Ожидается uint8, получено {array.dtype}",
            component="PixelBuffer"
        )
    return array


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """RGBA8 изображение (read-only)."""

    pixels: npt.NDArray[np.uint8]

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidInputError(
                f"Ожидается массив H x W x 4, получено {pixels.shape}",
                component="PixelBuffer"
            )
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise InvalidInputError(
                f"Пустой буфер: {pixels.shape[1]}x{pixels.shape[0]}",
                component="PixelBuffer"
            )
        if pixels.dtype != np.uint8:
            raise InvalidInputError(
                f"Ожидается uint8, получено {pixels.dtype}",
                component="PixelBuffer"
            )

        owned = np.array(pixels, dtype=np.uint8, copy=True, order="C")
        owned.flags.writeable = False
        object.__setattr__(self, "pixels", owned)

    # ------------------------------------------------------------------
    # Конструкторы (альфа принудительно 255)
    # ------------------------------------------------------------------

    @classmethod
    def from_rgba(cls, rgba: npt.NDArray[np.uint8]) -> "PixelBuffer":
        pixels = _require_uint8(rgba).copy()
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            pixels[..., 3] = OPAQUE
        return cls(pixels)

    @classmethod
    def from_rgb(cls, rgb: npt.NDArray[np.uint8]) -> "PixelBuffer":
        rgb = _require_uint8(rgb)
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise InvalidInputError(
                f"Ожидается массив H x W x 3, получено {rgb.shape}",
                component="PixelBuffer"
            )
        alpha = np.full(rgb.shape[:2] + (1,), OPAQUE, dtype=np.uint8)
        return cls(np.concatenate([rgb, alpha], axis=2))

    @classmethod
    def from_gray(cls, gray: npt.NDArray[np.uint8]) -> "PixelBuffer":
        """Серый -> RGBA: значение реплицируется в R, G, B."""
        gray = _require_uint8(gray)
        if gray.ndim != 2:
            raise InvalidInputError(
                f"Ожидается массив H x W, получено {gray.shape}",
                component="PixelBuffer"
            )
        alpha = np.full(gray.shape, OPAQUE, dtype=np.uint8)
        return cls(np.dstack([gray, gray, gray, alpha]))

    @classmethod
    def from_pil(cls, image: Image.Image) -> "PixelBuffer":
        return cls.from_rgba(np.asarray(image.convert("RGBA")))

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.array(self.pixels))

    # ------------------------------------------------------------------
    # Производные представления
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def rgb(self) -> npt.NDArray[np.uint8]:
        return self.pixels[..., :3]

    @property
    def grayscale(self) -> npt.NDArray[np.uint8]:
        """Яркость (luma), вычисляется при каждом обращении."""
        return cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2GRAY)

    def crop(self, left: int, top: int, width: int, height: int) -> "PixelBuffer":
        """Вырезает прямоугольник [left, left+width) x [top, top+height)."""
        if width < 1 or height < 1:
            raise InvalidInputError(
                f"Пустая область обрезки: {width}x{height}",
                component="PixelBuffer"
            )
        if left < 0 or top < 0 or left + width > self.width or top + height > self.height:
            raise InvalidInputError(
                f"Область ({left}, {top}, {width}x{height}) вне буфера {self.width}x{self.height}",
                component="PixelBuffer"
            )
        return PixelBuffer(self.pixels[top:top + height, left:left + width])

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
