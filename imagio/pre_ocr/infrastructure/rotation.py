"""
Pre-OCR Infrastructure: поворот изображения вокруг центра.

Положительный угол = поворот по часовой стрелке в координатах изображения
(ось y вниз). Области за пределами исходника заливаются белым.
"""

import cv2
import numpy as np
import numpy.typing as npt

WHITE_RGBA = (255, 255, 255, 255)


def rotate(
    image: npt.NDArray[np.uint8],
    angle: float,
    interpolation: int = cv2.INTER_LINEAR,
) -> npt.NDArray[np.uint8]:
    """
    Поворачивает изображение на angle градусов по часовой стрелке.

    Размер не меняется (углы обрезаются), фон белый.

    Args:
        image: (H, W) или (H, W, C) uint8
        angle: Угол в градусах
        interpolation: cv2.INTER_LINEAR (цвет) или cv2.INTER_NEAREST (бинарное)
    """
    h, w = image.shape[:2]
    center = ((w - 1) / 2.0, (h - 1) / 2.0)
    # cv2 считает положительный угол против часовой стрелки
    matrix = cv2.getRotationMatrix2D(center, -angle, 1.0)
    border = 255 if image.ndim == 2 else WHITE_RGBA[:image.shape[2]]
    return cv2.warpAffine(
        image,
        matrix,
        (w, h),
        flags=interpolation,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=border,
    )  # type: ignore[return-value]
