"""
Stage 5: Morphology (Морфология).

Эрозия/дилатация квадратом 3x3 по серому, края зажаты.
Opening = erode -> dilate, Closing = dilate -> erode.
"""

import cv2
import numpy as np
import numpy.typing as npt
from loguru import logger

from config.settings import MIN_WINDOWED_SIZE
from imagio.domain.contracts import MorphologyOperation
from imagio.domain.exceptions import InvalidInputError
from imagio.pre_ocr.pixel_buffer import PixelBuffer

KERNEL = np.ones((3, 3), dtype=np.uint8)


def _erode(gray: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    return cv2.erode(gray, KERNEL, borderType=cv2.BORDER_REPLICATE)  # type: ignore[return-value]


def _dilate(gray: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    return cv2.dilate(gray, KERNEL, borderType=cv2.BORDER_REPLICATE)  # type: ignore[return-value]


class MorphologyEngine:
    """Stage 5: Morphology."""

    def apply(self, buffer: PixelBuffer, operation: MorphologyOperation) -> PixelBuffer:
        if operation == MorphologyOperation.NONE:
            return buffer
        if buffer.width < MIN_WINDOWED_SIZE or buffer.height < MIN_WINDOWED_SIZE:
            raise InvalidInputError(
                f"Изображение {buffer.width}x{buffer.height} слишком мало для морфологии",
                component="MorphologyEngine"
            )

        gray = buffer.grayscale
        if operation == MorphologyOperation.ERODE:
            result = _erode(gray)
        elif operation == MorphologyOperation.DILATE:
            result = _dilate(gray)
        elif operation == MorphologyOperation.OPENING:
            result = _dilate(_erode(gray))
        else:
            result = _erode(_dilate(gray))

        logger.debug(f"[Stage 5: Morphology] {operation.value}")
        return PixelBuffer.from_gray(result)
