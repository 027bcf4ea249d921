"""Общие fixtures: синтетические изображения и параметры."""

import numpy as np
import pytest

from config.settings import DEFAULT_PROCESSING_PARAMS
from imagio.domain.contracts import ProcessingParameters
from imagio.pre_ocr.infrastructure.rotation import rotate
from imagio.pre_ocr.pixel_buffer import PixelBuffer


@pytest.fixture
def identity_params():
    """Fixture: параметры, при которых ни одна стадия не включена."""
    return ProcessingParameters(
        contrast=1.0,
        brightness=0.0,
        sharpness=1.0,
        binarization_method="none",
        use_contrast_enhancement=False,
        gaussian_blur=0.0,
        bilateral_filter=False,
        morphology="none",
        correct_skew=False,
        skew_method="line_based",
        remove_borders=False,
        adaptive_mode=False,
    )


@pytest.fixture
def default_params():
    """Fixture: параметры по умолчанию из config/settings.py."""
    return ProcessingParameters(**DEFAULT_PROCESSING_PARAMS)


@pytest.fixture
def make_gray():
    """Fixture: фабрика серого буфера из 2D массива."""
    def _make(gray):
        return PixelBuffer.from_gray(np.asarray(gray, dtype=np.uint8))
    return _make


@pytest.fixture
def flat_gray():
    """Fixture: однородный серый 100x100, без шума."""
    return PixelBuffer.from_gray(np.full((100, 100), 128, dtype=np.uint8))


@pytest.fixture
def checkerboard():
    """Fixture: шахматная доска с клеткой 1 пиксель, 64x64."""
    yy, xx = np.indices((64, 64))
    gray = np.where((yy + xx) % 2 == 0, 0, 255).astype(np.uint8)
    return PixelBuffer.from_gray(gray)


@pytest.fixture
def text_like():
    """Fixture: белый 200x120 с тёмными горизонтальными штрихами и серым шумом."""
    rng = np.random.default_rng(7)
    gray = np.full((120, 200), 230, dtype=np.uint8)
    for y in range(15, 110, 12):
        gray[y:y + 4, 20:180] = 30
    noise = rng.integers(-20, 21, size=gray.shape)
    gray = np.clip(gray.astype(np.int32) + noise, 0, 255).astype(np.uint8)
    return PixelBuffer.from_gray(gray)


@pytest.fixture
def make_skewed_lines():
    """
    Fixture: фабрика "страницы" с длинными тёмными строками, повёрнутой на angle.

    Положительный угол = по часовой стрелке.
    """
    def _make(angle, width=800, height=600, length=700, thickness=4, spacing=25):
        gray = np.full((height, width), 255, dtype=np.uint8)
        left = (width - length) // 2
        for y in range(100, height - 100, spacing):
            gray[y:y + thickness, left:left + length] = 0
        rgba = PixelBuffer.from_gray(gray).pixels
        return PixelBuffer(rotate(rgba, angle))
    return _make
