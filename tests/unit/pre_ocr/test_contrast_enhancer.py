import numpy as np

from imagio.pre_ocr.pixel_buffer import PixelBuffer
from imagio.pre_ocr.s4_contrast.stage import ContrastEnhancer


def test_two_levels_are_stretched():
    """Тест: половина 100, половина 150 → 127 и 255."""
    gray = np.full((10, 10), 100, dtype=np.uint8)
    gray[5:] = 150

    result = ContrastEnhancer().equalize(PixelBuffer.from_gray(gray))

    assert np.all(result.grayscale[:5] == 127)
    assert np.all(result.grayscale[5:] == 255)


def test_output_is_gray_and_opaque():
    """Тест: результат реплицирован в R, G, B, альфа 255."""
    rgb = np.zeros((6, 6, 3), dtype=np.uint8)
    rgb[..., 0] = np.arange(6, dtype=np.uint8) * 40

    result = ContrastEnhancer().equalize(PixelBuffer.from_rgb(rgb))

    assert np.array_equal(result.pixels[..., 0], result.pixels[..., 1])
    assert np.array_equal(result.pixels[..., 1], result.pixels[..., 2])
    assert np.all(result.pixels[..., 3] == 255)


def test_brightest_level_maps_to_white():
    """Тест: cdf последнего уровня = total → 255."""
    rng = np.random.default_rng(4)
    gray = rng.integers(30, 90, size=(16, 16), dtype=np.uint8)

    result = ContrastEnhancer().equalize(PixelBuffer.from_gray(gray)).grayscale

    assert result[gray == gray.max()].min() == 255
    # Проверка: монотонность LUT
    order = np.argsort(gray.ravel(), kind="stable")
    assert np.all(np.diff(result.ravel()[order].astype(int)) >= 0)
