import numpy as np
import pytest

from imagio.domain.exceptions import InvalidInputError
from imagio.pre_ocr.pixel_buffer import PixelBuffer
from imagio.pre_ocr.s0_analyzer.stage import QualityAssessor


@pytest.fixture
def assessor():
    """Fixture для QualityAssessor."""
    return QualityAssessor()


def test_flat_image_has_no_blur_response_and_no_noise(assessor, flat_gray):
    """Тест: однородный серый → blur ≈ 0, noise ≈ 0, contrast ≈ 0."""
    metrics = assessor.assess(flat_gray)

    assert metrics.blur_score == pytest.approx(0.0)
    assert metrics.noise_level == pytest.approx(0.0)
    assert metrics.contrast_score == pytest.approx(0.0)
    assert metrics.brightness_level == pytest.approx(128.0)


def test_checkerboard_is_maximally_sharp(assessor, checkerboard):
    """Тест: шахматная доска 1px → blur_score на верхней границе."""
    metrics = assessor.assess(checkerboard)

    assert metrics.blur_score == pytest.approx(100.0)
    # Проверка: половина пикселей 0, половина 255 → std 127.5 → 50
    assert metrics.contrast_score == pytest.approx(50.0)
    assert metrics.noise_level > 50.0


def test_noisy_text_has_noise_and_brightness(assessor, text_like):
    """Тест: шумный текст → ненулевой шум, светлый фон."""
    metrics = assessor.assess(text_like)

    assert 0.0 < metrics.noise_level <= 100.0
    assert metrics.brightness_level > 150.0
    assert 0.0 <= metrics.blur_score <= 100.0


def test_small_image_has_zero_noise_samples(assessor):
    """Тест: сторона < 7 → ни одного окна шума → noise_level = 0."""
    rng = np.random.default_rng(3)
    gray = rng.integers(0, 256, size=(6, 40), dtype=np.uint8)

    metrics = assessor.assess(PixelBuffer.from_gray(gray))

    assert metrics.noise_level == 0.0


@pytest.mark.parametrize("shape", [(2, 10), (10, 2), (1, 1)])
def test_too_small_for_laplacian(assessor, shape):
    """Тест: ширина или высота < 3 → InvalidInputError."""
    buffer = PixelBuffer.from_gray(np.zeros(shape, dtype=np.uint8))

    with pytest.raises(InvalidInputError):
        assessor.assess(buffer)


def test_blur_uses_interior_pixels_only(assessor):
    """Тест: 3x3 → один внутренний пиксель, края не влияют."""
    gray = np.zeros((3, 3), dtype=np.uint8)
    gray[1, 1] = 10

    metrics = assessor.assess(PixelBuffer.from_gray(gray))

    # Проверка: отклик 8 * 10 = 80, 80^2 / 1000 = 6.4
    assert metrics.blur_score == pytest.approx(6.4)
